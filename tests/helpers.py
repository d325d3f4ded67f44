import asyncio
from datetime import datetime, timezone

FIXED_NOW = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)

ACCOUNT_PAYLOAD = {
    "data": {
        "balance": 10000.00,
        "equity": 10250.50,
        "margin": 1500.00,
        "freeMargin": 8750.50,
        "marginLevel": 683.37,
        "profit": 250.50,
        "currency": "USD",
    }
}

POSITIONS_PAYLOAD = {
    "data": [
        {
            "ticket": 123456,
            "symbol": "XAUUSD",
            "type": "BUY",
            "volume": 0.10,
            "openPrice": 2025.50,
            "currentPrice": 2028.75,
            "profit": 32.50,
            "swap": -5.20,
            "commission": -10.00,
            "openTime": "2024-01-15 10:30:00",
        },
        {
            "ticket": 123457,
            "symbol": "EURUSD",
            "type": "SELL",
            "volume": 0.50,
            "openPrice": 1.0850,
            "currentPrice": 1.0845,
            "profit": 25.00,
            "swap": -2.50,
            "commission": -5.00,
            "openTime": "2024-01-15 14:15:00",
        },
    ]
}

HISTORY_PAYLOAD = {
    "data": [
        {
            "ticket": 123450,
            "symbol": "GBPUSD",
            "type": "BUY",
            "volume": 0.30,
            "openPrice": 1.2650,
            "closePrice": 1.2680,
            "profit": 90.00,
            "openTime": "2024-01-14 09:00:00",
            "closeTime": "2024-01-14 15:30:00",
        }
    ]
}


class FakeClient:
    """Stands in for MetaTraderApiClient; a value that is an exception is raised."""

    def __init__(self, account=ACCOUNT_PAYLOAD, positions=POSITIONS_PAYLOAD, history=HISTORY_PAYLOAD):
        self.responses = {"account": account, "positions": positions, "history": history}
        self.calls = []
        self.history_args = None
        self.gate = None
        self.started = asyncio.Event()

    async def _respond(self, name, token):
        self.calls.append((name, token))
        value = self.responses[name]
        gate = self.gate
        if name == "positions":
            self.started.set()
            if gate is not None:
                await gate.wait()
        if isinstance(value, Exception):
            raise value
        return value

    async def fetch_account_info(self, token):
        return await self._respond("account", token)

    async def fetch_positions(self, token):
        return await self._respond("positions", token)

    async def fetch_history(self, token, from_date, to_date):
        self.history_args = (from_date, to_date)
        return await self._respond("history", token)


