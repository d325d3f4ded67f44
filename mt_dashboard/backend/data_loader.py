"""
Data loading functions for MetaTrader Account Dashboard
Handles payload parsing and the polling protocol that keeps the account
snapshot, open positions and closed-trade history current.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Set, Tuple, Union

from .. import config
from .api_client import MetaTraderApiClient
from .data_processor import aggregate_positions
from .errors import AuthExpired, DashboardError, MalformedResponse, TransportFailure
from .models import AccountSnapshot, DashboardData, HistoryTrade, Position, Side, SymbolSummary
from .session_manager import SessionGuard

logger = logging.getLogger(__name__)

ACCOUNT_INFO_ENDPOINT = config.ACCOUNT_INFO_ENDPOINT
POSITIONS_ENDPOINT = config.POSITIONS_ENDPOINT
HISTORY_ENDPOINT = config.HISTORY_ENDPOINT
HISTORY_WINDOW_DAYS = config.HISTORY_WINDOW_DAYS
REQUEST_TIMEOUT_SECONDS = config.REQUEST_TIMEOUT_SECONDS


# ------------------------------------------------------------
# Payload parsing
# ------------------------------------------------------------

def parse_timestamp(value: Any) -> Optional[datetime]:
    if not value or not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None


def _field(raw: Dict, key: str, endpoint: str) -> Any:
    value = raw.get(key)
    if value is None:
        raise MalformedResponse(f"Missing field '{key}'", endpoint=endpoint)
    return value


def _to_decimal(value: Any, key: str, endpoint: str) -> Decimal:
    if isinstance(value, bool):
        raise MalformedResponse(f"Field '{key}' is not numeric", endpoint=endpoint)
    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise MalformedResponse(f"Field '{key}' is not numeric", endpoint=endpoint)
    if not number.is_finite():
        raise MalformedResponse(f"Field '{key}' is not finite", endpoint=endpoint)
    return number


def _decimal(raw: Dict, key: str, endpoint: str) -> Decimal:
    return _to_decimal(_field(raw, key, endpoint), key, endpoint)


def _optional_decimal(raw: Dict, key: str, endpoint: str, default: Optional[Decimal] = None) -> Optional[Decimal]:
    value = raw.get(key)
    if value is None:
        return default
    return _to_decimal(value, key, endpoint)


def _to_integer(value: Any, key: str, endpoint: str) -> int:
    number = _to_decimal(value, key, endpoint)
    if number != number.to_integral_value():
        raise MalformedResponse(f"Field '{key}' is not an integer", endpoint=endpoint)
    return int(number)


def _ticket(raw: Dict, endpoint: str) -> int:
    return _to_integer(_field(raw, "ticket", endpoint), "ticket", endpoint)


def _side(raw: Dict, endpoint: str) -> Side:
    value = str(_field(raw, "type", endpoint)).upper()
    if value not in Side.__members__:
        raise MalformedResponse(f"Unknown trade type '{value}'", endpoint=endpoint)
    return Side[value]


def _volume(raw: Dict, endpoint: str) -> Decimal:
    volume = _decimal(raw, "volume", endpoint)
    if volume <= 0:
        raise MalformedResponse("Field 'volume' must be positive", endpoint=endpoint)
    return volume


def _symbol(raw: Dict, endpoint: str) -> str:
    symbol = _field(raw, "symbol", endpoint)
    if not isinstance(symbol, str) or not symbol:
        raise MalformedResponse("Field 'symbol' is not a string", endpoint=endpoint)
    return symbol


def _unwrap(payload: Any, endpoint: str) -> Any:
    if not isinstance(payload, dict) or "data" not in payload:
        raise MalformedResponse("Response has no 'data' field", endpoint=endpoint)
    return payload["data"]


def _unwrap_list(payload: Any, endpoint: str) -> List[Dict]:
    data = _unwrap(payload, endpoint)
    if not isinstance(data, list):
        raise MalformedResponse("'data' is not a list", endpoint=endpoint)
    for item in data:
        if not isinstance(item, dict):
            raise MalformedResponse("List entry is not an object", endpoint=endpoint)
    return data


def parse_account_snapshot(payload: Any) -> AccountSnapshot:
    endpoint = ACCOUNT_INFO_ENDPOINT
    raw = _unwrap(payload, endpoint)
    if not isinstance(raw, dict):
        raise MalformedResponse("'data' is not an object", endpoint=endpoint)
    currency = _field(raw, "currency", endpoint)
    if not isinstance(currency, str):
        raise MalformedResponse("Field 'currency' is not a string", endpoint=endpoint)
    leverage = raw.get("leverage")
    return AccountSnapshot(
        balance=_decimal(raw, "balance", endpoint),
        equity=_decimal(raw, "equity", endpoint),
        margin=_decimal(raw, "margin", endpoint),
        free_margin=_decimal(raw, "freeMargin", endpoint),
        margin_level=_decimal(raw, "marginLevel", endpoint),
        profit=_decimal(raw, "profit", endpoint),
        currency=currency,
        name=raw.get("name"),
        leverage=_to_integer(leverage, "leverage", endpoint) if isinstance(leverage, (int, float)) else None,
        company=raw.get("company"),
    )


def parse_position(raw: Dict, endpoint: str = POSITIONS_ENDPOINT) -> Position:
    return Position(
        ticket=_ticket(raw, endpoint),
        symbol=_symbol(raw, endpoint),
        side=_side(raw, endpoint),
        volume=_volume(raw, endpoint),
        open_price=_decimal(raw, "openPrice", endpoint),
        current_price=_decimal(raw, "currentPrice", endpoint),
        profit=_decimal(raw, "profit", endpoint),
        swap=_optional_decimal(raw, "swap", endpoint, Decimal("0")),
        commission=_optional_decimal(raw, "commission", endpoint, Decimal("0")),
        open_time=parse_timestamp(raw.get("openTime")),
        stop_loss=_optional_decimal(raw, "stopLoss", endpoint),
        take_profit=_optional_decimal(raw, "takeProfit", endpoint),
        comment=raw.get("comment"),
    )


def parse_history_trade(raw: Dict, endpoint: str = HISTORY_ENDPOINT) -> HistoryTrade:
    return HistoryTrade(
        ticket=_ticket(raw, endpoint),
        symbol=_symbol(raw, endpoint),
        side=_side(raw, endpoint),
        volume=_volume(raw, endpoint),
        open_price=_decimal(raw, "openPrice", endpoint),
        close_price=_decimal(raw, "closePrice", endpoint),
        profit=_decimal(raw, "profit", endpoint),
        open_time=parse_timestamp(raw.get("openTime")),
        close_time=parse_timestamp(raw.get("closeTime")),
        swap=_optional_decimal(raw, "swap", endpoint, Decimal("0")),
        commission=_optional_decimal(raw, "commission", endpoint, Decimal("0")),
        comment=raw.get("comment"),
    )


def parse_positions(payload: Any) -> Tuple[Position, ...]:
    return tuple(parse_position(item) for item in _unwrap_list(payload, POSITIONS_ENDPOINT))


def parse_history(payload: Any) -> Tuple[HistoryTrade, ...]:
    return tuple(parse_history_trade(item) for item in _unwrap_list(payload, HISTORY_ENDPOINT))


def history_window(now: datetime, days: int = HISTORY_WINDOW_DAYS) -> Tuple[datetime, datetime]:
    return now - timedelta(days=days), now


# ------------------------------------------------------------
# Loader state
# ------------------------------------------------------------

@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Loading:
    initial: bool
    last_good: Optional[DashboardData] = None


@dataclass(frozen=True)
class Loaded:
    data: DashboardData


@dataclass(frozen=True)
class Errored:
    error: DashboardError
    last_good: Optional[DashboardData] = None

    @property
    def is_hard_error(self) -> bool:
        return self.last_good is None


LoaderState = Union[Idle, Loading, Loaded, Errored]


class LoadStatus(str, Enum):
    LOADED = "loaded"
    FAILED = "failed"
    REDIRECT = "redirect"
    DISCARDED = "discarded"


@dataclass(frozen=True)
class LoadOutcome:
    status: LoadStatus
    error: Optional[DashboardError] = None

    @property
    def redirect(self) -> bool:
        return self.status is LoadStatus.REDIRECT


@dataclass(frozen=True)
class Notification:
    level: str
    title: str
    message: str


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AccountDataLoader:
    """Single writer of the dashboard data.

    Every ``load`` takes a sequence number when it starts. A result is only
    applied if no later-started load has been applied already, so a slow
    refresh can never overwrite fresher data.
    """

    def __init__(
        self,
        guard: SessionGuard,
        client: MetaTraderApiClient,
        timeout_seconds: float = REQUEST_TIMEOUT_SECONDS,
        on_redirect: Optional[Callable[[], None]] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.guard = guard
        self.client = client
        self.timeout_seconds = timeout_seconds
        self.on_redirect = on_redirect
        self.clock = clock
        self.state: LoaderState = Idle()
        self._data: Optional[DashboardData] = None
        self._seq = 0
        self._applied_seq = 0
        self._closed = False
        self._timer: Optional[asyncio.Task] = None
        self._in_flight: Set[asyncio.Task] = set()

    # -- read side --------------------------------------------

    @property
    def data(self) -> Optional[DashboardData]:
        return self._data

    @property
    def snapshot(self) -> Optional[AccountSnapshot]:
        return self._data.snapshot if self._data else None

    @property
    def positions(self) -> Tuple[Position, ...]:
        return self._data.positions if self._data else ()

    @property
    def history(self) -> Tuple[HistoryTrade, ...]:
        return self._data.history if self._data else ()

    @property
    def last_updated(self) -> Optional[datetime]:
        return self._data.updated_at if self._data else None

    @property
    def closed(self) -> bool:
        return self._closed

    def summaries(self) -> List[SymbolSummary]:
        return aggregate_positions(self.positions)

    # -- load protocol ----------------------------------------

    def _redirect(self, error: AuthExpired) -> LoadOutcome:
        self.guard.clear()
        self.cancel_auto_refresh()
        if not self._closed:
            self.state = Errored(error, self._data)
        if self.on_redirect is not None:
            self.on_redirect()
        return LoadOutcome(LoadStatus.REDIRECT, error)

    async def _fetch_all(self, token: str) -> List[Any]:
        """One result or exception per endpoint, in request order.

        Requests still pending at the timeout become ``TransportFailure``;
        whatever already settled (a 401 in particular) is kept.
        """
        from_date, to_date = history_window(self.clock())
        tasks = [
            asyncio.ensure_future(self.client.fetch_account_info(token)),
            asyncio.ensure_future(self.client.fetch_positions(token)),
            asyncio.ensure_future(self.client.fetch_history(token, from_date, to_date)),
        ]
        try:
            _, pending = await asyncio.wait(tasks, timeout=self.timeout_seconds)
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

        results: List[Any] = []
        for task in tasks:
            if task in pending:
                results.append(TransportFailure("Request timeout"))
            elif task.exception() is not None:
                results.append(task.exception())
            else:
                results.append(task.result())
        return results

    async def load(self, is_initial: bool = False) -> LoadOutcome:
        if self._closed:
            return LoadOutcome(LoadStatus.DISCARDED)

        token = self.guard.current_token()
        if not token:
            logger.info("No authenticated session, redirecting to login")
            return self._redirect(AuthExpired("No active session"))

        self._seq += 1
        seq = self._seq
        self.state = Loading(initial=is_initial, last_good=self._data)

        results = await self._fetch_all(token)

        if self._closed:
            return LoadOutcome(LoadStatus.DISCARDED)

        for result in results:
            if isinstance(result, AuthExpired):
                logger.info("Backend rejected the session token on %s", result.endpoint)
                return self._redirect(result)

        try:
            for result in results:
                if isinstance(result, BaseException):
                    raise result
            account_payload, positions_payload, history_payload = results
            data = DashboardData(
                snapshot=parse_account_snapshot(account_payload),
                positions=parse_positions(positions_payload),
                history=parse_history(history_payload),
                updated_at=self.clock(),
            )
        except DashboardError as exc:
            if seq < self._applied_seq:
                return LoadOutcome(LoadStatus.DISCARDED, exc)
            self.state = Errored(exc, self._data)
            return LoadOutcome(LoadStatus.FAILED, exc)

        if seq < self._applied_seq:
            logger.debug("Discarding load #%d, #%d already applied", seq, self._applied_seq)
            return LoadOutcome(LoadStatus.DISCARDED)

        self._data = data
        self._applied_seq = seq
        self.state = Loaded(data)
        return LoadOutcome(LoadStatus.LOADED)

    async def manual_refresh(self) -> Notification:
        outcome = await self.load(False)
        if outcome.status is LoadStatus.FAILED:
            logger.warning("Manual refresh failed: %s", outcome.error)
            return Notification("error", "Refresh failed", "Please try again")
        if outcome.redirect:
            return Notification("error", "Session expired", "Please log in again")
        if outcome.status is LoadStatus.DISCARDED:
            if self._closed:
                return Notification("info", "Refresh cancelled", "The dashboard was closed")
            if outcome.error is not None:
                # A newer load already replaced the data; this one still failed.
                logger.warning("Manual refresh failed: %s", outcome.error)
                return Notification("error", "Refresh failed", "Please try again")
        return Notification("success", "Refreshed", "Account data updated")

    # -- scheduling -------------------------------------------

    async def _timer_refresh(self) -> None:
        outcome = await self.load(False)
        if outcome.status is LoadStatus.FAILED:
            logger.warning("Background refresh failed: %s", outcome.error)

    async def _auto_refresh_loop(self, interval_seconds: float) -> None:
        while not self._closed:
            await asyncio.sleep(interval_seconds)
            if self._closed:
                break
            task = asyncio.ensure_future(self._timer_refresh())
            self._in_flight.add(task)
            task.add_done_callback(self._in_flight.discard)

    def schedule_auto_refresh(self, interval_ms: int) -> asyncio.Task:
        if interval_ms <= 0:
            raise ValueError("interval_ms must be positive")
        self.cancel_auto_refresh()
        self._timer = asyncio.ensure_future(self._auto_refresh_loop(interval_ms / 1000.0))
        return self._timer

    def cancel_auto_refresh(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    async def mount(self, interval_ms: int) -> LoadOutcome:
        outcome = await self.load(True)
        if outcome.status is not LoadStatus.REDIRECT and not self._closed:
            self.schedule_auto_refresh(interval_ms)
        return outcome

    def close(self) -> None:
        self._closed = True
        self.cancel_auto_refresh()
