"""
REST client for the MetaTrader backend.

============================================================
ENDPOINTS
============================================================
GET  /api/account/info       -> {data: AccountSnapshot}
GET  /api/positions          -> {data: Position[]}
GET  /api/history/trades     -> {data: HistoryTrade[]}
POST /api/auth/login         -> {token, accountInfo}

Data endpoints need "Authorization: Bearer <token>"; HTTP 401 on any of
them means the session is no longer valid.
============================================================
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, AsyncIterator, Dict, Optional

import aiohttp

from .. import config
from .errors import AuthExpired, LoginRejected, MalformedResponse, TransportFailure

logger = logging.getLogger(__name__)

API_BASE_URL = config.API_BASE_URL
REQUEST_TIMEOUT_SECONDS = config.REQUEST_TIMEOUT_SECONDS


@dataclass
class LoginResult:
    token: str
    account_info: Dict[str, Any] = field(default_factory=dict)


class MetaTraderApiClient:
    """Thin aiohttp wrapper that maps HTTP outcomes onto dashboard errors.

    A shared ``aiohttp.ClientSession`` may be injected; otherwise one is
    opened per request so the client survives being driven from short-lived
    event loops (each Streamlit rerun runs its own).
    """

    def __init__(
        self,
        base_url: str = API_BASE_URL,
        timeout_seconds: float = REQUEST_TIMEOUT_SECONDS,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._session = session

    @asynccontextmanager
    async def _session_scope(self) -> AsyncIterator[aiohttp.ClientSession]:
        if self._session is not None:
            yield self._session
            return
        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            yield session

    async def _request(
        self,
        method: str,
        path: str,
        token: Optional[str] = None,
        params: Optional[Dict[str, str]] = None,
        json_body: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        try:
            async with self._session_scope() as session:
                async with session.request(
                    method,
                    url,
                    params=params,
                    json=json_body,
                    headers=headers,
                ) as response:
                    # Status is checked before the body is looked at.
                    if response.status == 401:
                        raise AuthExpired("Session expired or invalid", endpoint=path)
                    if response.status >= 400:
                        raise TransportFailure(f"HTTP {response.status}", endpoint=path)
                    try:
                        payload = await response.json(content_type=None)
                    except ValueError:
                        raise MalformedResponse("Response body is not JSON", endpoint=path)
        except aiohttp.ClientError as e:
            raise TransportFailure(f"Network error: {e}", endpoint=path)
        except asyncio.TimeoutError:
            raise TransportFailure("Request timeout", endpoint=path)

        if not isinstance(payload, dict):
            raise MalformedResponse("Response body is not an object", endpoint=path)
        return payload

    async def fetch_account_info(self, token: str) -> Dict[str, Any]:
        return await self._request("GET", config.ACCOUNT_INFO_ENDPOINT, token=token)

    async def fetch_positions(self, token: str) -> Dict[str, Any]:
        return await self._request("GET", config.POSITIONS_ENDPOINT, token=token)

    async def fetch_history(self, token: str, from_date: datetime, to_date: datetime) -> Dict[str, Any]:
        params = {
            "from_date": from_date.isoformat(),
            "to_date": to_date.isoformat(),
        }
        return await self._request("GET", config.HISTORY_ENDPOINT, token=token, params=params)

    async def login(self, account_number: str, password: str, server: str) -> LoginResult:
        body = {
            "accountNumber": account_number,
            "password": password,
            "server": server,
        }
        try:
            payload = await self._request("POST", config.LOGIN_ENDPOINT, json_body=body)
        except AuthExpired:
            raise LoginRejected("Invalid account number, password or server", endpoint=config.LOGIN_ENDPOINT)

        if payload.get("success") is False:
            raise LoginRejected(payload.get("message") or "Login refused", endpoint=config.LOGIN_ENDPOINT)
        token = payload.get("token")
        if not isinstance(token, str) or not token:
            raise MalformedResponse("Login response has no token", endpoint=config.LOGIN_ENDPOINT)
        account_info = payload.get("accountInfo")
        logger.info("Login accepted for account %s", account_number)
        return LoginResult(token=token, account_info=account_info if isinstance(account_info, dict) else {})
