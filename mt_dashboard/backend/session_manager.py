"""
Session management functions for MetaTrader Account Dashboard
Handles the persisted login record, token lookup and forced logout.
"""

import json
import logging
from pathlib import Path
from typing import Callable, Dict, Optional

from .. import config
from .errors import LoginValidationError
from .models import Session

logger = logging.getLogger(__name__)

SESSION_FILE = config.SESSION_FILE
SESSION_STORAGE_KEY = config.SESSION_STORAGE_KEY
KNOWN_SERVERS = config.KNOWN_SERVERS


class SessionStore:
    """One flat login record under a well-known key in a JSON file."""

    def __init__(self, path: Path = SESSION_FILE, key: str = SESSION_STORAGE_KEY):
        self.path = Path(path)
        self.key = key

    def read(self) -> Optional[Dict]:
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text())
        except (OSError, ValueError):
            logger.warning("Unreadable session file %s", self.path)
            return None
        record = data.get(self.key) if isinstance(data, dict) else None
        return record if isinstance(record, dict) else None

    def write(self, record: Dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps({self.key: record}))

    def delete(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass


class SessionGuard:
    def __init__(self, store: SessionStore):
        self.store = store

    def current_session(self) -> Optional[Session]:
        record = self.store.read()
        if not record:
            return None
        return Session(
            token=str(record.get("token") or ""),
            account_number=str(record.get("accountNumber") or ""),
            server=str(record.get("server") or ""),
            authenticated=record.get("isAuthenticated") is True,
        )

    def current_token(self) -> Optional[str]:
        session = self.current_session()
        if session is None or not session.authenticated or not session.token:
            return None
        return session.token

    def establish(self, token: str, account_number: str, server: str) -> Session:
        self.store.write({
            "accountNumber": account_number,
            "server": server,
            "token": token,
            "isAuthenticated": True,
        })
        logger.info("Session established for account %s on %s", account_number, server)
        return Session(token=token, account_number=account_number, server=server)

    def clear(self) -> None:
        self.store.delete()
        logger.info("Session cleared")

    def require_authenticated_or_redirect(self, redirect: Callable[[], None]) -> bool:
        if self.current_token() is None:
            redirect()
            return False
        return True


def validate_login_form(account_number: str, password: str, server: str) -> None:
    missing = [
        name for name, value in (
            ("account number", account_number),
            ("password", password),
            ("server", server),
        )
        if not (value or "").strip()
    ]
    if missing:
        raise LoginValidationError(f"Please fill in all fields: {', '.join(missing)}")
