import pytest

from mt_dashboard.backend.session_manager import SessionGuard, SessionStore


@pytest.fixture
def store(tmp_path):
    return SessionStore(tmp_path / "session.json")


@pytest.fixture
def guard(store):
    return SessionGuard(store)


@pytest.fixture
def logged_in_guard(guard):
    guard.establish("tok-123", "12345678", "MetaQuotes-Demo")
    return guard
