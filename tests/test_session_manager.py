import json

import pytest

from mt_dashboard.backend.errors import LoginValidationError
from mt_dashboard.backend.session_manager import validate_login_form


def test_no_session_means_no_token(guard):
    assert guard.current_token() is None
    assert guard.current_session() is None


def test_establish_persists_flat_record(guard, store):
    guard.establish("tok-1", "12345678", "ICMarkets-Live01")
    data = json.loads(store.path.read_text())
    assert data == {
        "mtAuth": {
            "accountNumber": "12345678",
            "server": "ICMarkets-Live01",
            "token": "tok-1",
            "isAuthenticated": True,
        }
    }
    assert guard.current_token() == "tok-1"


def test_establish_overwrites(guard):
    guard.establish("tok-1", "1", "FXTM-Demo")
    guard.establish("tok-2", "2", "FXTM-Real")
    session = guard.current_session()
    assert session.token == "tok-2"
    assert session.account_number == "2"


def test_clear_removes_session(logged_in_guard, store):
    logged_in_guard.clear()
    assert logged_in_guard.current_token() is None
    assert not store.path.exists()
    logged_in_guard.clear()


def test_unauthenticated_record_has_no_token(guard, store):
    store.write({"accountNumber": "1", "server": "x", "token": "tok", "isAuthenticated": False})
    assert guard.current_token() is None


def test_corrupt_file_reads_as_no_session(guard, store):
    store.path.write_text("{not json")
    assert guard.current_token() is None


def test_redirect_when_not_authenticated(guard):
    redirects = []
    assert guard.require_authenticated_or_redirect(lambda: redirects.append(True)) is False
    assert redirects == [True]


def test_no_redirect_when_authenticated(logged_in_guard):
    redirects = []
    assert logged_in_guard.require_authenticated_or_redirect(lambda: redirects.append(True)) is True
    assert redirects == []


def test_session_visible_to_a_second_guard(logged_in_guard, store):
    from mt_dashboard.backend.session_manager import SessionGuard, SessionStore

    other = SessionGuard(SessionStore(store.path))
    assert other.current_token() == "tok-123"


def test_login_form_requires_all_fields():
    validate_login_form("12345678", "secret", "MetaQuotes-Demo")
    with pytest.raises(LoginValidationError):
        validate_login_form("12345678", "", "MetaQuotes-Demo")
    with pytest.raises(LoginValidationError):
        validate_login_form("  ", "secret", "MetaQuotes-Demo")
    with pytest.raises(LoginValidationError):
        validate_login_form("12345678", "secret", "")
