import pytest

from shoplist.auth_gate import AuthGate, Decision
from shoplist.errors import AuthError
from shoplist.session_store import SessionStore


def test_pin_scenario():
    gate = AuthGate(SessionStore(), pin="4242")

    token = gate.authenticate("4242")
    assert gate.authorize(token) is Decision.ADMIT
    assert gate.authorize("garbage") is Decision.DENY

    gate.logout(token)
    assert gate.authorize(token) is Decision.DENY


def test_wrong_pin_raises_generic_auth_error():
    gate = AuthGate(SessionStore(), pin="4242")
    with pytest.raises(AuthError) as exc:
        gate.authenticate("4243")
    assert exc.value.code == "invalid_pin"
    assert str(exc.value) == "Incorrect PIN"


def test_absent_token_is_denied_when_pin_configured():
    gate = AuthGate(SessionStore(), pin="4242")
    assert gate.authorize(None) is Decision.DENY
    assert gate.authorize("") is Decision.DENY


def test_no_pin_admits_everything():
    gate = AuthGate(SessionStore(), pin="")
    assert gate.enabled is False
    assert gate.authorize(None) is Decision.ADMIT
    assert gate.authorize("whatever") is Decision.ADMIT


def test_no_pin_login_is_refused():
    gate = AuthGate(SessionStore(), pin="")
    with pytest.raises(AuthError):
        gate.authenticate("")


def test_authorize_refreshes_expiry(clock):
    store = SessionStore(ttl_seconds=100, clock=clock)
    gate = AuthGate(store, pin="1")
    token = gate.authenticate("1")

    clock.advance(90)
    assert gate.authorize(token) is Decision.ADMIT
    clock.advance(90)
    assert gate.authorize(token) is Decision.ADMIT
    clock.advance(100)
    assert gate.authorize(token) is Decision.DENY


def test_logout_without_token_is_noop():
    gate = AuthGate(SessionStore(), pin="4242")
    gate.logout(None)
