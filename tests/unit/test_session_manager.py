from __future__ import annotations

import pytest

from sunvoy_client.application.use_cases.ensure_session import SessionManager
from sunvoy_client.domain.errors import LoginFailedError, NonceNotFoundError, SessionNotReadyError
from sunvoy_client.domain.model import CookieRecord, Credentials, LoginState, Session, SessionState
from sunvoy_client.infrastructure.adapters.session.json_store import JsonFileSessionStore
from sunvoy_client.infrastructure.adapters.session.memory_store import InMemorySessionStore
from sunvoy_client.infrastructure.adapters.sunvoy.login_consumer import SunvoyLoginConsumer
from tests.unit._fakes import API, BASE, SESSION_COOKIE, FailingStore, FakeHttp, scripted_login

PROBE = f"{API}/api/settings"
STALE = CookieRecord(domain="web.example.test", path="/", name="JSESSIONID", value="stale")


def _manager(http, store=None) -> SessionManager:
    return SessionManager(
        http=http,
        store=store if store is not None else InMemorySessionStore(),
        consumer=SunvoyLoginConsumer(http, base_url=BASE, api_url=API),
        credentials=Credentials("demo@example.org", "test"),
    )


def test_reuses_valid_stored_session_without_login():
    store = InMemorySessionStore()
    store.save(Session([SESSION_COOKIE]))
    http = FakeHttp().add("POST", PROBE, 200)
    manager = _manager(http, store)

    result = manager.ensure_session()

    assert result.status == "ALREADY_ACTIVE"
    assert result.ok
    assert manager.state is SessionState.AUTHENTICATED
    assert http.urls() == [PROBE]
    assert manager.transport is http


def test_rejected_stored_session_triggers_login_and_save():
    store = InMemorySessionStore()
    store.save(Session([STALE]))
    http = scripted_login(FakeHttp().add("POST", PROBE, 401))
    manager = _manager(http, store)

    result = manager.ensure_session()

    assert result.status == "REFRESHED"
    assert manager.state is SessionState.AUTHENTICATED
    assert manager.login_state is LoginState.AUTHENTICATED
    assert http.urls() == [PROBE, f"{BASE}/login", f"{BASE}/login"]
    assert store.load() == Session([SESSION_COOKIE])


def test_empty_store_logs_in_directly():
    store = InMemorySessionStore()
    http = scripted_login(FakeHttp())
    manager = _manager(http, store)

    result = manager.ensure_session()

    assert result.status == "REFRESHED"
    assert PROBE not in http.urls()
    assert store.load() is not None


def test_login_401_returns_typed_error_and_persists_nothing():
    store = InMemorySessionStore()
    http = scripted_login(FakeHttp(), login_status=401)
    manager = _manager(http, store)

    result = manager.ensure_session()

    assert result.status == "ERROR"
    assert isinstance(result.error, LoginFailedError)
    assert result.error.status == 401
    assert manager.login_state is LoginState.LOGIN_FAILED
    assert manager.state is not SessionState.AUTHENTICATED
    assert store.load() is None
    with pytest.raises(LoginFailedError):
        result.raise_for_error()
    with pytest.raises(SessionNotReadyError):
        manager.transport


def test_missing_nonce_surfaces_as_nonce_error():
    http = FakeHttp().add("GET", f"{BASE}/login", 200, "<html></html>")
    result = _manager(http).ensure_session()
    assert isinstance(result.error, NonceNotFoundError)


def test_is_session_valid_false_when_never_authenticated():
    http = FakeHttp().add("POST", PROBE, 200)
    manager = _manager(http)
    assert manager.is_session_valid() is False
    assert manager.state is SessionState.EMPTY


def test_is_session_valid_true_right_after_login():
    http = scripted_login(FakeHttp()).add("POST", PROBE, 200)
    manager = _manager(http)
    assert manager.ensure_session().ok
    assert manager.is_session_valid() is True


def test_failed_probe_invalidates_session():
    http = scripted_login(FakeHttp()).add("POST", PROBE, 401)
    manager = _manager(http)
    manager.ensure_session()
    assert manager.is_session_valid() is False
    assert manager.state is SessionState.UNAUTHENTICATED


def test_storage_failure_does_not_fail_login():
    store = FailingStore()
    http = scripted_login(FakeHttp())
    manager = _manager(http, store)

    result = manager.ensure_session()

    assert result.ok
    assert store.saved == 1
    assert manager.state is SessionState.AUTHENTICATED


def test_second_ensure_is_a_no_op():
    http = scripted_login(FakeHttp())
    manager = _manager(http)
    manager.ensure_session()
    calls = len(http.calls)
    assert manager.ensure_session().status == "ALREADY_ACTIVE"
    assert len(http.calls) == calls


def test_forced_login_discards_restored_cookies():
    store = InMemorySessionStore()
    store.save(Session([STALE]))
    http = scripted_login(FakeHttp())
    manager = _manager(http, store)
    manager.restore()

    assert manager.login().status == "REFRESHED"
    assert http.dump_cookies() == [SESSION_COOKIE]


def test_corrupt_snapshot_falls_back_to_fresh_login(tmp_path):
    path = tmp_path / "cookiejar.json"
    path.write_text('{"cookies": ["junk"]}')
    store = JsonFileSessionStore(path)
    http = scripted_login(FakeHttp())

    result = _manager(http, store).ensure_session()

    assert result.status == "REFRESHED"
    assert store.load() == Session([SESSION_COOKIE])
