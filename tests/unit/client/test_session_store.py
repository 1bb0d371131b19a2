"""
Tests for SessionStore, route guards and the storage backends.
"""

import json

import pytest

from haystackfi.client import AuthenticationFailed, FileTokenStorage, check_access
from haystackfi.client.storage import AUTH_TOKEN_KEY, REFRESH_TOKEN_KEY, USER_KEY

from client_fakes import USER, FakeResponse, auth_body


def test_sign_in_stores_session_and_notifies(make_session, storage):
    session, _, _ = make_session(lambda method, path, call: FakeResponse(200, auth_body()))
    states = []
    session.subscribe(states.append)

    user = session.sign_in("sarah@firstnational.com", "Secur3Pass")

    assert user == USER
    assert session.is_authenticated
    assert session.token == "access-1"
    assert session.refresh_token == "refresh-1"
    assert storage.get_item(USER_KEY) == USER
    assert storage.get_item(AUTH_TOKEN_KEY) == "access-1"
    assert states[0].is_loading is True
    assert states[-1].is_loading is False
    assert session.get_dashboard_route() == "/dashboard"


def test_sign_in_failure_raises_server_message(make_session):
    session, _, _ = make_session(
        lambda method, path, call: FakeResponse(401, {"detail": "Incorrect email or password"})
    )

    with pytest.raises(AuthenticationFailed, match="Incorrect email or password"):
        session.sign_in("sarah@firstnational.com", "wrong")

    assert not session.is_authenticated
    assert session.is_loading is False


def test_sign_out_clears_everything(make_session, storage):
    session, _, _ = make_session(lambda method, path, call: FakeResponse(200, auth_body()))
    session.sign_in("sarah@firstnational.com", "Secur3Pass")

    session.sign_out()

    assert session.user is None
    assert session.token is None
    assert storage.get_item(REFRESH_TOKEN_KEY) is None
    assert storage.get_item(USER_KEY) is None


def test_initialize_without_stored_session(make_session):
    session, _, http = make_session(lambda method, path, call: FakeResponse(200, {}))

    state = session.initialize()

    assert state.is_loading is False
    assert not state.is_authenticated
    assert http.calls == []


def test_initialize_validates_stored_session(make_session, storage):
    storage.set_item(AUTH_TOKEN_KEY, "access-1")
    storage.set_item(REFRESH_TOKEN_KEY, "refresh-1")
    storage.set_item(USER_KEY, {"id": 7, "role": "bank"})
    session, _, http = make_session(lambda method, path, call: FakeResponse(200, USER))

    state = session.initialize()

    assert http.paths() == ["GET /auth/profile"]
    assert state.user == USER
    assert state.is_authenticated
    assert storage.get_item(USER_KEY) == USER


def test_initialize_signs_out_rejected_session(make_session, storage):
    storage.set_item(AUTH_TOKEN_KEY, "stale")
    storage.set_item(USER_KEY, USER)
    session, _, _ = make_session(
        lambda method, path, call: FakeResponse(401, {"detail": "Invalid or expired token"})
    )

    state = session.initialize()

    assert not state.is_authenticated
    assert state.is_loading is False
    assert storage.get_item(USER_KEY) is None


def test_refreshed_tokens_flow_into_store(make_session):
    session, api, _ = make_session(lambda method, path, call: FakeResponse(200, auth_body()))
    session.sign_in("sarah@firstnational.com", "Secur3Pass")

    api.set_auth_tokens("access-2", "refresh-2")

    assert session.token == "access-2"
    assert session.refresh_token == "refresh-2"

    session.close()
    api.set_auth_tokens("access-3", "refresh-3")
    assert session.token == "access-2"


def test_refresh_user_keeps_session_on_server_error(make_session):
    responses = {"/auth/signin": FakeResponse(200, auth_body()), "/auth/profile": FakeResponse(503, None)}
    session, _, _ = make_session(lambda method, path, call: responses[path])
    session.sign_in("sarah@firstnational.com", "Secur3Pass")

    session.refresh_user()

    assert session.is_authenticated


def test_has_role(make_session):
    session, _, _ = make_session(lambda method, path, call: FakeResponse(200, auth_body()))
    assert session.has_role("bank") is False

    session.sign_in("sarah@firstnational.com", "Secur3Pass")

    assert session.has_role("bank")
    assert session.has_role(["admin", "bank"])
    assert not session.has_role("vendor")


# Guards


def test_guard_waits_while_loading(make_session):
    session, _, _ = make_session(lambda method, path, call: FakeResponse(200, {}))

    decision = check_access(session)

    assert decision.waiting is True
    assert decision.allowed is False


def test_guard_redirects_anonymous_users(make_session):
    session, _, _ = make_session(lambda method, path, call: FakeResponse(200, {}))
    session.initialize()

    decision = check_access(session, location="/vendor/3?tab=docs")

    assert decision.allowed is False
    assert decision.redirect_to == "/auth/signin?redirect=%2Fvendor%2F3%3Ftab%3Ddocs"


def test_guard_checks_role(make_session):
    session, _, _ = make_session(lambda method, path, call: FakeResponse(200, auth_body()))
    session.sign_in("sarah@firstnational.com", "Secur3Pass")

    assert check_access(session, required_role="bank").allowed is True
    denied = check_access(session, required_role="admin", fallback_path="/", location="/admin")
    assert denied.redirect_to == "/?redirect=%2Fadmin"


# Storage


def test_file_storage_persists_between_instances(tmp_path):
    path = tmp_path / "session" / "haystack.json"
    FileTokenStorage(path).set_item(USER_KEY, USER)

    reopened = FileTokenStorage(path)

    assert reopened.get_item(USER_KEY) == USER
    reopened.remove_item(USER_KEY)
    assert json.loads(path.read_text()) == {}


def test_file_storage_ignores_corrupt_file(tmp_path):
    path = tmp_path / "haystack.json"
    path.write_text("{not json")
    storage = FileTokenStorage(path)

    assert storage.get_item(AUTH_TOKEN_KEY) is None
    storage.set_item(AUTH_TOKEN_KEY, "abc")
    assert storage.get_item(AUTH_TOKEN_KEY) == "abc"


def test_clear_removes_session_keys(storage):
    storage.set_item(AUTH_TOKEN_KEY, "a")
    storage.set_item(USER_KEY, USER)
    storage.set_item("theme", "dark")

    storage.clear()

    assert storage.get_item(AUTH_TOKEN_KEY) is None
    assert storage.get_item(USER_KEY) is None
    assert storage.get_item("theme") == "dark"
