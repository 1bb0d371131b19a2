"""
Client unit test fixtures
"""

import pytest

from haystackfi.client import ApiService, MemoryTokenStorage, SessionStore

from client_fakes import BASE_URL, FakeHttpSession, FakeTimer


@pytest.fixture
def storage():
    return MemoryTokenStorage()


@pytest.fixture
def make_api(storage):
    """Build an ApiService over a FakeHttpSession driven by `handler`."""

    def _make_api(handler, on_unauthorized=None):
        http = FakeHttpSession(handler, BASE_URL)
        api = ApiService(
            base_url=BASE_URL,
            storage=storage,
            session=http,
            timeout=5,
            on_unauthorized=on_unauthorized,
        )
        return api, http

    return _make_api


@pytest.fixture
def fake_timers():
    FakeTimer.instances = []
    yield FakeTimer
    FakeTimer.instances = []


@pytest.fixture
def make_session(make_api):
    def _make_session(handler):
        api, http = make_api(handler)
        return SessionStore(api), api, http

    return _make_session
