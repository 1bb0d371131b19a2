"""
Fakes for client unit tests: a scripted HTTP session and a manual timer.
"""

import json as jsonlib
from typing import Any, Callable, Dict, List, Optional


class FakeResponse:
    def __init__(self, status_code: int = 200, body: Any = None):
        self.status_code = status_code
        self._body = body
        self.text = "" if body is None else jsonlib.dumps(body)

    def json(self):
        if self._body is None:
            raise ValueError("No JSON body")
        return self._body


class FakeHttpSession:
    """
    Stands in for requests.Session.

    ``handler(method, path, call)`` returns a FakeResponse (or raises);
    every call is recorded with its path relative to the API root.
    """

    def __init__(self, handler: Callable[[str, str, Dict[str, Any]], FakeResponse], base_url: str):
        self.handler = handler
        self.base_url = base_url
        self.calls: List[Dict[str, Any]] = []

    def request(self, method, url, json=None, params=None, headers=None, timeout=None):
        call = {
            "method": method,
            "path": url[len(self.base_url):],
            "json": json,
            "params": params,
            "headers": dict(headers or {}),
            "timeout": timeout,
        }
        self.calls.append(call)
        return self.handler(method, call["path"], call)

    def paths(self) -> List[str]:
        return [f"{c['method']} {c['path']}" for c in self.calls]


class FakeTimer:
    """Manual stand-in for threading.Timer; fire() runs the callback."""

    instances: List["FakeTimer"] = []

    def __init__(self, interval: float, function: Callable[[], None]):
        self.interval = interval
        self.function = function
        self.daemon = False
        self.started = False
        self.cancelled = False
        FakeTimer.instances.append(self)

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        self.function()


BASE_URL = "http://api.test"

USER = {"id": 7, "email": "sarah@firstnational.com", "role": "bank", "firstName": "Sarah"}


def auth_body(access: str = "access-1", refresh: str = "refresh-1", user: Optional[dict] = None):
    return {
        "access_token": access,
        "refresh_token": refresh,
        "token_type": "bearer",
        "expires_in": 900,
        "user": user or USER,
    }
