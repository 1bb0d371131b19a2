"""
Session Store
Observable sign-in state for the client, persisted through token storage.
"""

import logging
from dataclasses import dataclass, replace
from threading import RLock
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from .api_client import ApiService, TokenPayload
from .storage import AUTH_TOKEN_KEY, REFRESH_TOKEN_KEY, USER_KEY, TokenStorage

logger = logging.getLogger(__name__)

DASHBOARD_ROUTES = {
    "admin": "/admin/dashboard",
    "vendor": "/vendor/dashboard",
    "bank": "/dashboard",
    "credit-union": "/dashboard",
}


class AuthenticationFailed(Exception):
    """Sign-in or sign-up was rejected; the message is the server's."""


@dataclass(frozen=True)
class SessionState:
    user: Optional[Dict[str, Any]] = None
    token: Optional[str] = None
    refresh_token: Optional[str] = None
    is_loading: bool = True

    @property
    def is_authenticated(self) -> bool:
        return bool(self.user) and bool(self.token)


Subscriber = Callable[[SessionState], None]


class SessionStore:
    """
    Holds the signed-in user and token pair.

    Subscribers are called with the new state on every change. Tokens
    refreshed by the API client (e.g. on a 401 retry) flow back into the
    store through the client's token listeners.
    """

    def __init__(self, api: ApiService, storage: Optional[TokenStorage] = None):
        self.api = api
        self.storage = storage if storage is not None else api.storage
        self._state = SessionState()
        self._subscribers: List[Subscriber] = []
        self._lock = RLock()
        self._unsubscribe_tokens = api.subscribe_to_token_updates(self._on_token_update)

    # State

    @property
    def state(self) -> SessionState:
        with self._lock:
            return self._state

    @property
    def user(self) -> Optional[Dict[str, Any]]:
        return self.state.user

    @property
    def token(self) -> Optional[str]:
        return self.state.token

    @property
    def refresh_token(self) -> Optional[str]:
        return self.state.refresh_token

    @property
    def is_loading(self) -> bool:
        return self.state.is_loading

    @property
    def is_authenticated(self) -> bool:
        return self.state.is_authenticated

    def subscribe(self, subscriber: Subscriber) -> Callable[[], None]:
        """Register a state subscriber; returns an unsubscribe callable."""
        with self._lock:
            self._subscribers.append(subscriber)

        def unsubscribe() -> None:
            with self._lock:
                if subscriber in self._subscribers:
                    self._subscribers.remove(subscriber)

        return unsubscribe

    def _set_state(self, **changes) -> SessionState:
        with self._lock:
            self._state = replace(self._state, **changes)
            state = self._state
            subscribers = list(self._subscribers)
        for subscriber in subscribers:
            subscriber(state)
        return state

    def _on_token_update(self, payload: Optional[TokenPayload]) -> None:
        if payload is None:
            self._set_state(token=None, refresh_token=None)
        else:
            self._set_state(token=payload.access_token, refresh_token=payload.refresh_token)

    def close(self) -> None:
        """Stop listening to the API client."""
        self._unsubscribe_tokens()

    # Lifecycle

    def initialize(self) -> SessionState:
        """
        Restore the session from storage and validate it with the server.

        A stored session the server no longer accepts (or an unreachable
        server) leaves the store signed out.
        """
        self._set_state(is_loading=True)
        token = self.storage.get_item(AUTH_TOKEN_KEY)
        refresh_token = self.storage.get_item(REFRESH_TOKEN_KEY)
        user = self.storage.get_item(USER_KEY)

        try:
            if token and user:
                self._set_state(user=user, token=token, refresh_token=refresh_token)
                response = self.api.get_current_user()
                if response.success:
                    self.storage.set_item(USER_KEY, response.data)
                    self._set_state(user=response.data)
                else:
                    logger.info(f"Stored session rejected, signing out: {response.error}")
                    self.sign_out()
        finally:
            self._set_state(is_loading=False)

        return self.state

    def _store_session(self, data: Dict[str, Any]) -> Dict[str, Any]:
        user = data["user"]
        self.storage.set_item(USER_KEY, user)
        self._set_state(user=user)
        # Token listeners update the token fields
        self.api.set_auth_tokens(data["access_token"], data["refresh_token"])
        return user

    def sign_in(self, email: str, password: str) -> Dict[str, Any]:
        self._set_state(is_loading=True)
        try:
            response = self.api.sign_in(email, password)
            if not response.success:
                raise AuthenticationFailed(response.error or "Authentication failed")
            return self._store_session(response.data)
        finally:
            self._set_state(is_loading=False)

    def sign_up(self, request: Dict[str, Any]) -> Dict[str, Any]:
        self._set_state(is_loading=True)
        try:
            response = self.api.sign_up(request)
            if not response.success:
                raise AuthenticationFailed(response.error or "Registration failed")
            return self._store_session(response.data)
        finally:
            self._set_state(is_loading=False)

    def sign_out(self) -> None:
        self.storage.remove_item(USER_KEY)
        self.api.clear_auth_tokens()
        self._set_state(user=None, token=None, refresh_token=None)

    # Roles and routes

    def has_role(self, role: Union[str, Iterable[str]]) -> bool:
        user = self.user
        if not user:
            return False
        if isinstance(role, str):
            return user.get("role") == role
        return user.get("role") in set(role)

    def get_dashboard_route(self) -> str:
        user = self.user
        if not user:
            return "/"
        return DASHBOARD_ROUTES.get(user.get("role"), "/")

    # Refresh

    def refresh_user(self) -> None:
        if not self.token:
            return
        response = self.api.get_current_user()
        if response.success:
            self.storage.set_item(USER_KEY, response.data)
            self._set_state(user=response.data)
        elif response.status_code in (401, 403):
            logger.warning(f"Failed to refresh user, signing out: {response.error}")
            self.sign_out()
        else:
            logger.warning(f"Failed to refresh user: {response.error}")

    def refresh_auth_token(self) -> bool:
        """Rotate the token pair; returns False when the server refused."""
        refresh_token = self.refresh_token or self.storage.get_item(REFRESH_TOKEN_KEY)
        if not refresh_token:
            return False
        response = self.api.refresh_token(refresh_token, force=True)
        return response.success
