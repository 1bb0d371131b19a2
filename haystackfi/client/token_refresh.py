"""
Token Refresh Scheduler
Rotates the access token shortly before it expires.
"""

import logging
import threading
from typing import Callable, Optional, Tuple

from ..config.settings import get_client_settings
from .session import SessionState, SessionStore

logger = logging.getLogger(__name__)


class TokenRefreshScheduler:
    """
    Single-shot timer that refreshes the session's tokens.

    A timer is armed whenever the session holds both an access and a refresh
    token, and re-armed when the pair changes. A failed refresh signs the
    session out; there is no retry.

    Args:
        session: Session whose tokens are refreshed
        access_token_lifetime: Seconds an access token lives
        refresh_lead: Seconds before expiry to refresh
        timer_factory: Callable with the ``threading.Timer`` signature
    """

    def __init__(
        self,
        session: SessionStore,
        access_token_lifetime: Optional[int] = None,
        refresh_lead: Optional[int] = None,
        timer_factory: Callable[..., threading.Timer] = threading.Timer,
    ):
        settings = get_client_settings()
        self.session = session
        self.access_token_lifetime = (
            access_token_lifetime
            if access_token_lifetime is not None
            else settings.access_token_lifetime_seconds
        )
        self.refresh_lead = refresh_lead if refresh_lead is not None else settings.refresh_lead_seconds
        self.timer_factory = timer_factory

        self._timer = None
        self._scheduled_pair: Optional[Tuple[str, str]] = None
        self._lock = threading.Lock()
        self._refreshing = threading.Lock()
        self._unsubscribe: Optional[Callable[[], None]] = None

    @property
    def delay(self) -> float:
        return max(self.access_token_lifetime - self.refresh_lead, 0)

    @property
    def is_scheduled(self) -> bool:
        return self._timer is not None

    def start(self) -> None:
        if self._unsubscribe is None:
            self._unsubscribe = self.session.subscribe(self._on_state_change)
        self._schedule(self.session.state)

    def stop(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._cancel()

    def _cancel(self) -> None:
        with self._lock:
            self._cancel_locked()

    def _cancel_locked(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
        self._timer = None
        self._scheduled_pair = None

    def _on_state_change(self, state: SessionState) -> None:
        pair = (state.token, state.refresh_token)
        if pair != self._scheduled_pair:
            self._schedule(state)

    def _schedule(self, state: SessionState) -> None:
        # Cancel and re-arm under one hold of the lock
        with self._lock:
            self._cancel_locked()
            if not state.token or not state.refresh_token:
                return

            timer = self.timer_factory(self.delay, self._refresh)
            timer.daemon = True
            self._timer = timer
            self._scheduled_pair = (state.token, state.refresh_token)
            timer.start()
        logger.debug(f"Token refresh scheduled in {self.delay}s")

    def _refresh(self) -> None:
        if not self._refreshing.acquire(blocking=False):
            return
        try:
            with self._lock:
                self._timer = None
            if not self.session.refresh_auth_token():
                logger.warning("Token refresh rejected; signing out")
                self.session.sign_out()
        except Exception:
            logger.exception("Token refresh failed; signing out")
            self.session.sign_out()
        finally:
            self._refreshing.release()
