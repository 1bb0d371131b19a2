"""
Route guard decisions for pages that require a signed-in user or role.
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Union
from urllib.parse import urlencode

from .session import SessionStore

SIGN_IN_PATH = "/auth/signin"


@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    waiting: bool = False
    redirect_to: Optional[str] = None


def check_access(
    session: SessionStore,
    required_role: Optional[Union[str, Iterable[str]]] = None,
    fallback_path: str = SIGN_IN_PATH,
    location: str = "/",
) -> AccessDecision:
    """
    Decide whether the current session may view a page.

    While the session is still loading the caller should wait. Otherwise an
    unauthenticated user, or one without the required role, is sent to the
    fallback path with the original location as ``redirect``.
    """
    state = session.state
    if state.is_loading:
        return AccessDecision(allowed=False, waiting=True)

    if not state.is_authenticated or (required_role and not session.has_role(required_role)):
        return AccessDecision(
            allowed=False,
            redirect_to=f"{fallback_path}?{urlencode({'redirect': location})}",
        )

    return AccessDecision(allowed=True)
