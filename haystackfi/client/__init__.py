"""
Python client for the Haystack FI marketplace API.
API access, session state, token refresh, route guards and form helpers.
"""

from .api_client import ApiResponse, ApiService, TokenPayload
from .guards import AccessDecision, check_access
from .session import AuthenticationFailed, SessionState, SessionStore
from .storage import FileTokenStorage, MemoryTokenStorage, TokenStorage
from .token_refresh import TokenRefreshScheduler

__all__ = [
    "ApiResponse",
    "ApiService",
    "TokenPayload",
    "AccessDecision",
    "check_access",
    "AuthenticationFailed",
    "SessionState",
    "SessionStore",
    "FileTokenStorage",
    "MemoryTokenStorage",
    "TokenStorage",
    "TokenRefreshScheduler",
]
