"""
Security helpers.
Password hashing (bcrypt) and JWT issuance/verification (PyJWT).
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
import jwt

from .config import get_settings

logger = logging.getLogger(__name__)

ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"
PASSWORD_RESET_TOKEN = "password_reset"
EMAIL_VERIFICATION_TOKEN = "email_verification"


def hash_password(password: str) -> str:
    """Hash a password with bcrypt."""
    settings = get_settings()
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a password against its bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed hash
        return False


def _create_token(data: Dict[str, Any], token_type: str, expires_delta: timedelta) -> str:
    settings = get_settings()
    now = datetime.now(timezone.utc)
    payload = dict(data)
    payload.update(
        {
            "type": token_type,
            "jti": payload.get("jti") or uuid.uuid4().hex,
            "iat": now,
            "exp": now + expires_delta,
        }
    )
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a short-lived access token.

    Args:
        data: Claims to embed (sub, role, ver)
        expires_delta: Override the configured lifetime

    Returns:
        Encoded JWT
    """
    settings = get_settings()
    delta = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    return _create_token(data, ACCESS_TOKEN, delta)


def create_refresh_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """Create a long-lived refresh token."""
    settings = get_settings()
    delta = expires_delta or timedelta(days=settings.refresh_token_expire_days)
    return _create_token(data, REFRESH_TOKEN, delta)


def create_action_token(data: Dict[str, Any], token_type: str) -> str:
    """Create a single-purpose token (password reset, email verification)."""
    settings = get_settings()
    return _create_token(data, token_type, timedelta(hours=settings.action_token_expire_hours))


def access_token_lifetime_seconds() -> int:
    return get_settings().access_token_expire_minutes * 60


def verify_token(token: str, expected_type: Optional[str] = None) -> Optional[Dict[str, Any]]:
    """
    Decode and validate a JWT.

    Args:
        token: Encoded JWT
        expected_type: Required value of the "type" claim

    Returns:
        Token payload, or None if the token is invalid, expired or of the wrong type
    """
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        logger.debug("Token expired")
        return None
    except jwt.InvalidTokenError as e:
        logger.debug(f"Invalid token: {e}")
        return None

    if expected_type is not None and payload.get("type") != expected_type:
        return None

    return payload


def token_claims_for(user) -> Dict[str, Any]:
    """Standard claims for a user's tokens."""
    return {"sub": str(user.id), "role": user.role, "ver": user.token_version}
