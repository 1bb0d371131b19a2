"""
Tests for password hashing and JWT helpers.
"""

from datetime import timedelta
from types import SimpleNamespace

import jwt

from haystackfi.api.security import (
    PASSWORD_RESET_TOKEN,
    create_access_token,
    create_action_token,
    create_refresh_token,
    hash_password,
    token_claims_for,
    verify_password,
    verify_token,
)


def test_hash_and_verify_password(api_env):
    hashed = hash_password("Secur3Pass")

    assert hashed != "Secur3Pass"
    assert verify_password("Secur3Pass", hashed)
    assert not verify_password("secur3pass", hashed)


def test_verify_password_with_malformed_hash(api_env):
    assert verify_password("Secur3Pass", "not-a-bcrypt-hash") is False


def test_token_claims(api_env):
    user = SimpleNamespace(id=42, role="vendor", token_version=3)

    payload = verify_token(create_access_token(token_claims_for(user)), expected_type="access")

    assert payload["sub"] == "42"
    assert payload["role"] == "vendor"
    assert payload["ver"] == 3
    assert payload["type"] == "access"
    assert payload["exp"] - payload["iat"] == 15 * 60


def test_tokens_are_unique(api_env):
    claims = {"sub": "1", "ver": 0}

    first = verify_token(create_refresh_token(claims))
    second = verify_token(create_refresh_token(claims))

    assert first["jti"] != second["jti"]


def test_token_type_is_enforced(api_env):
    refresh = create_refresh_token({"sub": "1"})
    reset = create_action_token({"sub": "1"}, PASSWORD_RESET_TOKEN)

    assert verify_token(refresh, expected_type="access") is None
    assert verify_token(reset, expected_type=PASSWORD_RESET_TOKEN)["type"] == PASSWORD_RESET_TOKEN


def test_expired_token_is_rejected(api_env):
    token = create_access_token({"sub": "1"}, expires_delta=timedelta(seconds=-1))

    assert verify_token(token) is None


def test_token_signed_with_other_key_is_rejected(api_env):
    forged = jwt.encode({"sub": "1", "type": "access"}, "another-secret", algorithm="HS256")

    assert verify_token(forged, expected_type="access") is None
