"""
Tests for the /auth endpoints.
"""

from haystackfi.api.security import (
    EMAIL_VERIFICATION_TOKEN,
    PASSWORD_RESET_TOKEN,
    create_access_token,
    create_action_token,
    create_refresh_token,
    token_claims_for,
    verify_token,
)
from haystackfi.db.enums import UserRole
from haystackfi.db.models import User


def test_signup_creates_user_and_returns_tokens(client, db_session, signup_payload):
    response = client.post("/auth/signup", json=signup_payload)

    assert response.status_code == 201
    body = response.json()
    assert body["user"]["email"] == "jane.doe@firstnational.com"
    assert body["user"]["role"] == "bank"
    assert body["user"]["institutionName"] == "First National Bank"
    assert body["message"]
    assert verify_token(body["access_token"], "access")["sub"] == str(body["user"]["id"])
    assert verify_token(body["refresh_token"], "refresh") is not None

    user = db_session.query(User).filter(User.email == "jane.doe@firstnational.com").one()
    assert user.password_hash != signup_payload["password"]
    assert user.password_hash.startswith("$2")


def test_signup_rejects_duplicate_email(client, signup_payload):
    assert client.post("/auth/signup", json=signup_payload).status_code == 201

    signup_payload["email"] = signup_payload["email"].upper()
    response = client.post("/auth/signup", json=signup_payload)

    assert response.status_code == 400
    assert response.json()["detail"] == "Email address already registered"


def test_signup_validates_password_strength(client, signup_payload):
    signup_payload["password"] = "alllowercase1"
    response = client.post("/auth/signup", json=signup_payload)

    assert response.status_code == 422
    assert response.json()["error"]["type"] == "ValidationError"


def test_signup_cannot_create_admin(client, signup_payload):
    signup_payload["role"] = "admin"
    assert client.post("/auth/signup", json=signup_payload).status_code == 422


def test_signin_with_valid_and_invalid_credentials(client, make_user, user_password):
    user = make_user(UserRole.VENDOR, email="rep@vendor.com")

    ok = client.post("/auth/signin", json={"email": "REP@vendor.com", "password": user_password})
    assert ok.status_code == 200
    assert ok.json()["user"]["id"] == user.id

    bad = client.post("/auth/signin", json={"email": "rep@vendor.com", "password": "Wrong1Pass"})
    assert bad.status_code == 401
    assert bad.json()["detail"] == "Incorrect email or password"


def test_signin_disabled_account_is_forbidden(client, make_user, user_password):
    make_user(email="gone@bank.com", is_active=False)

    response = client.post("/auth/signin", json={"email": "gone@bank.com", "password": user_password})

    assert response.status_code == 403


def test_refresh_rotates_tokens(client, make_user, user_password):
    user = make_user(email="rotate@bank.com")
    signin = client.post("/auth/signin", json={"email": "rotate@bank.com", "password": user_password})
    refresh_token = signin.json()["refresh_token"]

    response = client.post("/auth/refresh", json={"refreshToken": refresh_token})

    assert response.status_code == 200
    body = response.json()
    assert body["refresh_token"] != refresh_token
    assert verify_token(body["access_token"], "access")["sub"] == str(user.id)

    replayed = client.post("/auth/refresh", json={"refreshToken": refresh_token})
    assert replayed.status_code == 401
    assert replayed.json()["detail"] == "Refresh token has already been used"

    rotated = client.post("/auth/refresh", json={"refreshToken": body["refresh_token"]})
    assert rotated.status_code == 200


def test_refresh_rejects_token_that_was_never_issued(client, make_user):
    user = make_user()
    forged = create_refresh_token(token_claims_for(user))

    response = client.post("/auth/refresh", json={"refreshToken": forged})

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"


def test_refresh_rejects_access_token(client, make_user):
    user = make_user()
    access_token = create_access_token(token_claims_for(user))

    response = client.post("/auth/refresh", json={"refreshToken": access_token})

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"


def test_profile_requires_bearer_token(client):
    response = client.get("/auth/profile")

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"


def test_profile_read_and_update(client, make_user, auth_headers):
    user = make_user()
    headers = auth_headers(user)

    assert client.get("/auth/profile", headers=headers).json()["email"] == user.email

    response = client.put(
        "/auth/profile", headers=headers, json={"firstName": "Janet", "city": "Dallas"}
    )

    assert response.status_code == 200
    assert response.json()["firstName"] == "Janet"
    assert response.json()["city"] == "Dallas"


def test_profile_update_ignores_null_for_required_fields(client, make_user, auth_headers):
    user = make_user(phone="555-0100")

    response = client.put(
        "/auth/profile",
        headers=auth_headers(user),
        json={"phone": None, "country": None, "title": None, "website": "https://bank.example"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["phone"] == "555-0100"
    assert body["country"] == ""
    assert body["title"] is None
    assert body["website"] == "https://bank.example"


def test_forgot_password_does_not_reveal_accounts(client, make_user):
    make_user(email="known@bank.com")

    known = client.post("/auth/forgot-password", json={"email": "known@bank.com"})
    unknown = client.post("/auth/forgot-password", json={"email": "nobody@bank.com"})

    assert known.status_code == unknown.status_code == 200
    assert known.json() == unknown.json()


def test_reset_password_invalidates_existing_tokens(client, make_user, auth_headers, db_session):
    user = make_user(email="reset@bank.com")
    old_headers = auth_headers(user)
    token = create_action_token({"sub": str(user.id), "ver": user.token_version}, PASSWORD_RESET_TOKEN)

    response = client.post("/auth/reset-password", json={"token": token, "newPassword": "N3wPassword"})
    assert response.status_code == 200

    assert client.get("/auth/profile", headers=old_headers).status_code == 401
    signin = client.post("/auth/signin", json={"email": "reset@bank.com", "password": "N3wPassword"})
    assert signin.status_code == 200

    # The reset token is single use: its version no longer matches
    again = client.post("/auth/reset-password", json={"token": token, "newPassword": "An0therPass"})
    assert again.status_code == 400


def test_verify_email(client, make_user, db_session):
    user = make_user()
    token = create_action_token({"sub": str(user.id), "ver": user.token_version}, EMAIL_VERIFICATION_TOKEN)

    assert client.post("/auth/verify-email", json={"token": token}).status_code == 200

    db_session.expire_all()
    assert db_session.get(User, user.id).is_email_verified is True

    bad = client.post("/auth/verify-email", json={"token": "not-a-token"})
    assert bad.status_code == 400


def test_resend_verification_is_generic(client):
    response = client.post("/auth/resend-verification", params={"email": "nobody@bank.com"})

    assert response.status_code == 200
    assert "message" in response.json()
