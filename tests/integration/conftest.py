"""
Integration test fixtures
"""

from typing import Callable, Dict

import pytest
from fastapi.testclient import TestClient

from haystackfi.api.security import create_access_token, hash_password, token_claims_for
from haystackfi.db.enums import UserRole, VendorStatus, VerificationStatus
from haystackfi.db.models import User, Vendor, VendorProfile
from haystackfi.db.session import get_session_factory
from haystackfi.tasks.celery_app import app as celery_app

DEFAULT_PASSWORD = "Secur3Pass"


@pytest.fixture
def client(api_env):
    """API test client over a fresh database."""
    from haystackfi.api.main import create_app

    celery_app.conf.task_always_eager = True
    with TestClient(create_app()) as test_client:
        yield test_client


@pytest.fixture
def db_session(client):
    SessionLocal = get_session_factory()
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def make_user(db_session) -> Callable[..., User]:
    counter = {"n": 0}

    def _make_user(role: UserRole = UserRole.BANK, **fields) -> User:
        counter["n"] += 1
        defaults = {
            "email": f"{role.value}{counter['n']}@haystack-test.com",
            "first_name": role.value.title(),
            "last_name": f"User{counter['n']}",
        }
        defaults.update(fields)
        user = User(role=role.value, password_hash=hash_password(DEFAULT_PASSWORD), **defaults)
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_vendor(db_session) -> Callable[..., Vendor]:
    def _make_vendor(name: str = "CoreTech Solutions", owner: User = None, **profile) -> Vendor:
        profile_fields = {
            "category": "Core Banking",
            "location": "Austin, TX",
            "status": VendorStatus.ACTIVE.value,
            "verification_status": VerificationStatus.PENDING.value,
        }
        profile_fields.update(profile)
        vendor = Vendor(
            company_name=name,
            website=f"https://{name.lower().replace(' ', '-')}.com",
            owner_id=owner.id if owner else None,
            profile=VendorProfile(**profile_fields),
        )
        db_session.add(vendor)
        db_session.commit()
        db_session.refresh(vendor)
        return vendor

    return _make_vendor


@pytest.fixture
def auth_headers() -> Callable[[User], Dict[str, str]]:
    def _auth_headers(user: User) -> Dict[str, str]:
        token = create_access_token(token_claims_for(user))
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers


@pytest.fixture
def admin(make_user) -> User:
    return make_user(UserRole.ADMIN, email="admin@haystackfi.com")


@pytest.fixture
def user_password() -> str:
    """Password of every user built by make_user."""
    return DEFAULT_PASSWORD
