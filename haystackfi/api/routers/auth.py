"""
Authentication routes.
Handles sign-up, sign-in, token refresh, profile management and the
password reset / email verification flows.
"""

import logging
import uuid
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from ...db.enums import UserRole
from ...db.models import User
from ..dependencies import get_current_user, get_db
from ..schemas.auth import (
    AuthMessageResponse,
    AuthResponse,
    ForgotPasswordRequest,
    RefreshTokenRequest,
    ResetPasswordRequest,
    SignInRequest,
    SignUpRequest,
    SignUpResponse,
    TokenPair,
    UpdateProfileRequest,
    UserResponse,
    VerifyEmailRequest,
)
from ..schemas.common import ErrorResponse
from ..security import (
    EMAIL_VERIFICATION_TOKEN,
    PASSWORD_RESET_TOKEN,
    REFRESH_TOKEN,
    access_token_lifetime_seconds,
    create_access_token,
    create_action_token,
    create_refresh_token,
    hash_password,
    token_claims_for,
    verify_password,
    verify_token,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])

RESET_REQUESTED_MESSAGE = "If an account exists for that email, a password reset link has been sent"
VERIFICATION_SENT_MESSAGE = "If an account exists for that email, a verification link has been sent"


def _issue_tokens(user: User) -> dict:
    """
    Mint a token pair and record the refresh token's jti on the user.

    Only the most recently issued refresh token can be exchanged; the caller
    commits the session.
    """
    claims = token_claims_for(user)
    user.refresh_token_jti = uuid.uuid4().hex
    return {
        "access_token": create_access_token(claims),
        "refresh_token": create_refresh_token({**claims, "jti": user.refresh_token_jti}),
        "token_type": "bearer",
        "expires_in": access_token_lifetime_seconds(),
    }


def _send_action_email(user: User, token_type: str) -> str:
    """
    Issue a single-purpose token for the user.

    Mail delivery is not wired up; the link is logged at debug level.
    """
    token = create_action_token({"sub": str(user.id), "ver": user.token_version}, token_type)
    logger.info(f"Issued {token_type} token for user {user.id}")
    logger.debug(f"{token_type} token for {user.email}: {token}")
    return token


def _user_for_action_token(db: Session, token: str, token_type: str) -> User:
    payload = verify_token(token, expected_type=token_type)
    invalid = HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail="Invalid or expired token",
    )
    if not payload:
        raise invalid

    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise invalid

    user = db.query(User).filter(User.id == user_id).first()
    if user is None or payload.get("ver") != user.token_version:
        raise invalid
    return user


@router.post(
    "/signup",
    response_model=SignUpResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Email already registered"},
    },
)
async def sign_up(request: SignUpRequest, db: Session = Depends(get_db)) -> SignUpResponse:
    """
    Register a new account and sign it in.

    Email must be unique. Admin accounts cannot be self-registered.
    """
    email = request.email.lower()
    if db.query(User).filter(User.email == email).first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email address already registered",
        )

    institution_name = request.institution_name
    if request.role == UserRole.VENDOR:
        institution_name = None

    user = User(
        email=email,
        password_hash=hash_password(request.password),
        role=request.role.value,
        is_active=True,
        is_email_verified=False,
        first_name=request.first_name.strip(),
        last_name=request.last_name.strip(),
        phone=request.phone,
        address=request.address,
        city=request.city,
        state=request.state,
        zip=request.zip,
        country=request.country,
        institution_name=institution_name,
        title=request.title,
        last_login=datetime.utcnow(),
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    _send_action_email(user, EMAIL_VERIFICATION_TOKEN)
    tokens = _issue_tokens(user)
    db.commit()
    db.refresh(user)
    logger.info(f"User registered: {user.id} ({user.role})")

    return SignUpResponse(user=UserResponse.model_validate(user), **tokens)


@router.post(
    "/signin",
    response_model=AuthResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
        403: {"model": ErrorResponse, "description": "Account disabled"},
    },
)
async def sign_in(request: SignInRequest, db: Session = Depends(get_db)) -> AuthResponse:
    """
    Sign in and receive access/refresh tokens.
    """
    user = db.query(User).filter(User.email == request.email.lower()).first()
    if not user or not verify_password(request.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is disabled",
        )

    user.last_login = datetime.utcnow()
    tokens = _issue_tokens(user)
    db.commit()
    db.refresh(user)

    return AuthResponse(user=UserResponse.model_validate(user), **tokens)


@router.post(
    "/refresh",
    response_model=TokenPair,
    responses={
        401: {"model": ErrorResponse, "description": "Invalid refresh token"},
    },
)
async def refresh_tokens(request: RefreshTokenRequest, db: Session = Depends(get_db)) -> TokenPair:
    """
    Exchange a refresh token for a new token pair.

    Refresh tokens rotate: every successful refresh returns a new one.
    """
    payload = verify_token(request.refresh_token, expected_type=REFRESH_TOKEN)
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid refresh token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = db.query(User).filter(User.id == user_id).first()
    if not user or not user.is_active or payload.get("ver") != user.token_version:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found or inactive",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.refresh_token_jti or payload.get("jti") != user.refresh_token_jti:
        logger.warning(f"Rejected reuse of a rotated refresh token for user {user.id}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Refresh token has already been used",
            headers={"WWW-Authenticate": "Bearer"},
        )

    tokens = _issue_tokens(user)
    db.commit()
    return TokenPair(**tokens)


@router.get("/profile", response_model=UserResponse)
async def get_profile(current_user: User = Depends(get_current_user)) -> UserResponse:
    """Get the authenticated user's profile."""
    return UserResponse.model_validate(current_user)


@router.put("/profile", response_model=UserResponse)
async def update_profile(
    request: UpdateProfileRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> UserResponse:
    """Update the authenticated user's profile fields."""
    for field, value in request.model_dump(exclude_unset=True).items():
        if value is None and not User.__table__.c[field].nullable:
            continue
        setattr(current_user, field, value.strip() if isinstance(value, str) else value)

    db.commit()
    db.refresh(current_user)

    logger.info(f"Profile updated for user {current_user.id}")
    return UserResponse.model_validate(current_user)


@router.post("/forgot-password", response_model=AuthMessageResponse)
async def forgot_password(
    request: ForgotPasswordRequest, db: Session = Depends(get_db)
) -> AuthMessageResponse:
    """Start a password reset. The response never reveals whether the email exists."""
    user = db.query(User).filter(User.email == request.email.lower()).first()
    if user and user.is_active:
        _send_action_email(user, PASSWORD_RESET_TOKEN)
    return AuthMessageResponse(message=RESET_REQUESTED_MESSAGE)


@router.post(
    "/reset-password",
    response_model=AuthMessageResponse,
    responses={400: {"model": ErrorResponse, "description": "Invalid or expired token"}},
)
async def reset_password(
    request: ResetPasswordRequest, db: Session = Depends(get_db)
) -> AuthMessageResponse:
    """
    Complete a password reset.

    Bumps the token version so every previously issued token stops working.
    """
    user = _user_for_action_token(db, request.token, PASSWORD_RESET_TOKEN)
    user.password_hash = hash_password(request.new_password)
    user.token_version = (user.token_version or 0) + 1
    db.commit()

    logger.info(f"Password reset for user {user.id}")
    return AuthMessageResponse(message="Password has been reset successfully")


@router.post(
    "/verify-email",
    response_model=AuthMessageResponse,
    responses={400: {"model": ErrorResponse, "description": "Invalid or expired token"}},
)
async def verify_email(
    request: VerifyEmailRequest, db: Session = Depends(get_db)
) -> AuthMessageResponse:
    """Confirm the email address of an account."""
    user = _user_for_action_token(db, request.token, EMAIL_VERIFICATION_TOKEN)
    if not user.is_email_verified:
        user.is_email_verified = True
        db.commit()
        logger.info(f"Email verified for user {user.id}")
    return AuthMessageResponse(message="Email verified successfully")


@router.post("/resend-verification", response_model=AuthMessageResponse)
async def resend_verification(
    email: str = Query(..., min_length=3), db: Session = Depends(get_db)
) -> AuthMessageResponse:
    """Re-send the verification link. The response never reveals whether the email exists."""
    user = db.query(User).filter(User.email == email.strip().lower()).first()
    if user and not user.is_email_verified:
        _send_action_email(user, EMAIL_VERIFICATION_TOKEN)
    return AuthMessageResponse(message=VERIFICATION_SENT_MESSAGE)
