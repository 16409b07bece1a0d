"""Authentication routes and helpers."""
import logging

import jwt
from fastapi import APIRouter, Depends, Response, status
from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from .config import get_settings
from .dependencies import get_db_session, get_optional_principal, token_payload
from .errors import AuthenticationError, ConflictError
from .models import User
from .permissions import Principal
from .schemas import (
    Message,
    SessionStatus,
    UserCreate,
    UserEnvelope,
    UserLogin,
    UserRead,
    compute_expiry,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

# Use PBKDF2-SHA256 instead of bcrypt to avoid bcrypt backend issues
password_context = CryptContext(
    schemes=["pbkdf2_sha256"],
    deprecated="auto",
)


def hash_password(password: str) -> str:
    """Hash a password for storage."""
    return password_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Check a plain password against the stored hash."""
    return password_context.verify(password, password_hash)


def _normalise_email(email: str) -> str:
    return email.strip().lower()


async def register(session: AsyncSession, payload: UserCreate) -> User:
    """Create a user account. Emails are unique regardless of case."""

    email = _normalise_email(payload.email)
    existing = await session.execute(select(User).where(User.email == email))
    if existing.scalar_one_or_none() is not None:
        raise ConflictError("Email already registered")

    user = User(
        nome=payload.nome,
        cognome=payload.cognome,
        email=email,
        ruolo=payload.ruolo,
        password_hash=hash_password(payload.password),
    )
    session.add(user)
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise ConflictError("Email already registered") from exc
    await session.refresh(user)
    logger.info("Registered user %s as %s", user.id, user.ruolo.value)
    return user


async def authenticate(session: AsyncSession, email: str, password: str) -> User:
    """Return the user matching the credentials or raise AuthenticationError."""

    result = await session.execute(select(User).where(User.email == _normalise_email(email)))
    user = result.scalar_one_or_none()
    if user is None or not verify_password(password, user.password_hash):
        logger.warning("Failed login attempt")
        raise AuthenticationError("Invalid credentials")
    return user


def issue_token(user: User) -> str:
    """Sign a session token for ``user``."""

    settings = get_settings()
    expires_at = compute_expiry(settings.access_token_expires_minutes)
    return jwt.encode(
        {**token_payload(user), "exp": int(expires_at.timestamp())},
        settings.secret_key,
        algorithm="HS256",
    )


@router.post("/register", response_model=UserEnvelope, status_code=status.HTTP_201_CREATED)
async def register_user(
    payload: UserCreate, session: AsyncSession = Depends(get_db_session)
) -> UserEnvelope:
    """Create an employee or manager account."""

    user = await register(session, payload)
    return UserEnvelope(message="Registration completed", user=UserRead.model_validate(user))


@router.post("/login", response_model=UserEnvelope)
async def login(
    payload: UserLogin,
    response: Response,
    session: AsyncSession = Depends(get_db_session),
) -> UserEnvelope:
    """Verify credentials and set the HTTP-only session cookie."""

    settings = get_settings()
    user = await authenticate(session, payload.email, payload.password)
    response.set_cookie(
        key=settings.session_cookie_name,
        value=issue_token(user),
        max_age=settings.access_token_expires_minutes * 60,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite=settings.session_cookie_samesite,
    )
    logger.info("User %s logged in", user.id)
    return UserEnvelope(message="Login successful", user=UserRead.model_validate(user))


@router.get("/auth/me", response_model=SessionStatus)
async def me(principal: Principal | None = Depends(get_optional_principal)) -> SessionStatus:
    """Report whether the caller holds a valid session; never fails on a bad one."""

    if principal is None:
        return SessionStatus(authenticated=False, user=None)
    return SessionStatus(authenticated=True, user=UserRead.model_validate(principal))


@router.post("/auth/logout", response_model=Message)
async def logout(response: Response) -> Message:
    """Clear the session cookie."""

    settings = get_settings()
    response.delete_cookie(
        key=settings.session_cookie_name,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite=settings.session_cookie_samesite,
    )
    return Message(message="Logout successful")
