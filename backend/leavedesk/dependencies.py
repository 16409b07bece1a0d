"""Reusable FastAPI dependencies."""
from __future__ import annotations

from collections.abc import AsyncGenerator
from datetime import datetime, timezone
from typing import Any, Dict

import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from .config import get_settings
from .database import get_session
from .errors import AuthenticationError
from .models import User
from .permissions import Principal
from .schemas import TokenData

# Load settings once
settings = get_settings()

# The browser sends the session cookie; scripts may use a Bearer header instead
bearer_scheme = HTTPBearer(auto_error=False)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Dependency that yields an AsyncSession."""
    async for session in get_session():
        yield session


def _token_from_request(
    request: Request, credentials: HTTPAuthorizationCredentials | None
) -> str | None:
    cookie = request.cookies.get(settings.session_cookie_name)
    if cookie:
        return cookie
    if credentials is not None and credentials.scheme.lower() == "bearer":
        return credentials.credentials
    return None


async def resolve_principal(session: AsyncSession, token: str | None) -> Principal:
    """Turn a raw session token into a Principal or raise AuthenticationError."""

    if not token:
        raise AuthenticationError("Not authenticated")

    try:
        token_data = decode_access_token(token)
        user_id = int(token_data.sub)
    except (jwt.PyJWTError, ValueError) as exc:
        raise AuthenticationError("Could not validate credentials") from exc

    user = await session.get(User, user_id)
    if user is None:
        raise AuthenticationError("Inactive or missing user")

    return Principal.from_user(user)


async def get_current_principal(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: AsyncSession = Depends(get_db_session),
) -> Principal:
    """
    Return the authenticated principal from the session cookie
    (or an Authorization: Bearer <token> header).
    """

    return await resolve_principal(session, _token_from_request(request, credentials))


async def get_optional_principal(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: AsyncSession = Depends(get_db_session),
) -> Principal | None:
    """Like get_current_principal, but an invalid session yields None."""

    try:
        return await resolve_principal(session, _token_from_request(request, credentials))
    except AuthenticationError:
        return None


def decode_access_token(token: str) -> TokenData:
    """Decode a JWT access token and return its payload."""

    payload: Dict[str, Any] = jwt.decode(
        token,
        settings.secret_key,
        algorithms=["HS256"],
    )
    return TokenData(**payload)


def token_payload(user: User) -> dict[str, Any]:
    """
    Generate the JWT payload for a given user.

    auth.login() will add "exp" on top of this.
    """
    return {
        "sub": str(user.id),
        "email": user.email,
        "ruolo": user.ruolo.value,
        "iat": int(datetime.now(timezone.utc).timestamp()),
    }
