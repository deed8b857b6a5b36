"""JWT authentication dependencies for FastAPI.

Validates Bearer tokens from the Authorization header, reloads the user the
token was issued to, and applies the post-authentication account check.
"""

import logging
from datetime import datetime, timedelta, timezone

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.config import settings
from marketplace.database.session import get_db
from marketplace.exceptions import ForbiddenException, UnauthorizedException
from marketplace.models.enums import UserRole
from marketplace.models.user import User
from marketplace.modules.auth.user_checker import check_post_auth

logger = logging.getLogger(__name__)

# Extracts the Bearer token from the Authorization header
_bearer_scheme = HTTPBearer(auto_error=False)


def create_access_token(user: User, now: datetime | None = None) -> str:
    """Sign a short-lived access token for *user*."""
    issued_at = now or datetime.now(timezone.utc)
    payload = {
        "sub": str(user.id),
        "email": user.email,
        "roles": user.get_roles(),
        "iat": int(issued_at.timestamp()),
        "exp": int((issued_at + timedelta(minutes=settings.jwt_expiry_minutes)).timestamp()),
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict:
    """Decode and validate a JWT token. Raises UnauthorizedException on failure."""
    try:
        return jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError as exc:
        logger.warning("JWT validation failed: %s", exc)
        raise UnauthorizedException("Invalid or expired token") from exc


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """FastAPI dependency resolving the authenticated :class:`User`."""
    if credentials is None:
        raise UnauthorizedException("Authentication required")

    payload = decode_token(credentials.credentials)

    try:
        user_id = int(payload["sub"])
    except (KeyError, TypeError, ValueError) as exc:
        raise UnauthorizedException("Token is missing required claims") from exc

    user = await db.get(User, user_id)
    if user is None:
        raise UnauthorizedException("User for this token no longer exists")

    check_post_auth(user)

    request.state.user = user
    return user


async def get_optional_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User | None:
    """Like get_current_user but returns None instead of raising for anonymous requests."""
    if credentials is None:
        return None

    try:
        return await get_current_user(request, credentials, db)
    except UnauthorizedException:
        return None


def require_role(role: UserRole):
    """Factory returning a dependency that admits only users holding *role*."""

    async def _check(user: User = Depends(get_current_user)) -> User:
        if not user.has_role(role):
            raise ForbiddenException(f"Access denied: requires {role.value}")
        return user

    return _check


require_merchant = require_role(UserRole.MERCHANT)
require_buyer = require_role(UserRole.BUYER)
