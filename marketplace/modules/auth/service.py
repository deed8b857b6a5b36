"""Auth service — registration, activation, login and refresh tokens."""

from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.api.requests import errors_from_validation
from marketplace.config import settings
from marketplace.exceptions import UnauthorizedException
from marketplace.models.enums import UserRole
from marketplace.models.refresh_token import RefreshToken
from marketplace.models.user import User
from marketplace.modules.auth.auth import create_access_token
from marketplace.modules.auth.constants import EMAIL_TAKEN_MESSAGE, INVALID_CREDENTIALS_MESSAGE
from marketplace.modules.auth.passwords import hash_password, verify_password
from marketplace.modules.auth.schemas import RegisterRequest
from marketplace.modules.auth.user_checker import check_post_auth, check_pre_auth
from marketplace.schemas.responses import ServiceResult, not_found

logger = logging.getLogger(__name__)


def format_user(user: User) -> dict[str, Any]:
    return {
        "id": user.id,
        "email": user.email,
        "fullName": user.full_name,
        "roles": user.get_roles(),
    }


def build_authentication_success_payload(
    user: User,
    token: str,
    refresh_token: str | None,
) -> dict[str, Any]:
    """Shape the login response: the token, the refresh token and a user summary."""
    payload: dict[str, Any] = {"token": token, "user": format_user(user)}
    if refresh_token is not None:
        payload["refresh_token"] = refresh_token
    return payload


class AuthService:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    async def register(self, data: dict[str, Any]) -> ServiceResult:
        try:
            request = RegisterRequest.model_validate(data)
        except ValidationError as exc:
            return ServiceResult.invalid(errors_from_validation(exc))

        if await self._find_by_email(request.email) is not None:
            return ServiceResult.invalid({"email": EMAIL_TAKEN_MESSAGE})

        roles = [role.value for role in request.roles] if request.roles else [UserRole.BUYER.value]
        user = User(
            email=request.email,
            full_name=request.full_name,
            password=hash_password(request.password),
            roles=list(dict.fromkeys(roles)),
            is_verified=False,
            is_active=not settings.require_account_activation,
        )
        if settings.require_account_activation:
            user.activation_token = secrets.token_urlsafe(48)
            user.token_expires_at = datetime.now(timezone.utc) + timedelta(
                hours=settings.activation_token_ttl_hours
            )

        self._session.add(user)
        try:
            await self._session.flush()
        except SQLAlchemyError as exc:
            await self._session.rollback()
            logger.exception("Registration failed for %s", request.email)
            return ServiceResult.fail(f"Registration failed: {exc.__class__.__name__}")

        logger.info("Registered user %s (id=%s, active=%s)", user.email, user.id, user.is_active)
        if user.activation_token is not None:
            logger.info("Activation token issued for user id=%s", user.id)

        return ServiceResult.ok({"message": "User created successfully", "user": format_user(user)})

    async def activate(self, token: str) -> ServiceResult:
        result = await self._session.execute(select(User).where(User.activation_token == token))
        user = result.scalar_one_or_none()
        if user is None:
            return not_found("Activation token")

        expires_at = user.token_expires_at
        if expires_at is not None:
            if expires_at.tzinfo is None:
                expires_at = expires_at.replace(tzinfo=timezone.utc)
            if expires_at < datetime.now(timezone.utc):
                return ServiceResult.fail("Activation token has expired")

        user.is_active = True
        user.is_verified = True
        user.activation_token = None
        user.token_expires_at = None
        await self._session.flush()

        return ServiceResult.ok({"message": "Account activated successfully", "user": format_user(user)})

    # ------------------------------------------------------------------
    # Login / refresh
    # ------------------------------------------------------------------

    async def login(self, email: str, password: str) -> dict[str, Any]:
        """Authenticate and return the login payload.

        Raises :class:`UnauthorizedException` for bad credentials and
        :class:`~marketplace.exceptions.AccountStatusException` for
        inactive accounts.
        """
        user = await self._find_by_email(email.strip().lower())
        if user is None:
            raise UnauthorizedException(INVALID_CREDENTIALS_MESSAGE)

        check_pre_auth(user)

        if not verify_password(password, user.password):
            raise UnauthorizedException(INVALID_CREDENTIALS_MESSAGE)

        check_post_auth(user)

        token = create_access_token(user)
        refresh_token = await self._issue_refresh_token(user)
        return build_authentication_success_payload(user, token, refresh_token)

    async def refresh(self, refresh_token: str) -> dict[str, Any]:
        result = await self._session.execute(
            select(RefreshToken).where(RefreshToken.refresh_token == refresh_token)
        )
        stored = result.scalar_one_or_none()
        if stored is None:
            raise UnauthorizedException("Invalid refresh token")

        valid_until = stored.valid
        if valid_until.tzinfo is None:
            valid_until = valid_until.replace(tzinfo=timezone.utc)
        if valid_until < datetime.now(timezone.utc):
            raise UnauthorizedException("Refresh token has expired")

        user = await self._find_by_email(stored.username)
        if user is None:
            raise UnauthorizedException("Invalid refresh token")

        check_post_auth(user)

        return build_authentication_success_payload(user, create_access_token(user), stored.refresh_token)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _find_by_email(self, email: str) -> User | None:
        result = await self._session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def _issue_refresh_token(self, user: User) -> str | None:
        """Persist a new refresh token; a failure here must not block login."""
        token = RefreshToken(
            refresh_token=secrets.token_hex(64),
            username=user.email,
            valid=datetime.now(timezone.utc) + timedelta(seconds=settings.refresh_token_ttl_seconds),
        )
        try:
            async with self._session.begin_nested():
                self._session.add(token)
        except SQLAlchemyError as exc:
            logger.error("Failed to generate refresh token for user id=%s: %s", user.id, exc)
            return None
        return token.refresh_token
