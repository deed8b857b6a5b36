"""Profile service — reading and editing the authenticated user's account."""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.models.user import User
from marketplace.modules.auth.constants import MIN_PASSWORD_LENGTH, PASSWORD_TOO_LONG_MESSAGE
from marketplace.modules.auth.passwords import hash_password, password_too_long, verify_password
from marketplace.modules.auth.schemas import ProfileUpdateRequest
from marketplace.schemas.responses import ServiceResult

PASSWORD_FIELDS = ("currentPassword", "newPassword", "confirmPassword")


def format_user_profile(user: User) -> dict[str, Any]:
    return {
        "id": user.id,
        "email": user.email,
        "fullName": user.full_name,
        "roles": user.get_roles(),
        "isVerified": user.is_verified,
        "isActive": user.is_active,
    }


class ProfileService:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    def get_profile(self, user: User) -> ServiceResult:
        return ServiceResult.ok(format_user_profile(user))

    async def update_profile(self, user: User, data: dict[str, Any]) -> ServiceResult:
        try:
            request = ProfileUpdateRequest.model_validate(data)
        except ValidationError as exc:
            # Profile edits report a single message, not a field map
            return ServiceResult.fail(", ".join(err["msg"] for err in exc.errors()))

        if request.email and request.email != user.email:
            existing = await self._session.execute(
                select(User.id).where(User.email == request.email, User.id != user.id)
            )
            if existing.scalar_one_or_none() is not None:
                return ServiceResult.fail("Email address is already in use")
            user.email = request.email

        if request.full_name:
            user.full_name = request.full_name

        await self._session.flush()

        return ServiceResult.ok({"message": "Profile updated successfully", "user": format_user_profile(user)})

    async def change_password(self, user: User, data: dict[str, Any]) -> ServiceResult:
        for field in PASSWORD_FIELDS:
            value = data.get(field)
            if not isinstance(value, str) or not value.strip():
                return ServiceResult.fail(f"{field[0].upper()}{field[1:]} is required")

        current_password = data["currentPassword"]
        new_password = data["newPassword"]
        confirm_password = data["confirmPassword"]

        if not verify_password(current_password, user.password):
            return ServiceResult.fail("Current password is incorrect")

        if len(new_password) < MIN_PASSWORD_LENGTH:
            return ServiceResult.fail(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")

        if password_too_long(new_password):
            return ServiceResult.fail(PASSWORD_TOO_LONG_MESSAGE)

        if new_password != confirm_password:
            return ServiceResult.fail("Passwords do not match")

        user.password = hash_password(new_password)
        await self._session.flush()

        return ServiceResult.ok({"message": "Password changed successfully"})
