"""Pydantic request schemas for registration, login and profile changes."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from marketplace.models.enums import UserRole
from marketplace.modules.auth.constants import (
    MAX_EMAIL_LENGTH,
    MAX_FULL_NAME_LENGTH,
    MIN_PASSWORD_LENGTH,
    PASSWORD_TOO_LONG_MESSAGE,
)
from marketplace.modules.auth.passwords import password_too_long


def _normalize_email(value: Any) -> Any:
    if not isinstance(value, str):
        return value
    value = value.strip().lower()
    if len(value) > MAX_EMAIL_LENGTH:
        raise PydanticCustomError(
            "email_too_long",
            "Email cannot be longer than {max_length} characters",
            {"max_length": MAX_EMAIL_LENGTH},
        )
    return value


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)


class RegisterRequest(_CamelModel):
    email: EmailStr
    full_name: str = Field(..., min_length=1, max_length=MAX_FULL_NAME_LENGTH)
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH)
    roles: list[UserRole] | None = None

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value: Any) -> Any:
        return _normalize_email(value)

    @field_validator("password")
    @classmethod
    def check_password_length(cls, value: str) -> str:
        if password_too_long(value):
            raise PydanticCustomError("password_too_long", PASSWORD_TOO_LONG_MESSAGE)
        return value


class ProfileUpdateRequest(_CamelModel):
    email: EmailStr | None = None
    full_name: str | None = Field(None, max_length=MAX_FULL_NAME_LENGTH)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return _normalize_email(value)


class LoginRequest(BaseModel):
    email: str = Field(..., validation_alias=AliasChoices("email", "username"))
    password: str


class RefreshTokenRequest(BaseModel):
    refresh_token: str = Field(..., min_length=1)


class ActivateAccountRequest(BaseModel):
    token: str = Field(..., min_length=1, max_length=128)
