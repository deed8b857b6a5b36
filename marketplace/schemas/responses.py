"""Response envelopes shared by every endpoint."""

from __future__ import annotations

from typing import Any

from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel, ConfigDict, Field


class ServiceResult(BaseModel):
    """Outcome of a service operation, serialized as the response body.

    Exactly the keys ``success``, ``error``, ``errors`` and ``data`` appear on
    the wire; unset optional keys are omitted.
    """

    success: bool
    error: str | None = None
    errors: dict[str, str] | None = None
    data: Any = None

    @classmethod
    def ok(cls, data: Any = None) -> ServiceResult:
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str) -> ServiceResult:
        return cls(success=False, error=error)

    @classmethod
    def invalid(cls, errors: dict[str, str]) -> ServiceResult:
        return cls(success=False, errors=errors)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"success": self.success}
        if self.error is not None:
            payload["error"] = self.error
        if self.errors is not None:
            payload["errors"] = self.errors
        if self.data is not None:
            payload["data"] = jsonable_encoder(self.data)
        return payload


def not_found(subject: str) -> ServiceResult:
    """Failed result whose message the status resolver maps to 404."""
    return ServiceResult.fail(f"{subject} not found")


class PaginationMetadata(BaseModel):
    """Pagination counters for a listing, camelCased on the wire."""

    current_page: int = Field(alias="currentPage")
    last_page: int = Field(alias="lastPage")
    total_results: int = Field(alias="totalResults")
    has_previous_page: bool = Field(alias="hasPreviousPage")
    has_next_page: bool = Field(alias="hasNextPage")
    previous_page: int | None = Field(default=None, alias="previousPage")
    next_page: int | None = Field(default=None, alias="nextPage")
    has_to_paginate: bool = Field(alias="hasToPaginate")

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class ErrorDetail(BaseModel):
    """A single field-level or contextual error detail."""

    field: str | None = None
    message: str


class ErrorBody(BaseModel):
    """Structured error body returned for authentication and server errors."""

    code: str
    message: str
    details: list[ErrorDetail] = []
    request_id: str = Field(alias="requestId")

    model_config = ConfigDict(populate_by_name=True)


class ErrorResponse(BaseModel):
    """Top-level error envelope."""

    error: ErrorBody
