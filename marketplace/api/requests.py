"""Helpers for turning raw request bodies into service inputs."""

from __future__ import annotations

import json

from fastapi import Request
from pydantic import ValidationError

from marketplace.schemas.responses import ServiceResult


async def read_json_object(request: Request) -> ServiceResult:
    """Decode the request body as a JSON object.

    Returns a successful result whose ``data`` is the decoded dict, or a
    failed result describing why the body was rejected.
    """
    raw = await request.body()
    if not raw or not raw.strip():
        return ServiceResult.fail("Request body cannot be empty")

    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        return ServiceResult.fail(f"Invalid JSON: {exc}")

    if not isinstance(data, dict):
        return ServiceResult.fail("Request data must be a JSON object")

    return ServiceResult.ok(data)


def errors_from_validation(exc: ValidationError) -> dict[str, str]:
    """Flatten a pydantic ``ValidationError`` into ``{field: message}``.

    Only the first message per field is kept.
    """
    errors: dict[str, str] = {}
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ())) or "(root)"
        errors.setdefault(field, err.get("msg", "Invalid value"))
    return errors
