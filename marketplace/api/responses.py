"""Status-code selection and JSON rendering for service results."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from fastapi.responses import JSONResponse

from marketplace.exceptions import ContractViolationException
from marketplace.schemas.responses import ServiceResult

NOT_FOUND_MARKER = "not found"


def resolve_status_code(result: ServiceResult | Mapping[str, Any], success_status_code: int = 200) -> int:
    """Pick the HTTP status for *result*; the first matching rule wins.

    1. failure whose ``error`` contains ``"not found"`` (case-sensitive) -> 404
    2. failure with a non-empty ``errors`` mapping -> 422
    3. any other failure -> 400
    4. success with a non-200 ``success_status_code`` -> that code
    5. success -> 200

    *result* may be a :class:`ServiceResult` or a plain mapping; a mapping
    without ``success`` raises :class:`ContractViolationException`.
    """
    if isinstance(result, ServiceResult):
        success, error, errors = result.success, result.error, result.errors
    elif isinstance(result, Mapping):
        if "success" not in result:
            raise ContractViolationException("Result is missing the 'success' field")
        success = bool(result["success"])
        error = result.get("error")
        errors = result.get("errors")
    else:
        raise ContractViolationException(f"Unsupported result type: {type(result).__name__}")

    if not success:
        if isinstance(error, str) and NOT_FOUND_MARKER in error:
            return 404
        if isinstance(errors, Mapping) and errors:
            return 422
        return 400

    if success_status_code != 200:
        return success_status_code
    return 200


def create_api_response(result: ServiceResult, success_status_code: int = 200) -> JSONResponse:
    """Render *result* as JSON with the status chosen by :func:`resolve_status_code`."""
    return JSONResponse(
        status_code=resolve_status_code(result, success_status_code),
        content=result.to_payload(),
    )
