"""Exception hierarchy for errors that short-circuit the result flow.

Domain outcomes (validation failures, ownership checks, missing records) are
reported as :class:`~marketplace.schemas.responses.ServiceResult` objects.
The exceptions below cover what cannot be expressed that way: failed
authentication, missing roles, and callers breaking a function's contract.
"""

from __future__ import annotations


class AppException(Exception):
    """Base exception for all application errors.

    Subclasses set ``code`` and ``status_code`` at the class level; callers
    provide ``message`` and an optional ``details`` list.
    """

    code: str = "APP_ERROR"
    status_code: int = 500

    def __init__(self, message: str, details: list[dict] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or []


class ForbiddenException(AppException):
    code = "FORBIDDEN"
    status_code = 403


class UnauthorizedException(AppException):
    code = "UNAUTHORIZED"
    status_code = 401


class AccountStatusException(UnauthorizedException):
    """Raised when an inactive account tries to authenticate."""

    code = "ACCOUNT_INACTIVE"


class ContractViolationException(AppException):
    """A caller passed input outside a function's documented domain.

    Signals a bug in the calling code, never a condition to recover from.
    """

    code = "CONTRACT_VIOLATION"
    status_code = 500
