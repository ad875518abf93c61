"""Error taxonomy and raising helpers shared by routers and dependencies.

Routers never build HTTP responses for failures themselves. They raise a
``ServiceError`` through one of the ``raise_*`` helpers and the application's
exception handlers turn it into the uniform envelope.
"""

from enum import Enum
from typing import NoReturn


class ErrorKind(str, Enum):
    """Outcome classes a request can fail with."""

    VALIDATION_FAILED = "validation_failed"
    AUTH_FAILED = "auth_failed"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    UNKNOWN = "unknown"


class AuthFailure(str, Enum):
    """Reason attached to an ``AUTH_FAILED`` error."""

    TOKEN_MISSING = "token_missing"
    TOKEN_INVALID = "token_invalid"
    TOKEN_EXPIRED = "token_expired"
    BAD_CREDENTIALS = "bad_credentials"


AUTH_FAILURE_MESSAGES: dict[AuthFailure, str] = {
    AuthFailure.TOKEN_MISSING: "Authentication token is missing",
    AuthFailure.TOKEN_INVALID: "Authentication token is invalid",
    AuthFailure.TOKEN_EXPIRED: "Authentication token has expired",
    AuthFailure.BAD_CREDENTIALS: "Incorrect password",
}


class ServiceError(Exception):
    """An expected failure carrying its kind and user-facing detail."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        *,
        errors: dict[str, str] | None = None,
        reason: AuthFailure | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.errors = errors
        self.reason = reason

    def __repr__(self) -> str:
        return f"ServiceError(kind={self.kind.value!r}, message={self.message!r})"


def raise_validation_failed(errors: dict[str, str], *, cause: Exception | None = None) -> NoReturn:
    raise ServiceError(ErrorKind.VALIDATION_FAILED, "Validation failed", errors=errors) from cause


def raise_unauthorized(reason: AuthFailure, *, cause: Exception | None = None) -> NoReturn:
    raise ServiceError(
        ErrorKind.AUTH_FAILED,
        AUTH_FAILURE_MESSAGES[reason],
        reason=reason,
    ) from cause


def raise_not_found(resource_name: str, *, cause: Exception | None = None) -> NoReturn:
    raise ServiceError(ErrorKind.NOT_FOUND, f"{resource_name} not found") from cause


def raise_conflict(errors: dict[str, str], *, cause: Exception | None = None) -> NoReturn:
    raise ServiceError(ErrorKind.CONFLICT, "Resource already exists", errors=errors) from cause
