"""Utility functions and helpers."""

from .exceptions import (
    AuthFailure,
    ErrorKind,
    ServiceError,
    raise_conflict,
    raise_not_found,
    raise_unauthorized,
    raise_validation_failed,
)

__all__ = [
    "AuthFailure",
    "ErrorKind",
    "ServiceError",
    "raise_conflict",
    "raise_not_found",
    "raise_unauthorized",
    "raise_validation_failed",
]
