"""Pydantic schemas package."""

from user_service.schemas.auth import TokenResponse
from user_service.schemas.base import Envelope, ErrorEnvelope, ListResponse
from user_service.schemas.health import HealthStatus
from user_service.schemas.user import UserListResponse, UserResponse

__all__ = [
    "Envelope",
    "ErrorEnvelope",
    "HealthStatus",
    "ListResponse",
    "TokenResponse",
    "UserListResponse",
    "UserResponse",
]
