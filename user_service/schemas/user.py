"""Pydantic schemas for users."""

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, field_validator

from user_service.schemas.base import ListResponse


class UserResponse(BaseModel):
    """Default read projection of a user. Never carries the password hash."""

    id: int
    name: str
    email: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def ensure_timezone_aware(cls, v: datetime) -> datetime:
        """Ensure datetime fields are timezone-aware."""
        if isinstance(v, datetime) and v.tzinfo is None:
            return v.replace(tzinfo=UTC)
        return v


UserListResponse = ListResponse[UserResponse]
