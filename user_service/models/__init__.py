"""SQLAlchemy models package."""

from user_service.models.user import User

__all__ = ["User"]
