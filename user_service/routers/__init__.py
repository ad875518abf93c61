"""API routers package."""

from user_service.routers import auth, users

__all__ = ["auth", "users"]
