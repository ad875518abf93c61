"""Common FastAPI dependencies for consistent type annotations.

Usage:
    from user_service.deps import CurrentUserId, DbSession

    async def my_endpoint(db: DbSession, user_id: CurrentUserId):
        # db is an AsyncSession from the application's Database
        # user_id is the int carried by the verified bearer token
        ...
"""

from typing import Annotated, Any

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from user_service.auth import get_current_user_id
from user_service.database import get_db
from user_service.validation import (
    LOGIN_RULES,
    REGISTER_RULES,
    UPDATE_USER_RULES,
    validated_body,
)

DbSession = Annotated[AsyncSession, Depends(get_db)]
CurrentUserId = Annotated[int, Depends(get_current_user_id)]

RegisterBody = Annotated[dict[str, Any], Depends(validated_body(REGISTER_RULES))]
LoginBody = Annotated[dict[str, Any], Depends(validated_body(LOGIN_RULES))]
UpdateUserBody = Annotated[dict[str, Any], Depends(validated_body(UPDATE_USER_RULES))]

__all__ = ["CurrentUserId", "DbSession", "LoginBody", "RegisterBody", "UpdateUserBody"]
