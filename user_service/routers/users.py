"""User management API router."""

from typing import Annotated

from fastapi import APIRouter, Query
from fastapi.concurrency import run_in_threadpool

from user_service.deps import DbSession, RegisterBody, UpdateUserBody
from user_service.responses import ok
from user_service.schemas import Envelope, UserListResponse, UserResponse
from user_service.security import hash_password
from user_service.services import users as user_service
from user_service.services.users import EMAIL_EXISTS, PAGE_SIZE, SortOrder
from user_service.utils.exceptions import raise_conflict, raise_not_found

router = APIRouter(prefix="/user", tags=["users"])


@router.get("", response_model=Envelope[UserListResponse])
async def list_users(
    db: DbSession,
    order: Annotated[SortOrder, Query(description="Sort direction on id")] = "asc",
) -> Envelope[UserListResponse]:
    """List the first page of users."""
    users, total = await user_service.list_users(db, order=order, limit=PAGE_SIZE)

    return ok(
        UserListResponse(
            items=[UserResponse.model_validate(user) for user in users],
            total=total,
        )
    )


@router.post("", response_model=Envelope[UserResponse])
async def create_user(data: RegisterBody, db: DbSession) -> Envelope[UserResponse]:
    """Create a new user."""
    if await user_service.get_user_by_email(db, data["email"]) is not None:
        raise_conflict({"email": EMAIL_EXISTS})

    password_hash = await run_in_threadpool(hash_password, data["password"])
    user = await user_service.create_user(db, data["name"], data["email"], password_hash)

    return ok(UserResponse.model_validate(user))


@router.get("/{user_id:int}", response_model=Envelope[UserResponse])
async def get_user(user_id: int, db: DbSession) -> Envelope[UserResponse]:
    """Get user by ID."""
    user = await user_service.get_user(db, user_id)
    if user is None:
        raise_not_found("User")

    return ok(UserResponse.model_validate(user))


@router.patch("/{user_id:int}", response_model=Envelope[UserResponse])
async def update_user(user_id: int, data: UpdateUserBody, db: DbSession) -> Envelope[UserResponse]:
    """Rename a user. Email and password are left untouched."""
    user = await user_service.update_user(db, user_id, {"name": data["name"]})
    if user is None:
        raise_not_found("User")

    return ok(UserResponse.model_validate(user))


@router.delete("/{user_id:int}", response_model=Envelope[UserResponse])
async def delete_user(user_id: int, db: DbSession) -> Envelope[UserResponse]:
    """Delete a user and return the deleted record."""
    user = await user_service.delete_user(db, user_id)
    if user is None:
        raise_not_found("User")

    return ok(UserResponse.model_validate(user))
