"""User persistence operations.

Every function takes the request's ``AsyncSession`` explicitly. Lookups
return ``None`` when nothing matches; callers decide whether that is a 404.
The unique constraint on ``Users.email`` is the authority on uniqueness:
``create_user`` turns its violation into a conflict even when an earlier
pre-check saw no existing row.
"""

from collections.abc import Mapping
from typing import Any, Literal

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import undefer

from user_service.logger import async_log_timing, get_logger
from user_service.models import User
from user_service.utils.exceptions import raise_conflict

logger = get_logger(__name__)

PAGE_SIZE = 10
# Largest value the Users.id INTEGER column can hold
MAX_USER_ID = 2**31 - 1
EMAIL_EXISTS = "Email already exists"
MUTABLE_FIELDS = frozenset({"name", "email", "password"})

SortOrder = Literal["asc", "desc"]


async def get_user(db: AsyncSession, user_id: int) -> User | None:
    if not 1 <= user_id <= MAX_USER_ID:
        # Out of column range: no row can match, and drivers reject the bind
        return None
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_user_by_email(
    db: AsyncSession,
    email: str,
    *,
    include_password: bool = False,
) -> User | None:
    """Look a user up by normalized email.

    Only the login flow passes ``include_password=True``; every other read
    leaves the hash column unloaded.
    """
    query = select(User).where(User.email == email)
    if include_password:
        query = query.options(undefer(User.password))
    result = await db.execute(query)
    return result.scalar_one_or_none()


async def create_user(db: AsyncSession, name: str, email: str, password_hash: str) -> User:
    user = User(name=name, email=email, password=password_hash)
    db.add(user)
    try:
        await db.commit()
    except IntegrityError as exc:
        # Another request inserted the same email between our pre-check and commit
        await db.rollback()
        logger.info("Email uniqueness rejected by storage", email=email)
        raise_conflict({"email": EMAIL_EXISTS}, cause=exc)
    await db.refresh(user)

    logger.info("User created", user_id=user.id)
    return user


async def update_user(db: AsyncSession, user_id: int, fields: Mapping[str, Any]) -> User | None:
    """Apply ``fields`` to the user; unknown keys are ignored."""
    user = await get_user(db, user_id)
    if user is None:
        return None

    for field, value in fields.items():
        if field in MUTABLE_FIELDS:
            setattr(user, field, value)

    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        raise_conflict({"email": EMAIL_EXISTS}, cause=exc)
    await db.refresh(user)

    logger.info("User updated", user_id=user_id, fields=sorted(set(fields) & MUTABLE_FIELDS))
    return user


async def delete_user(db: AsyncSession, user_id: int) -> User | None:
    """Delete the user and return the row as it was before deletion."""
    user = await get_user(db, user_id)
    if user is None:
        return None

    await db.delete(user)
    await db.commit()

    logger.info("User deleted", user_id=user_id)
    return user


async def list_users(
    db: AsyncSession,
    order: SortOrder = "asc",
    limit: int = PAGE_SIZE,
) -> tuple[list[User], int]:
    """Return one page of users ordered by id, plus the total row count."""
    async with async_log_timing("list_users", logger=logger, order=order, limit=limit) as timing:
        count_result = await db.execute(select(func.count(User.id)))
        total = count_result.scalar_one()

        order_by = User.id.asc() if order == "asc" else User.id.desc()
        result = await db.execute(select(User).order_by(order_by).limit(limit))
        users = list(result.scalars().all())
        timing["returned"] = len(users)

    return users, total
