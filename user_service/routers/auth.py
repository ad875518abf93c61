"""Authentication API router."""

from fastapi import APIRouter
from fastapi.concurrency import run_in_threadpool

from user_service.deps import CurrentUserId, DbSession, LoginBody, RegisterBody
from user_service.logger import get_logger
from user_service.responses import ok
from user_service.schemas import Envelope, TokenResponse, UserResponse
from user_service.security import create_access_token, hash_password, verify_password
from user_service.services import users as user_service
from user_service.services.users import EMAIL_EXISTS
from user_service.utils.exceptions import (
    AuthFailure,
    raise_conflict,
    raise_not_found,
    raise_unauthorized,
)

router = APIRouter(tags=["auth"])
logger = get_logger(__name__)


@router.post("/auth/register", response_model=Envelope[TokenResponse])
async def register(data: RegisterBody, db: DbSession) -> Envelope[TokenResponse]:
    """Register a new user and return a token for it."""
    # Early rejection only; the unique constraint settles races in create_user
    if await user_service.get_user_by_email(db, data["email"]) is not None:
        raise_conflict({"email": EMAIL_EXISTS})

    password_hash = await run_in_threadpool(hash_password, data["password"])
    user = await user_service.create_user(db, data["name"], data["email"], password_hash)

    return ok(TokenResponse(token=create_access_token(user.id)))


@router.post("/auth/login", response_model=Envelope[TokenResponse])
async def login(data: LoginBody, db: DbSession) -> Envelope[TokenResponse]:
    """Login with email and password."""
    user = await user_service.get_user_by_email(db, data["email"], include_password=True)
    if user is None:
        raise_not_found("Email")

    if not await run_in_threadpool(verify_password, data["password"], user.password):
        logger.warning("Failed login attempt", user_id=user.id)
        raise_unauthorized(AuthFailure.BAD_CREDENTIALS)

    logger.info("Successful login", user_id=user.id)
    return ok(TokenResponse(token=create_access_token(user.id)))


@router.get("/me", response_model=Envelope[UserResponse])
async def get_me(user_id: CurrentUserId, db: DbSession) -> Envelope[UserResponse]:
    """Get current authenticated user."""
    user = await user_service.get_user(db, user_id)
    if user is None:
        raise_not_found("User")

    return ok(UserResponse.model_validate(user))
