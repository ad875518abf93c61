"""Security utilities for JWT and password hashing."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import uuid4

import bcrypt
import jwt

from user_service.config import settings
from user_service.logger import get_logger
from user_service.utils.exceptions import AuthFailure, raise_unauthorized

logger = get_logger(__name__)

# bcrypt only reads the first 72 bytes of its input
BCRYPT_MAX_BYTES = 72


@dataclass(frozen=True)
class TokenClaims:
    """Claims carried by a verified access token."""

    id: int
    expires_at: datetime


def _encode_password(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    """Hash a password using bcrypt with a fresh salt."""
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(_encode_password(password), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash. Malformed hashes never match."""
    try:
        return bcrypt.checkpw(_encode_password(plain_password), hashed_password.encode("utf-8"))
    except (ValueError, TypeError, AttributeError):
        logger.warning("Password hash could not be parsed")
        return False


def create_access_token(user_id: int, expires_delta: timedelta | None = None) -> str:
    """Create a new JWT access token carrying the user id."""
    now = datetime.now(UTC)
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)

    to_encode: dict[str, Any] = {
        "id": user_id,
        "iat": now,
        "exp": now + expires_delta,
        # Keeps two tokens issued within the same second distinct
        "jti": uuid4().hex,
    }
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.jwt_algorithm)


def verify_access_token(token: str) -> TokenClaims:
    """Decode and validate a JWT access token.

    Raises:
        ServiceError: ``AUTH_FAILED`` with reason ``TOKEN_EXPIRED`` once the
            expiry has passed, ``TOKEN_INVALID`` for anything else that does
            not verify.
    """
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["exp", "id"]},
        )
    except jwt.ExpiredSignatureError as exc:
        logger.debug("JWT token expired")
        raise_unauthorized(AuthFailure.TOKEN_EXPIRED, cause=exc)
    except jwt.PyJWTError as exc:
        logger.warning(
            "JWT decode failed",
            error=str(exc),
            error_type=type(exc).__name__,
        )
        raise_unauthorized(AuthFailure.TOKEN_INVALID, cause=exc)

    user_id = payload["id"]
    if isinstance(user_id, bool) or not isinstance(user_id, int) or user_id < 1:
        logger.warning("JWT carries a malformed id claim", claim_type=type(user_id).__name__)
        raise_unauthorized(AuthFailure.TOKEN_INVALID)

    return TokenClaims(id=user_id, expires_at=datetime.fromtimestamp(payload["exp"], UTC))
