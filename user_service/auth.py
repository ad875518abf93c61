"""Authentication dependency resolving the caller's identity.

The resolved user id is returned to the route as a plain parameter. The token
is trusted as-is: storage is not consulted, so a user deleted after the token
was issued still authenticates until the token expires.
"""

from typing import Annotated

import structlog
from fastapi import Depends, Query
from fastapi.security import OAuth2PasswordBearer

from user_service.security import verify_access_token
from user_service.utils.exceptions import AuthFailure, raise_unauthorized

# auto_error=False: a missing header falls back to ?token= instead of failing here
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


async def get_current_user_id(
    bearer_token: Annotated[str | None, Depends(oauth2_scheme)] = None,
    token: Annotated[str | None, Query()] = None,
) -> int:
    """Resolve the current user ID from the bearer token.

    The ``Authorization`` header wins over the ``token`` query parameter.
    """
    raw_token = bearer_token.strip() if bearer_token else None
    if not raw_token and token and token.strip():
        raw_token = token.strip()
    if not raw_token:
        raise_unauthorized(AuthFailure.TOKEN_MISSING)

    claims = verify_access_token(raw_token)
    structlog.contextvars.bind_contextvars(user_id=claims.id)
    return claims.id
