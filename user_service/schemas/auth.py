"""Pydantic schemas for authentication."""

from pydantic import BaseModel


class TokenResponse(BaseModel):
    """Issued bearer token."""

    token: str
