"""Base schema classes and generic types."""

from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ListResponse(BaseModel, Generic[T]):  # noqa: UP046
    """Generic list response with item count.

    ``total`` counts every row matching the query and may exceed ``len(items)``.
    """

    items: list[T]
    total: int


class Envelope(BaseModel, Generic[T]):  # noqa: UP046
    """Uniform success body: ``{code, success, message, data}``."""

    code: int = 200
    success: bool = True
    message: str = "success"
    data: T


class ErrorEnvelope(BaseModel):
    """Uniform failure body; ``errors`` carries per-field messages when present."""

    code: int
    success: bool = False
    message: str
    errors: dict[str, str] | None = None
