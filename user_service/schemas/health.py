"""Health check schema."""

from pydantic import BaseModel


class HealthStatus(BaseModel):
    checks: dict[str, bool]
    version: str
