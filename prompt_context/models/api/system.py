"""System and monitoring related API models."""

from datetime import datetime

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Health check response for the HTTP transport."""

    status: str = "healthy"
    timestamp: datetime = Field(default_factory=datetime.now)
    version: str
    server_name: str
    rule_count: int = Field(ge=0)
    transport: str


__all__ = ["HealthResponse"]
