"""Health-related Pydantic schemas."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class HealthStatus(str, Enum):
    HEALTHY = "healthy"


class HealthResponse(BaseModel):
    """Liveness answer of the booking service."""

    status: HealthStatus = Field(..., description="Service status")
    service: str = Field(..., description="Service name reported to tracing and metrics")
    version: str = Field(..., description="Deployed service version")
    environment: str = Field(..., description="Deployment environment")
    timestamp: datetime = Field(..., description="Current server time, naive UTC")
