"""Common Pydantic schemas."""

from datetime import datetime, timezone
from typing import List, Optional
from pydantic import BaseModel, Field


def to_naive_utc(value: datetime) -> datetime:
    """Normalize an incoming timestamp to naive UTC, the form stored in the database."""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class Money(BaseModel):
    """Money representation with amount in minor units."""

    amount: int = Field(..., ge=0, description="Amount in minor units (e.g., cents)")
    currency: str = Field(..., min_length=3, max_length=3, pattern=r"^[A-Z]{3}$", description="ISO 4217 currency code")


class Violation(BaseModel):
    """Validation error violation."""

    path: str = Field(..., description="JSON path to the invalid field")
    message: str = Field(..., description="Validation error message")


class Problem(BaseModel):
    """RFC 9457 Problem Details response."""

    type: Optional[str] = Field(None, description="Problem type URI")
    title: str = Field(..., description="Short human-readable summary")
    status: int = Field(..., description="HTTP status code")
    detail: Optional[str] = Field(None, description="Human-readable explanation")
    instance: Optional[str] = Field(None, description="URI reference for this occurrence")
    code: Optional[str] = Field(None, description="Application-specific error code, e.g. CAPACITY_EXCEEDED")
    retryable: Optional[bool] = Field(None, description="Whether the operation can be retried")
    requested_seats: Optional[int] = Field(None, description="Seats asked for by a rejected booking")
    available_seats: Optional[int] = Field(None, description="Seats left on the slot when the booking was rejected")
    violations: Optional[List[Violation]] = Field(None, description="Validation errors")


# OpenAPI error documentation shared by the RPC routers
PROBLEM_RESPONSES = {
    400: {"model": Problem, "description": "Request rejected by business validation"},
    404: {"model": Problem, "description": "Referenced resource does not exist"},
    409: {"model": Problem, "description": "Conflict with existing state"},
    422: {"model": Problem, "description": "Request body failed schema validation"},
}
