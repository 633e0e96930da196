"""Availability-related Pydantic schemas."""

from datetime import datetime, time

from pydantic import BaseModel, Field, field_validator

from .common import to_naive_utc


class AvailabilitySlot(BaseModel):
    """Slot definition shared by slot creation and tour creation."""

    available_date: datetime = Field(..., description="Date (and time) the tour runs, must be in the future")
    available_slots: int = Field(..., ge=1, le=10000, description="Seats offered on this date")
    departure_time: time = Field(..., description="Departure time of day")
    return_time: time = Field(..., description="Return time of day")

    @field_validator("available_date")
    @classmethod
    def normalize_available_date(cls, v: datetime) -> datetime:
        return to_naive_utc(v)


class CreateAvailabilityRequest(AvailabilitySlot):
    """Request schema for adding a slot to a tour."""

    tour_id: int = Field(..., description="Tour the slot belongs to")


class ListAvailabilityRequest(BaseModel):
    """Request schema for listing a tour's slots."""

    tour_id: int = Field(..., description="Tour to list slots for")


class SearchAvailabilityRequest(BaseModel):
    """Request schema for an inclusive date range scan across tours."""

    start_date: datetime = Field(..., description="Range start (inclusive)")
    end_date: datetime = Field(..., description="Range end (inclusive)")

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_dates(cls, v: datetime) -> datetime:
        return to_naive_utc(v)


class Availability(BaseModel):
    """Availability response schema."""

    id: int = Field(..., description="Unique availability ID")
    tour_id: int = Field(..., description="Owning tour ID")
    available_date: datetime = Field(..., description="Date the tour runs (ISO 8601)")
    available_slots: int = Field(..., ge=0, description="Remaining seats")
    departure_time: time = Field(..., description="Departure time of day")
    return_time: time = Field(..., description="Return time of day")
    is_reserved: bool = Field(False, description="Whether any booking consumed this slot")

    model_config = {"from_attributes": True}


class AvailabilityList(BaseModel):
    """List of availability slots."""

    items: list[Availability] = Field(default_factory=list, description="Slots")
