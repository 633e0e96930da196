"""Booking-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from .common import Money, to_naive_utc
from .tour import IncludedItem


class CreateBookingRequest(BaseModel):
    """Request schema for booking seats on a tour date."""

    tour_id: int = Field(..., description="Tour to book")
    start_date: datetime = Field(..., description="Slot date to book, must be in the future")
    adults: int = Field(..., ge=1, le=100, description="Number of adults")
    children: int = Field(..., ge=0, le=100, description="Number of children")
    accommodation_booking: str | None = Field(
        None,
        max_length=32,
        description="Room type (SINGLE, DOUBLE, TRIPLE, QUADRUPLE); unknown values book SINGLE"
    )
    payment_method_id: int | None = Field(None, description="Payment method used for this booking")

    @field_validator("start_date")
    @classmethod
    def normalize_start_date(cls, v: datetime) -> datetime:
        return to_naive_utc(v)


class GetBookingRequest(BaseModel):
    """Request schema for getting a booking."""

    booking_id: int = Field(..., description="Booking to retrieve")


class ListBookingsRequest(BaseModel):
    """Request schema for listing bookings."""

    tour_id: int | None = Field(None, description="Only bookings for this tour")
    user_id: int | None = Field(None, description="Only bookings made by this user")


class Booking(BaseModel):
    """Booking response schema."""

    id: int = Field(..., description="Unique booking ID")
    user_id: int = Field(..., description="Booking owner")
    tour_id: int = Field(..., description="Booked tour")
    availability_id: int = Field(..., description="Slot the booking consumed")
    tour_name: str = Field(..., description="Tour name")
    tour_description: str | None = Field(None, description="Tour description")
    start_date: datetime = Field(..., description="Start of the trip (ISO 8601)")
    end_date: datetime = Field(..., description="End of the trip (ISO 8601)")
    creation_date: datetime = Field(..., description="Booking creation time (ISO 8601)")
    accommodation: str | None = Field(None, description="Room type")
    adults: int = Field(..., ge=1, description="Number of adults")
    children: int = Field(..., ge=0, description="Number of children")
    price: Money = Field(..., description="Total price")
    payment_method: str | None = Field(None, description="Payment method name")
    includes: list[IncludedItem] = Field(default_factory=list, description="What the tour includes")


class BookingList(BaseModel):
    """List of bookings."""

    items: list[Booking] = Field(default_factory=list, description="Bookings")
