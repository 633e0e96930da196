"""Tour-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from ..models.tour import TourStatus
from .availability import AvailabilitySlot
from .common import Money, to_naive_utc


class Destination(BaseModel):
    """Where a tour goes."""

    country: str = Field(..., min_length=1, max_length=100, description="Destination country")
    city: str = Field(..., min_length=1, max_length=100, description="Destination city")


class TourDetails(BaseModel):
    """Editable tour fields shared by creation and update."""

    name: str = Field(..., min_length=1, max_length=100, description="Tour name")
    description: str = Field(..., min_length=1, max_length=2000, description="Tour description")
    adult_price: int = Field(..., ge=0, description="Price per adult in minor units")
    child_price: int = Field(0, ge=0, description="Price per child in minor units")
    currency: str | None = Field(None, pattern=r"^[A-Z]{3}$", description="ISO 4217 currency code")
    status: TourStatus = Field(TourStatus.ACTIVE, description="Tour status")
    tags: list[str] = Field(default_factory=list, description="Tag names")
    includes: list[str] = Field(default_factory=list, description="Included item types")
    hotels: list[str] = Field(default_factory=list, description="Hotel names")
    destination: Destination = Field(..., description="Destination")
    images: list[str] = Field(default_factory=list, description="Image URLs")


class CreateTourRequest(TourDetails):
    """Request schema for creating a tour."""

    availability: list[AvailabilitySlot] = Field(default_factory=list, description="Initial slots")


class UpdateTourRequest(TourDetails):
    """Request schema for replacing a tour's details."""

    tour_id: int = Field(..., description="Tour to update")


class DeleteTourRequest(BaseModel):
    """Request schema for deleting a tour."""

    tour_id: int = Field(..., description="Tour to delete")


class ListToursRequest(BaseModel):
    """Request schema for listing tours, optionally one page at a time."""

    page: int | None = Field(None, ge=0, description="Zero-based page; omit for every tour")
    size: int = Field(20, ge=1, le=100, description="Tours per page")


class GetTourRequest(BaseModel):
    """Request schema for getting a tour."""

    tour_id: int = Field(..., description="Tour to retrieve")


class FilterToursRequest(BaseModel):
    """Request schema for filtering tours by tag."""

    tags: list[str] = Field(default_factory=list, description="Tag names; empty returns every tour")


class SearchToursRequest(BaseModel):
    """Request schema for searching tours by name and slot dates."""

    name: str | None = Field(None, max_length=100, description="Case-insensitive name fragment")
    start_date: datetime | None = Field(None, description="Only tours with a slot on or after this")
    end_date: datetime | None = Field(None, description="Only tours with a slot on or before this")

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_dates(cls, v: datetime | None) -> datetime | None:
        return to_naive_utc(v) if v else v


class UpdateTagsRequest(BaseModel):
    """Request schema for replacing a tour's tags."""

    tour_id: int = Field(..., description="Tour to update")
    tags: list[str] = Field(..., description="New tag names")


class CreateIncludedItemRequest(BaseModel):
    """Request schema for adding an included-item type to the catalog."""

    type: str = Field(..., min_length=1, max_length=100, description="Item type, e.g. Transport")
    icon: str | None = Field(None, max_length=255, description="Icon markup or name")
    details: str | None = Field(None, max_length=255, description="Short details")
    description: str | None = Field(None, max_length=2000, description="Long description")


class IncludedItem(BaseModel):
    """Included item response schema."""

    id: int = Field(..., description="Unique item ID")
    type: str = Field(..., description="Item type")
    icon: str | None = Field(None, description="Icon markup or name")
    details: str | None = Field(None, description="Short details")
    description: str | None = Field(None, description="Long description")

    model_config = {"from_attributes": True}


class Tour(BaseModel):
    """Tour response schema."""

    id: int = Field(..., description="Unique tour ID")
    name: str = Field(..., description="Tour name")
    description: str | None = Field(None, description="Tour description")
    status: TourStatus = Field(..., description="Tour status")
    adult_price: Money = Field(..., description="Price per adult")
    child_price: Money = Field(..., description="Price per child")
    tags: list[str] = Field(default_factory=list, description="Tag names")
    includes: list[IncludedItem] = Field(default_factory=list, description="Included items")
    hotels: list[str] = Field(default_factory=list, description="Hotel names")
    destination: Destination = Field(..., description="Destination")
    images: list[str] = Field(default_factory=list, description="Image URLs")
    created_at: datetime = Field(..., description="Creation time (ISO 8601)")


class TourList(BaseModel):
    """List of tours."""

    items: list[Tour] = Field(default_factory=list, description="Tours")
    page: int | None = Field(None, description="Zero-based page, when the list was paged")
    size: int | None = Field(None, description="Page size, when the list was paged")
    total: int | None = Field(None, description="Number of tours across all pages, when the list was paged")


class DeleteTourResponse(BaseModel):
    """Result of deleting a tour."""

    tour_id: int = Field(..., description="Deleted tour")
    deleted: bool = Field(True, description="Whether the tour was removed")
