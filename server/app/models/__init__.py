"""Models module exporting all database models."""

from .availability import Availability
from .booking import Accommodation, AccommodationType, Booking
from .payment import Pay, PaymentMethod
from .tour import IncludedItem, Tag, TagOption, Tour, TourStatus
from .user import User

__all__ = [
    # Catalog entities
    "Tour",
    "TourStatus",
    "Tag",
    "TagOption",
    "IncludedItem",

    # Capacity
    "Availability",

    # Booking entities
    "Booking",
    "Accommodation",
    "AccommodationType",

    # Payment entities
    "PaymentMethod",
    "Pay",

    # Identity
    "User",
]
