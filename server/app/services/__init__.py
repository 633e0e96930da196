"""Service layer package."""

from .availability_service import AvailabilityService
from .booking_service import BookingService
from .payment_service import PaymentService
from .tour_service import TourService

__all__ = [
    "AvailabilityService",
    "BookingService",
    "PaymentService",
    "TourService",
]
