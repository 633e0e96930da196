"""Booking engine: turns a booking request into seats taken on a slot."""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import transaction
from ..core.exceptions import (
    CapacityExceededError,
    ConflictError,
    InternalServerError,
    NotFoundError,
    ValidationError,
)
from ..core.observability import metrics_collector
from ..models.booking import Accommodation, AccommodationType, Booking
from ..models.payment import Pay, PaymentMethod
from ..models.user import User
from ..schemas.booking import CreateBookingRequest
from .availability_service import AvailabilityService
from .payment_service import PaymentService
from .tour_service import TourService

logger = logging.getLogger(__name__)

# PostgreSQL reports the constraint name, SQLite the constrained columns
DUPLICATE_BOOKING_MARKERS = (
    "uq_booking_user_availability",
    "bookings.user_id, bookings.availability_id",
)


def _is_duplicate_booking(error: IntegrityError) -> bool:
    message = str(error.orig)
    return any(marker in message for marker in DUPLICATE_BOOKING_MARKERS)


class BookingService:
    """Service for booking-related operations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.tour_service = TourService(db)
        self.availability_service = AvailabilityService(db)
        self.payment_service = PaymentService(db)

    async def create_booking(self, user_id: int, request: CreateBookingRequest) -> Booking:
        """
        Book seats on the slot a tour runs on the requested date.

        Every check that can reject the request runs before anything is
        written. The reservation, accommodation, payment and booking rows are
        then written in one transaction, so a failure part way leaves the
        slot's remaining seats untouched.

        Args:
            user_id: Authenticated user making the booking
            request: Booking request

        Returns:
            Created booking with its tour, accommodation and payment loaded

        Raises:
            NotFoundError: If the tour, slot, user or payment method is missing
            ValidationError: If the party size is invalid or the date is past
            ConflictError: If the user already booked this slot
            CapacityExceededError: If the slot cannot seat the party
            InternalServerError: If persisting the booking fails
        """
        tour = await self.tour_service.get_tour(request.tour_id)
        slot = await self.availability_service.find_slot(tour.id, request.start_date)

        if request.adults < 1 or request.children < 0:
            raise ValidationError(
                detail="A booking needs at least one adult and a non-negative number of children",
                errors={"adults": request.adults, "children": request.children}
            )

        if request.start_date <= datetime.utcnow():
            logger.warning(
                "Booking rejected - start date is not in the future",
                extra={
                    "tour_id": tour.id,
                    "start_date": request.start_date.isoformat()
                }
            )
            raise ValidationError(
                detail="Booking start date must be in the future",
                errors={"start_date": request.start_date.isoformat()}
            )

        await self._get_user_or_raise(user_id)

        existing = await self._find_user_booking(user_id, slot.id)
        if existing:
            logger.warning(
                "Booking rejected - user already booked this slot",
                extra={
                    "user_id": user_id,
                    "availability_id": slot.id,
                    "booking_id": existing.id
                }
            )
            raise ConflictError(
                detail="User already holds a booking for this tour date",
                conflicting_resource={"booking_id": existing.id}
            )

        payment_method: Optional[PaymentMethod] = None
        if request.payment_method_id is not None:
            payment_method = await self.payment_service.get_payment_method_or_raise(request.payment_method_id)

        tour_id = tour.id
        slot_id = slot.id
        party_size = request.adults + request.children
        price = tour.price_for(request.adults, request.children)
        room_type = AccommodationType.lookup(request.accommodation_booking)

        try:
            async with transaction(self.db):
                slot = await self.availability_service.reserve(slot_id, party_size)
                accommodation = await self._get_or_create_accommodation(room_type)

                pay = None
                if payment_method is not None:
                    pay = Pay(
                        payment_method=payment_method,
                        amount=price,
                        currency=tour.currency,
                    )
                    self.db.add(pay)

                booking = Booking(
                    user_id=user_id,
                    tour=tour,
                    availability_id=slot.id,
                    accommodation=accommodation,
                    pay=pay,
                    start_date=slot.available_date,
                    end_date=slot.ends_at,
                    adults=request.adults,
                    children=request.children,
                    price=price,
                    currency=tour.currency,
                )
                self.db.add(booking)
                await self.db.flush()
                remaining = slot.available_slots
        except CapacityExceededError:
            metrics_collector.record_capacity_rejected(tour_id)
            raise
        except IntegrityError as e:
            logger.warning(
                "Booking creation failed due to integrity constraint",
                extra={
                    "user_id": user_id,
                    "availability_id": slot_id,
                    "error": str(e)
                }
            )
            if _is_duplicate_booking(e):
                raise ConflictError(detail="User already holds a booking for this tour date")
            raise ConflictError(detail="Booking conflicts with a concurrent change to its tour or slot")
        except SQLAlchemyError as e:
            logger.error(
                "Booking creation failed - transaction rolled back",
                extra={
                    "user_id": user_id,
                    "availability_id": slot_id,
                    "error": str(e)
                },
                exc_info=True
            )
            raise InternalServerError(detail="The booking could not be stored")

        metrics_collector.record_booking_created(tour_id)
        metrics_collector.set_slots_remaining(slot_id, remaining)

        logger.info(
            "Booking created successfully",
            extra={
                "booking_id": booking.id,
                "user_id": user_id,
                "tour_id": tour_id,
                "availability_id": slot_id,
                "party_size": party_size,
                "price": price,
                "remaining_seats": remaining
            }
        )

        return booking

    async def get_booking(self, booking_id: int) -> Booking:
        """
        Get booking by ID.

        Raises:
            NotFoundError: If booking not found
        """
        stmt = select(Booking).where(Booking.id == booking_id)
        result = await self.db.execute(stmt)
        booking = result.scalar_one_or_none()

        if not booking:
            raise NotFoundError(resource_type="booking", resource_id=booking_id)
        return booking

    async def list_bookings(self, tour_id: Optional[int] = None, user_id: Optional[int] = None) -> list[Booking]:
        """Bookings ordered by ID, optionally narrowed to a tour and/or a user."""
        stmt = select(Booking)
        if tour_id is not None:
            stmt = stmt.where(Booking.tour_id == tour_id)
        if user_id is not None:
            stmt = stmt.where(Booking.user_id == user_id)

        result = await self.db.execute(stmt.order_by(Booking.id))
        return list(result.scalars())

    async def _get_user_or_raise(self, user_id: int) -> User:
        result = await self.db.execute(select(User).where(User.id == user_id))
        user = result.scalar_one_or_none()
        if not user:
            logger.warning("User not found", extra={"user_id": user_id})
            raise NotFoundError(resource_type="user", resource_id=user_id)
        return user

    async def _find_user_booking(self, user_id: int, availability_id: int) -> Optional[Booking]:
        stmt = select(Booking).where(
            Booking.user_id == user_id,
            Booking.availability_id == availability_id
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def _find_accommodation(self, room_type: AccommodationType) -> Optional[Accommodation]:
        stmt = select(Accommodation).where(Accommodation.room_type == room_type.value)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def _get_or_create_accommodation(self, room_type: AccommodationType) -> Accommodation:
        """
        Room type row for a booking, inserted on first use.

        The insert runs under a savepoint: when a concurrent booking inserts
        the same room type first, only the savepoint is rolled back and the
        committed row is read instead.
        """
        accommodation = await self._find_accommodation(room_type)
        if accommodation is not None:
            return accommodation

        try:
            async with self.db.begin_nested():
                accommodation = Accommodation(room_type=room_type.value)
                self.db.add(accommodation)
        except IntegrityError:
            logger.info(
                "Accommodation created concurrently, reusing it",
                extra={"room_type": room_type.value}
            )
            accommodation = await self._find_accommodation(room_type)
            if accommodation is None:
                raise
        return accommodation
