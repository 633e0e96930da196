"""Availability store: per-tour capacity slots and the atomic reservation."""

import logging
from datetime import datetime, time, timedelta
from typing import Iterable, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError

from ..core.exceptions import CapacityExceededError, ConflictError, NotFoundError, ValidationError
from ..models.availability import Availability
from ..models.booking import Booking
from ..schemas.availability import CreateAvailabilityRequest
from .tour_service import TourService

logger = logging.getLogger(__name__)


class AvailabilityService:
    """Service for availability slot queries and capacity reservation."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @staticmethod
    def validate_slot(available_date: datetime, departure_time: time, return_time: time) -> None:
        """
        Check a slot definition before it is stored.

        Raises:
            ValidationError: If the date is not in the future or the return
                time does not come after the departure time
        """
        if available_date <= datetime.utcnow():
            raise ValidationError(
                detail="Availability date must be in the future",
                errors={"available_date": available_date.isoformat()}
            )
        if return_time <= departure_time:
            raise ValidationError(
                detail="Return time must be after departure time",
                errors={
                    "departure_time": departure_time.isoformat(),
                    "return_time": return_time.isoformat()
                }
            )

    @staticmethod
    def check_same_day(slot, others: Iterable) -> None:
        """
        Check a slot against other slots of the same tour.

        Slots on other days are ignored. Stored slots and not yet stored slot
        definitions are both accepted.

        Raises:
            ConflictError: If another slot has the same date, or runs on the
                same day with overlapping hours
        """
        for other in others:
            if other.available_date.date() != slot.available_date.date():
                continue

            conflicting = {
                "available_date": other.available_date.isoformat(),
                "departure_time": other.departure_time.isoformat(),
                "return_time": other.return_time.isoformat()
            }
            if getattr(other, "id", None) is not None:
                conflicting["id"] = other.id

            if other.available_date == slot.available_date:
                raise ConflictError(
                    detail="Tour already has a slot on this date",
                    conflicting_resource=conflicting
                )
            if slot.departure_time < other.return_time and other.departure_time < slot.return_time:
                raise ConflictError(
                    detail="Slot overlaps another slot of this tour on the same day",
                    conflicting_resource=conflicting
                )

    async def get_slot(self, slot_id: int) -> Optional[Availability]:
        """Get a slot by ID, reloading its columns from the database."""
        stmt = (
            select(Availability)
            .where(Availability.id == slot_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_slot_or_raise(self, slot_id: int) -> Availability:
        slot = await self.get_slot(slot_id)
        if not slot:
            raise NotFoundError(resource_type="availability", resource_id=slot_id)
        return slot

    async def find_slot(self, tour_id: int, available_date: datetime) -> Availability:
        """
        Find the slot a tour runs on an exact date.

        Args:
            tour_id: Owning tour ID
            available_date: Exact slot date

        Returns:
            Matching availability slot

        Raises:
            NotFoundError: If the tour has no slot on that date
        """
        stmt = select(Availability).where(
            Availability.tour_id == tour_id,
            Availability.available_date == available_date
        )
        result = await self.db.execute(stmt)
        slot = result.scalar_one_or_none()

        if not slot:
            logger.warning(
                "Availability not found",
                extra={
                    "tour_id": tour_id,
                    "available_date": available_date.isoformat()
                }
            )
            raise NotFoundError(
                resource_type="availability",
                resource_id=f"tour {tour_id} on {available_date.isoformat()}"
            )
        return slot

    async def find_by_date_range(self, start: datetime, end: datetime) -> list[Availability]:
        """
        Slots of every tour between two dates, both ends inclusive.

        Raises:
            ValidationError: If start is after end
        """
        if start > end:
            raise ValidationError(
                detail="start_date must not be after end_date",
                errors={"start_date": start.isoformat(), "end_date": end.isoformat()}
            )

        stmt = (
            select(Availability)
            .where(Availability.available_date >= start, Availability.available_date <= end)
            .order_by(Availability.available_date, Availability.id)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars())

    async def reserve(self, slot_id: int, party_size: int) -> Availability:
        """
        Take seats from a slot.

        The check and the decrement are a single conditional UPDATE, so
        concurrent reservations can never drive the count below zero. Runs in
        the caller's transaction and does not commit.

        Args:
            slot_id: Slot to take seats from
            party_size: Number of seats

        Returns:
            The slot with its updated remaining count

        Raises:
            ValidationError: If party_size is not positive
            NotFoundError: If the slot does not exist
            CapacityExceededError: If fewer than party_size seats remain
        """
        if party_size < 1:
            raise ValidationError(
                detail="Party size must be at least 1",
                errors={"party_size": party_size}
            )

        stmt = (
            update(Availability)
            .where(
                Availability.id == slot_id,
                Availability.available_slots >= party_size
            )
            .values(available_slots=Availability.available_slots - party_size)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)

        if result.rowcount == 0:
            slot = await self.get_slot_or_raise(slot_id)
            logger.warning(
                "Reservation rejected - not enough seats",
                extra={
                    "availability_id": slot_id,
                    "requested_seats": party_size,
                    "available_seats": slot.available_slots
                }
            )
            raise CapacityExceededError(
                availability_id=slot_id,
                requested_seats=party_size,
                available_seats=slot.available_slots
            )

        slot = await self.get_slot_or_raise(slot_id)

        logger.info(
            "Seats reserved",
            extra={
                "availability_id": slot_id,
                "reserved_seats": party_size,
                "remaining_seats": slot.available_slots
            }
        )
        return slot

    async def create_availability(self, request: CreateAvailabilityRequest) -> Availability:
        """
        Add a slot to a tour.

        Raises:
            NotFoundError: If tour not found
            ValidationError: If the date is past or the times are inverted
            ConflictError: If the tour already runs on that date or the slot
                overlaps another slot of the tour on the same day
        """
        await TourService(self.db).get_tour_by_id_or_raise(request.tour_id)
        self.validate_slot(request.available_date, request.departure_time, request.return_time)

        day_start = datetime.combine(request.available_date.date(), time.min)
        stmt = select(Availability).where(
            Availability.tour_id == request.tour_id,
            Availability.available_date >= day_start,
            Availability.available_date < day_start + timedelta(days=1)
        )
        result = await self.db.execute(stmt)
        self.check_same_day(request, result.scalars())

        slot = Availability(
            tour_id=request.tour_id,
            available_date=request.available_date,
            available_slots=request.available_slots,
            departure_time=request.departure_time,
            return_time=request.return_time,
        )

        try:
            self.db.add(slot)
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.error(
                "Availability creation failed due to integrity constraint",
                extra={"tour_id": request.tour_id, "error": str(e)}
            )
            raise ConflictError(detail="Tour already has a slot on this date")

        logger.info(
            "Availability created",
            extra={
                "availability_id": slot.id,
                "tour_id": slot.tour_id,
                "available_date": slot.available_date.isoformat(),
                "available_slots": slot.available_slots
            }
        )
        return slot

    async def list_for_tour(self, tour_id: int) -> list[tuple[Availability, bool]]:
        """
        A tour's slots by date, each paired with whether any booking used it.

        Raises:
            NotFoundError: If tour not found
        """
        await TourService(self.db).get_tour_by_id_or_raise(tour_id)

        stmt = (
            select(Availability)
            .where(Availability.tour_id == tour_id)
            .order_by(Availability.available_date, Availability.id)
        )
        result = await self.db.execute(stmt)
        slots = list(result.scalars())

        reserved: set[int] = set()
        if slots:
            stmt = (
                select(Booking.availability_id)
                .where(Booking.availability_id.in_([slot.id for slot in slots]))
                .distinct()
            )
            result = await self.db.execute(stmt)
            reserved = set(result.scalars())

        return [(slot, slot.id in reserved) for slot in slots]
