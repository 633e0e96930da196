"""Tour service: catalog lookup, tag filtering and tour administration."""

import logging
from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError

from ..core.config import settings
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..models.availability import Availability
from ..models.booking import Booking
from ..models.tour import IncludedItem, Tag, TagOption, Tour
from ..schemas.tour import CreateIncludedItemRequest, CreateTourRequest, UpdateTourRequest

logger = logging.getLogger(__name__)


class TourService:
    """Service for tour-related operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_tour(self, request: CreateTourRequest) -> Tour:
        """
        Create a new tour with its tags, included items and initial slots.

        Args:
            request: Tour creation request

        Returns:
            Created tour entity

        Raises:
            ConflictError: If a tour with the same name already exists, or two
                initial slots share a date or overlap on the same day
            NotFoundError: If an included item type is not in the catalog
            ValidationError: If too many tags are given or a slot is invalid
        """
        existing_tour = await self.get_tour_by_name(request.name)
        if existing_tour:
            logger.warning(
                "Tour creation failed - name already exists",
                extra={
                    "tour_name": request.name,
                    "existing_tour_id": existing_tour.id
                }
            )
            raise ConflictError(
                detail=f"Tour with name '{request.name}' already exists",
                conflicting_resource={
                    "id": existing_tour.id,
                    "name": existing_tour.name
                }
            )

        # Deferred import: AvailabilityService depends on this module
        from .availability_service import AvailabilityService
        for index, slot in enumerate(request.availability):
            AvailabilityService.validate_slot(slot.available_date, slot.departure_time, slot.return_time)
            AvailabilityService.check_same_day(slot, request.availability[:index])

        included_items = await self._resolve_included_items(request.includes)
        tags = await self._resolve_tags(request.tags)

        tour = Tour(
            name=request.name,
            description=request.description,
            status=request.status,
            adult_price=request.adult_price,
            child_price=request.child_price,
            currency=request.currency or settings.default_currency,
            destination_country=request.destination.country,
            destination_city=request.destination.city,
            hotels=list(request.hotels),
            images=list(request.images),
            tags=tags,
            included_items=included_items,
        )

        try:
            self.db.add(tour)
            await self.db.flush()

            for slot in request.availability:
                self.db.add(Availability(
                    tour_id=tour.id,
                    available_date=slot.available_date,
                    available_slots=slot.available_slots,
                    departure_time=slot.departure_time,
                    return_time=slot.return_time,
                ))

            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.error(
                "Tour creation failed due to integrity constraint",
                extra={
                    "tour_name": request.name,
                    "error": str(e)
                }
            )
            raise ConflictError(detail="Tour creation failed due to constraint violation")

        logger.info(
            "Tour created successfully",
            extra={
                "tour_id": tour.id,
                "tour_name": tour.name,
                "tags": [tag.name for tag in tags],
                "slots": len(request.availability)
            }
        )

        return tour

    async def create_included_item(self, request: CreateIncludedItemRequest) -> IncludedItem:
        """
        Add an included-item type to the catalog.

        Raises:
            ConflictError: If the type already exists
        """
        stmt = select(IncludedItem).where(IncludedItem.type == request.type)
        result = await self.db.execute(stmt)
        if result.scalar_one_or_none():
            raise ConflictError(detail=f"Included item '{request.type}' already exists")

        item = IncludedItem(
            type=request.type,
            icon=request.icon,
            details=request.details,
            description=request.description,
        )
        self.db.add(item)
        await self.db.commit()

        logger.info("Included item created", extra={"included_item_id": item.id, "type": item.type})
        return item

    async def get_tour_by_id(self, tour_id: int) -> Optional[Tour]:
        """
        Get tour by ID.

        Args:
            tour_id: Tour ID to search for

        Returns:
            Tour if found, None otherwise
        """
        stmt = select(Tour).where(Tour.id == tour_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_tour_by_name(self, name: str) -> Optional[Tour]:
        """Get tour by exact name."""
        stmt = select(Tour).where(Tour.name == name)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_tour_by_id_or_raise(self, tour_id: int) -> Tour:
        """
        Get tour by ID or raise NotFoundError.

        Args:
            tour_id: Tour ID to search for

        Returns:
            Tour entity

        Raises:
            NotFoundError: If tour not found
        """
        tour = await self.get_tour_by_id(tour_id)
        if not tour:
            logger.warning(
                "Tour not found",
                extra={"tour_id": tour_id}
            )
            raise NotFoundError(
                resource_type="tour",
                resource_id=tour_id
            )
        return tour

    # Alias used by the booking engine
    get_tour = get_tour_by_id_or_raise

    async def list_included_items(self, tour_id: int) -> list[IncludedItem]:
        """Included items of a tour, for decorating booking responses."""
        tour = await self.get_tour_by_id_or_raise(tour_id)
        return list(tour.included_items)

    async def list_tours(self, page: Optional[int] = None, size: int = 20) -> list[Tour]:
        """
        Tours ordered by ID.

        Without a page every tour is returned; pages are zero-based and hold
        at most size tours.
        """
        stmt = select(Tour).order_by(Tour.id)
        if page is not None:
            stmt = stmt.offset(page * size).limit(size)

        result = await self.db.execute(stmt)
        return list(result.scalars())

    async def count_tours(self) -> int:
        result = await self.db.execute(select(func.count(Tour.id)))
        return result.scalar_one()

    async def update_tour(self, request: UpdateTourRequest) -> Tour:
        """
        Replace a tour's details, tags and included items.

        Availability slots and existing bookings are left as they are.

        Raises:
            NotFoundError: If the tour or an included item type does not exist
            ConflictError: If another tour already uses the new name
            ValidationError: If too many tags are given
        """
        tour = await self.get_tour_by_id_or_raise(request.tour_id)

        other = await self.get_tour_by_name(request.name)
        if other and other.id != tour.id:
            raise ConflictError(
                detail=f"Tour with name '{request.name}' already exists",
                conflicting_resource={"id": other.id, "name": other.name}
            )

        included_items = await self._resolve_included_items(request.includes)
        tags = await self._resolve_tags(request.tags)

        tour.name = request.name
        tour.description = request.description
        tour.status = request.status
        tour.adult_price = request.adult_price
        tour.child_price = request.child_price
        tour.currency = request.currency or settings.default_currency
        tour.destination_country = request.destination.country
        tour.destination_city = request.destination.city
        tour.hotels = list(request.hotels)
        tour.images = list(request.images)
        tour.tags = tags
        tour.included_items = included_items

        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.error(
                "Tour update failed due to integrity constraint",
                extra={"tour_id": request.tour_id, "tour_name": request.name, "error": str(e)}
            )
            raise ConflictError(detail="Tour update failed due to constraint violation")

        logger.info(
            "Tour updated",
            extra={"tour_id": tour.id, "tour_name": tour.name, "tags": [tag.name for tag in tags]}
        )
        return tour

    async def delete_tour(self, tour_id: int) -> None:
        """
        Delete a tour together with its availability slots and their bookings.

        Payment records of the removed bookings are kept.

        Raises:
            NotFoundError: If tour not found
        """
        tour = await self.get_tour_by_id_or_raise(tour_id)

        try:
            bookings = await self.db.execute(delete(Booking).where(Booking.tour_id == tour_id))
            slots = await self.db.execute(delete(Availability).where(Availability.tour_id == tour_id))
            await self.db.delete(tour)
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.error(
                "Tour deletion failed due to integrity constraint",
                extra={"tour_id": tour_id, "error": str(e)}
            )
            raise ConflictError(detail="Tour is referenced by a concurrent change, retry the deletion")

        logger.info(
            "Tour deleted",
            extra={
                "tour_id": tour_id,
                "deleted_slots": slots.rowcount,
                "deleted_bookings": bookings.rowcount
            }
        )

    async def filter_tours(self, tag_names: Iterable[str]) -> list[Tour]:
        """
        Tours whose tags intersect the given names.

        An empty set returns every tour. Unknown names map to the OTHER tag
        rather than raising.
        """
        options = {TagOption.lookup(name).value for name in tag_names}
        if not options:
            return await self.list_tours()

        stmt = (
            select(Tour)
            .where(Tour.tags.any(Tag.name.in_(options)))
            .order_by(Tour.id)
        )
        result = await self.db.execute(stmt)
        tours = list(result.scalars())

        logger.info(
            "Tour tag filter completed",
            extra={"tags": sorted(options), "total_found": len(tours)}
        )
        return tours

    async def search_tours(
        self,
        name: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> list[Tour]:
        """
        Search tours by name fragment and by having a slot inside a date window.

        Raises:
            ValidationError: If start_date is after end_date
        """
        if start_date and end_date and start_date > end_date:
            raise ValidationError(detail="start_date must not be after end_date")

        stmt = select(Tour)

        if name:
            stmt = stmt.where(Tour.name.ilike(f"%{name}%"))

        if start_date or end_date:
            slots = select(Availability.tour_id)
            if start_date:
                slots = slots.where(Availability.available_date >= start_date)
            if end_date:
                slots = slots.where(Availability.available_date <= end_date)
            stmt = stmt.where(Tour.id.in_(slots))

        result = await self.db.execute(stmt.order_by(Tour.id))
        return list(result.scalars())

    async def update_tags(self, tour_id: int, tag_names: list[str]) -> Tour:
        """
        Replace a tour's tags, creating tag rows on first use.

        Raises:
            NotFoundError: If tour not found
            ValidationError: If more than the allowed number of tags is given
            ConflictError: If a new tag row collides with a concurrent insert
        """
        tour = await self.get_tour_by_id_or_raise(tour_id)
        tour.tags = await self._resolve_tags(tag_names)

        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.error(
                "Tag update failed due to integrity constraint",
                extra={"tour_id": tour_id, "error": str(e)}
            )
            raise ConflictError(detail="A tag was created concurrently, retry the update")

        logger.info(
            "Tour tags updated",
            extra={"tour_id": tour.id, "tags": [tag.name for tag in tour.tags]}
        )
        return tour

    async def _resolve_tags(self, tag_names: Iterable[str]) -> list[Tag]:
        options = list(dict.fromkeys(TagOption.lookup(name).value for name in tag_names))
        if len(options) > settings.max_tags_per_tour:
            raise ValidationError(
                detail=f"A tour can carry at most {settings.max_tags_per_tour} tags",
                errors={"tags": options}
            )
        if not options:
            return []

        result = await self.db.execute(select(Tag).where(Tag.name.in_(options)))
        existing = {tag.name: tag for tag in result.scalars()}

        tags = []
        for option in options:
            tag = existing.get(option)
            if tag is None:
                tag = Tag(name=option)
                self.db.add(tag)
            tags.append(tag)
        return tags

    async def _resolve_included_items(self, item_types: Iterable[str]) -> list[IncludedItem]:
        types = list(dict.fromkeys(item.strip() for item in item_types if item.strip()))
        if not types:
            return []

        result = await self.db.execute(select(IncludedItem).where(IncludedItem.type.in_(types)))
        found = {item.type: item for item in result.scalars()}

        missing = [item_type for item_type in types if item_type not in found]
        if missing:
            raise NotFoundError(resource_type="included item", resource_id=", ".join(missing))

        return [found[item_type] for item_type in types]
