"""Unit tests for the availability store."""

from datetime import datetime, time

import pytest

from app.core.exceptions import CapacityExceededError, ConflictError, NotFoundError, ValidationError
from app.models.availability import Availability
from app.models.booking import Booking
from app.schemas.availability import CreateAvailabilityRequest
from app.services.availability_service import AvailabilityService

FUTURE_DATE = datetime(2030, 1, 1, 9, 0)


def _slot_request(tour_id: int, **overrides) -> CreateAvailabilityRequest:
    data = {
        "tour_id": tour_id,
        "available_date": datetime(2030, 6, 1, 8, 0),
        "available_slots": 15,
        "departure_time": time(8, 0),
        "return_time": time(17, 0),
    }
    data.update(overrides)
    return CreateAvailabilityRequest(**data)


@pytest.mark.asyncio
async def test_find_slot(test_session, tour, slot):
    service = AvailabilityService(test_session)

    found = await service.find_slot(tour.id, FUTURE_DATE)

    assert found.id == slot.id
    assert found.available_slots == 10


@pytest.mark.asyncio
async def test_find_slot_requires_exact_date(test_session, tour, slot):
    service = AvailabilityService(test_session)

    with pytest.raises(NotFoundError):
        await service.find_slot(tour.id, datetime(2030, 1, 2, 9, 0))

    with pytest.raises(NotFoundError):
        await service.find_slot(tour.id + 1, FUTURE_DATE)


@pytest.mark.asyncio
async def test_find_by_date_range(test_session, tour, slot):
    """Range scan is inclusive and ordered by date."""
    service = AvailabilityService(test_session)
    later = await service.create_availability(_slot_request(tour.id))
    earlier = await service.create_availability(
        _slot_request(tour.id, available_date=datetime(2029, 12, 31, 8, 0))
    )

    slots = await service.find_by_date_range(datetime(2029, 12, 31, 8, 0), datetime(2030, 6, 1, 8, 0))

    assert [s.id for s in slots] == [earlier.id, slot.id, later.id]

    narrow = await service.find_by_date_range(FUTURE_DATE, FUTURE_DATE)
    assert [s.id for s in narrow] == [slot.id]


@pytest.mark.asyncio
async def test_find_by_date_range_rejects_inverted_range(test_session):
    service = AvailabilityService(test_session)

    with pytest.raises(ValidationError):
        await service.find_by_date_range(datetime(2030, 2, 1), datetime(2030, 1, 1))


@pytest.mark.asyncio
async def test_reserve_decrements_capacity(test_session, slot):
    service = AvailabilityService(test_session)

    updated = await service.reserve(slot.id, 3)
    await test_session.commit()

    assert updated.available_slots == 7
    assert (await service.get_slot(slot.id)).available_slots == 7


@pytest.mark.asyncio
async def test_reserve_exact_capacity(test_session, slot):
    service = AvailabilityService(test_session)

    updated = await service.reserve(slot.id, 10)

    assert updated.available_slots == 0


@pytest.mark.asyncio
async def test_reserve_capacity_exceeded_leaves_slot_unchanged(test_session, slot):
    service = AvailabilityService(test_session)

    with pytest.raises(CapacityExceededError) as exc_info:
        await service.reserve(slot.id, 11)

    problem = exc_info.value.problem_details
    assert problem["status"] == 409
    assert problem["code"] == "CAPACITY_EXCEEDED"
    assert problem["retryable"] is False
    assert problem["available_seats"] == 10
    assert (await service.get_slot(slot.id)).available_slots == 10


@pytest.mark.asyncio
async def test_reserve_missing_slot(test_session):
    service = AvailabilityService(test_session)

    with pytest.raises(NotFoundError):
        await service.reserve(12345, 1)


@pytest.mark.asyncio
async def test_reserve_rejects_empty_party(test_session, slot):
    service = AvailabilityService(test_session)

    with pytest.raises(ValidationError):
        await service.reserve(slot.id, 0)


@pytest.mark.asyncio
async def test_create_availability(test_session, tour):
    service = AvailabilityService(test_session)

    created = await service.create_availability(_slot_request(tour.id))

    assert created.id is not None
    assert created.tour_id == tour.id
    assert created.available_slots == 15
    assert created.ends_at == datetime(2030, 6, 1, 17, 0)


@pytest.mark.asyncio
async def test_create_availability_validation(test_session, tour):
    service = AvailabilityService(test_session)

    with pytest.raises(ValidationError):
        await service.create_availability(_slot_request(tour.id, available_date=datetime(2020, 6, 1, 8, 0)))

    with pytest.raises(ValidationError):
        await service.create_availability(
            _slot_request(tour.id, departure_time=time(17, 0), return_time=time(8, 0))
        )

    with pytest.raises(NotFoundError):
        await service.create_availability(_slot_request(tour.id + 100))


@pytest.mark.asyncio
async def test_create_availability_duplicate_date(test_session, tour, slot):
    service = AvailabilityService(test_session)

    with pytest.raises(ConflictError):
        await service.create_availability(
            _slot_request(
                tour.id,
                available_date=FUTURE_DATE,
                departure_time=time(20, 0),
                return_time=time(22, 0)
            )
        )


@pytest.mark.asyncio
async def test_create_availability_same_day_overlap(test_session, tour, slot):
    """A second slot on the same day must not overlap the first one's hours."""
    service = AvailabilityService(test_session)

    with pytest.raises(ConflictError):
        await service.create_availability(
            _slot_request(
                tour.id,
                available_date=datetime(2030, 1, 1, 12, 0),
                departure_time=time(12, 0),
                return_time=time(20, 0)
            )
        )

    evening = await service.create_availability(
        _slot_request(
            tour.id,
            available_date=datetime(2030, 1, 1, 19, 0),
            departure_time=time(19, 0),
            return_time=time(23, 0)
        )
    )
    assert evening.id is not None


@pytest.mark.asyncio
async def test_list_for_tour_flags_reserved_slots(test_session, user, tour, slot):
    service = AvailabilityService(test_session)
    other = await service.create_availability(_slot_request(tour.id))

    test_session.add(
        Booking(
            user_id=user.id,
            tour_id=tour.id,
            availability_id=slot.id,
            start_date=slot.available_date,
            end_date=slot.ends_at,
            adults=1,
            children=0,
            price=10000,
            currency="USD"
        )
    )
    await test_session.commit()

    listed = await service.list_for_tour(tour.id)

    assert [(s.id, reserved) for s, reserved in listed] == [(slot.id, True), (other.id, False)]


@pytest.mark.asyncio
async def test_list_for_tour_missing_tour(test_session):
    service = AvailabilityService(test_session)

    with pytest.raises(NotFoundError):
        await service.list_for_tour(404)


def test_validate_slot_accepts_future_slot():
    AvailabilityService.validate_slot(datetime(2035, 1, 1), time(6, 0), time(6, 30))


def test_availability_ends_at_uses_return_time():
    slot = Availability(available_date=datetime(2030, 1, 1, 9, 0), return_time=time(18, 30))
    assert slot.ends_at == datetime(2030, 1, 1, 18, 30)
