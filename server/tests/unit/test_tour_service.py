"""Unit tests for tour service."""

import logging
from datetime import datetime, time

import pytest
from sqlalchemy import func, select

from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.models.availability import Availability
from app.models.booking import Booking
from app.models.tour import Tag, TagOption
from app.schemas.availability import AvailabilitySlot
from app.schemas.tour import CreateIncludedItemRequest, CreateTourRequest, Destination, UpdateTourRequest
from app.services.tour_service import TourService


def _tour_request(name: str = "Andes Crossing", **overrides) -> CreateTourRequest:
    data = {
        "name": name,
        "description": "Crossing the Andes by bus and boat",
        "adult_price": 45000,
        "child_price": 20000,
        "destination": Destination(country="Chile", city="Puerto Varas"),
    }
    data.update(overrides)
    return CreateTourRequest(**data)


@pytest.mark.asyncio
async def test_create_tour(test_session, included_items):
    """Test creating a tour with tags, includes and slots."""
    service = TourService(test_session)

    tour = await service.create_tour(
        _tour_request(
            tags=["Adventure", "lake"],
            includes=["Lodging", "Transport"],
            availability=[
                AvailabilitySlot(
                    available_date=datetime(2031, 3, 1, 7, 0),
                    available_slots=20,
                    departure_time=time(7, 0),
                    return_time=time(19, 0)
                )
            ]
        )
    )

    assert tour.id is not None
    assert tour.name == "Andes Crossing"
    assert tour.currency == "USD"
    assert sorted(tag.name for tag in tour.tags) == ["ADVENTURE", "OTHER"]
    assert [item.type for item in tour.included_items] == ["Lodging", "Transport"]

    in_window = await service.search_tours(
        start_date=datetime(2031, 3, 1),
        end_date=datetime(2031, 3, 2)
    )
    assert [t.id for t in in_window] == [tour.id]


@pytest.mark.asyncio
async def test_create_tour_duplicate_name(test_session):
    """Test creating a tour with a duplicate name raises error."""
    service = TourService(test_session)

    await service.create_tour(_tour_request())

    with pytest.raises(ConflictError):
        await service.create_tour(_tour_request(description="Different description"))


@pytest.mark.asyncio
async def test_create_tour_unknown_include(test_session):
    """Included items must exist in the catalog."""
    service = TourService(test_session)

    with pytest.raises(NotFoundError):
        await service.create_tour(_tour_request(includes=["Spa"]))


@pytest.mark.asyncio
async def test_create_tour_too_many_tags(test_session):
    """A tour carries at most three tags."""
    service = TourService(test_session)

    with pytest.raises(ValidationError):
        await service.create_tour(_tour_request(tags=["beach", "city", "luxury", "cruise"]))


@pytest.mark.asyncio
async def test_create_tour_rejects_past_slot(test_session):
    """Initial slots are validated before the tour is stored."""
    service = TourService(test_session)

    with pytest.raises(ValidationError):
        await service.create_tour(
            _tour_request(
                availability=[
                    AvailabilitySlot(
                        available_date=datetime(2020, 1, 1, 7, 0),
                        available_slots=5,
                        departure_time=time(7, 0),
                        return_time=time(19, 0)
                    )
                ]
            )
        )

    assert await service.get_tour_by_name("Andes Crossing") is None


@pytest.mark.asyncio
async def test_get_tour_by_id(test_session, tour):
    """Test getting a tour by ID."""
    service = TourService(test_session)

    found_tour = await service.get_tour_by_id(tour.id)

    assert found_tour is not None
    assert found_tour.id == tour.id
    assert found_tour.name == "Patagonia Trek"


@pytest.mark.asyncio
async def test_get_tour_by_id_not_found(test_session):
    """Test getting a non-existent tour returns None."""
    service = TourService(test_session)

    assert await service.get_tour_by_id(999) is None

    with pytest.raises(NotFoundError):
        await service.get_tour(999)


@pytest.mark.asyncio
async def test_list_included_items(test_session, tour):
    service = TourService(test_session)

    items = await service.list_included_items(tour.id)

    assert [item.type for item in items] == ["Lodging", "Transport"]


@pytest.mark.asyncio
async def test_filter_tours_by_tag(test_session, tour):
    """Tours are matched when any of their tags is requested."""
    service = TourService(test_session)
    beach_tour = await service.create_tour(_tour_request(name="Caribbean Escape", tags=["beach"]))

    assert [t.id for t in await service.filter_tours(["mountain"])] == [tour.id]
    assert [t.id for t in await service.filter_tours(["BEACH", "adventure"])] == [tour.id, beach_tour.id]
    assert [t.id for t in await service.filter_tours([])] == [tour.id, beach_tour.id]


@pytest.mark.asyncio
async def test_filter_tours_unknown_tag_matches_other(test_session, tour):
    """Unknown tag names resolve to OTHER instead of failing."""
    service = TourService(test_session)
    misc_tour = await service.create_tour(_tour_request(name="Mystery Trip", tags=["surprise"]))

    tours = await service.filter_tours(["not-a-real-tag"])

    assert [t.id for t in tours] == [misc_tour.id]
    assert TagOption.lookup("not-a-real-tag") is TagOption.OTHER


@pytest.mark.asyncio
async def test_search_tours(test_session, tour, slot):
    service = TourService(test_session)
    await service.create_tour(_tour_request(name="Patagonia by Boat"))

    by_name = await service.search_tours(name="patagonia")
    assert len(by_name) == 2

    by_date = await service.search_tours(
        name="patagonia",
        start_date=datetime(2029, 12, 31),
        end_date=datetime(2030, 1, 2)
    )
    assert [t.id for t in by_date] == [tour.id]

    with pytest.raises(ValidationError):
        await service.search_tours(start_date=datetime(2030, 1, 2), end_date=datetime(2030, 1, 1))


@pytest.mark.asyncio
async def test_update_tags(test_session, tour):
    service = TourService(test_session)

    updated = await service.update_tags(tour.id, ["Beach", "cruise"])

    assert sorted(tag.name for tag in updated.tags) == ["BEACH", "CRUISE"]

    with pytest.raises(ValidationError):
        await service.update_tags(tour.id, ["beach", "cruise", "city", "luxury"])


@pytest.mark.asyncio
async def test_create_included_item(test_session, included_items):
    service = TourService(test_session)

    item = await service.create_included_item(
        CreateIncludedItemRequest(type="Meals", icon="restaurant", details="Breakfast")
    )
    assert item.id is not None

    with pytest.raises(ConflictError):
        await service.create_included_item(CreateIncludedItemRequest(type="Lodging"))


@pytest.mark.asyncio
async def test_tour_has_no_slot_navigation(test_session, tour, slot):
    """Slots point at their tour by id only."""
    assert slot.tour_id == tour.id
    assert not hasattr(tour, "availabilities")
    assert Availability.__table__.c.tour_id.foreign_keys


@pytest.mark.asyncio
async def test_create_tour_logs_at_info_level(test_session, caplog):
    """Creation and duplicate rejection both log with INFO enabled."""
    caplog.set_level(logging.INFO, logger="app.services.tour_service")
    service = TourService(test_session)

    tour = await service.create_tour(_tour_request())

    created = [r for r in caplog.records if r.getMessage() == "Tour created successfully"]
    assert len(created) == 1
    assert created[0].tour_name == "Andes Crossing"
    assert created[0].tour_id == tour.id

    with pytest.raises(ConflictError):
        await service.create_tour(_tour_request())

    rejected = [r for r in caplog.records if r.getMessage() == "Tour creation failed - name already exists"]
    assert rejected[0].tour_name == "Andes Crossing"


@pytest.mark.asyncio
async def test_create_tour_rejects_overlapping_initial_slots(test_session):
    """Initial slots obey the same same-day rules as added slots."""
    service = TourService(test_session)

    with pytest.raises(ConflictError):
        await service.create_tour(
            _tour_request(
                availability=[
                    AvailabilitySlot(
                        available_date=datetime(2031, 3, 1, 7, 0),
                        available_slots=20,
                        departure_time=time(7, 0),
                        return_time=time(12, 0)
                    ),
                    AvailabilitySlot(
                        available_date=datetime(2031, 3, 1, 11, 0),
                        available_slots=20,
                        departure_time=time(11, 0),
                        return_time=time(15, 0)
                    )
                ]
            )
        )

    assert await service.get_tour_by_name("Andes Crossing") is None

    tour = await service.create_tour(
        _tour_request(
            availability=[
                AvailabilitySlot(
                    available_date=datetime(2031, 3, 1, 7, 0),
                    available_slots=20,
                    departure_time=time(7, 0),
                    return_time=time(12, 0)
                ),
                AvailabilitySlot(
                    available_date=datetime(2031, 3, 1, 13, 0),
                    available_slots=20,
                    departure_time=time(13, 0),
                    return_time=time(18, 0)
                )
            ]
        )
    )
    assert tour.id is not None


@pytest.mark.asyncio
async def test_update_tags_tag_collision_is_conflict(test_session, tour, monkeypatch):
    """A tag row inserted by someone else first surfaces as a conflict."""
    tour_id = tour.id

    async def stale_tags(self, tag_names):
        return [Tag(name="ADVENTURE")]

    monkeypatch.setattr(TourService, "_resolve_tags", stale_tags)
    service = TourService(test_session)

    with pytest.raises(ConflictError):
        await service.update_tags(tour_id, ["adventure"])

    reloaded = await service.get_tour_by_id(tour_id)
    assert sorted(tag.name for tag in reloaded.tags) == ["ADVENTURE", "MOUNTAIN"]


def _update_request(tour_id: int, **overrides) -> UpdateTourRequest:
    data = {
        "tour_id": tour_id,
        "name": "Patagonia Trek Extended",
        "description": "Twelve days across the southern ice fields",
        "adult_price": 12000,
        "child_price": 6000,
        "currency": "EUR",
        "tags": ["mountain", "luxury"],
        "includes": ["Lodging"],
        "hotels": ["Hotel Glaciar", "Refugio Frey"],
        "destination": Destination(country="Argentina", city="Bariloche"),
    }
    data.update(overrides)
    return UpdateTourRequest(**data)


@pytest.mark.asyncio
async def test_update_tour(test_session, tour, slot):
    service = TourService(test_session)

    updated = await service.update_tour(_update_request(tour.id))

    assert updated.id == tour.id
    assert updated.name == "Patagonia Trek Extended"
    assert updated.adult_price == 12000
    assert updated.currency == "EUR"
    assert updated.destination_city == "Bariloche"
    assert updated.hotels == ["Hotel Glaciar", "Refugio Frey"]
    assert sorted(tag.name for tag in updated.tags) == ["LUXURY", "MOUNTAIN"]
    assert [item.type for item in updated.included_items] == ["Lodging"]

    # Slots are untouched
    assert (await service.search_tours(start_date=slot.available_date, end_date=slot.available_date))[0].id == tour.id


@pytest.mark.asyncio
async def test_update_tour_keeps_own_name(test_session, tour):
    service = TourService(test_session)

    updated = await service.update_tour(_update_request(tour.id, name="Patagonia Trek"))

    assert updated.name == "Patagonia Trek"


@pytest.mark.asyncio
async def test_update_tour_errors(test_session, tour):
    service = TourService(test_session)
    other = await service.create_tour(_tour_request())

    with pytest.raises(ConflictError):
        await service.update_tour(_update_request(tour.id, name=other.name))

    with pytest.raises(NotFoundError):
        await service.update_tour(_update_request(tour.id + 100))

    with pytest.raises(NotFoundError):
        await service.update_tour(_update_request(tour.id, includes=["Spa"]))


@pytest.mark.asyncio
async def test_delete_tour_removes_slots_and_bookings(test_session, user, tour, slot):
    tour_id = tour.id
    test_session.add(
        Booking(
            user_id=user.id,
            tour_id=tour_id,
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

    service = TourService(test_session)
    await service.delete_tour(tour_id)

    assert await service.get_tour_by_id(tour_id) is None
    slots = await test_session.execute(select(func.count(Availability.id)))
    assert slots.scalar() == 0
    bookings = await test_session.execute(select(func.count(Booking.id)))
    assert bookings.scalar() == 0

    with pytest.raises(NotFoundError):
        await service.delete_tour(tour_id)


@pytest.mark.asyncio
async def test_list_tours_paged(test_session):
    service = TourService(test_session)
    created = []
    for index in range(5):
        created.append((await service.create_tour(_tour_request(name=f"Tour {index}"))).id)

    assert [t.id for t in await service.list_tours()] == created
    assert [t.id for t in await service.list_tours(page=0, size=2)] == created[:2]
    assert [t.id for t in await service.list_tours(page=2, size=2)] == created[4:]
    assert await service.list_tours(page=3, size=2) == []
    assert await service.count_tours() == 5
