"""Tour router for catalog operations."""

import logging
from typing import Optional

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import DatabaseSession
from ..core.exceptions import InternalServerError, ProblemDetailsException
from ..schemas.common import PROBLEM_RESPONSES, Money
from ..schemas.tour import (
    CreateIncludedItemRequest,
    CreateTourRequest,
    DeleteTourRequest,
    DeleteTourResponse,
    Destination,
    FilterToursRequest,
    GetTourRequest,
    IncludedItem,
    ListToursRequest,
    SearchToursRequest,
    Tour,
    TourList,
    UpdateTagsRequest,
    UpdateTourRequest,
)
from ..services.tour_service import TourService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/tour", tags=["tour"])


def _convert_tour_to_schema(tour_model) -> Tour:
    """Convert tour model to schema."""
    return Tour(
        id=tour_model.id,
        name=tour_model.name,
        description=tour_model.description,
        status=tour_model.status,
        adult_price=Money(amount=tour_model.adult_price, currency=tour_model.currency),
        child_price=Money(amount=tour_model.child_price, currency=tour_model.currency),
        tags=[tag.name for tag in tour_model.tags],
        includes=[IncludedItem.model_validate(item) for item in tour_model.included_items],
        hotels=list(tour_model.hotels or []),
        destination=Destination(
            country=tour_model.destination_country,
            city=tour_model.destination_city
        ),
        images=list(tour_model.images or []),
        created_at=tour_model.created_at
    )


def _tour_list_response(tours, **paging) -> JSONResponse:
    response_data = TourList(items=[_convert_tour_to_schema(tour) for tour in tours], **paging)
    return JSONResponse(status_code=200, content=response_data.model_dump(mode="json"))


@router.post("/create", response_model=Tour, responses=PROBLEM_RESPONSES)
async def create_tour(
    request: CreateTourRequest,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """
    Create a new tour.

    Tags, included items and initial availability slots are created with it.
    A duplicate name is rejected with 409.
    """
    tour_service = TourService(db)

    try:
        tour = await tour_service.create_tour(request)
        response_data = _convert_tour_to_schema(tour)

        return JSONResponse(
            status_code=200,
            content=response_data.model_dump(mode="json")
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in tour creation",
            extra={
                "tour_name": request.name,
                "error": str(e)
            },
            exc_info=True
        )
        raise InternalServerError() from e


@router.post("/get", response_model=Tour)
async def get_tour(
    request: GetTourRequest,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """Get tour details."""
    tour = await TourService(db).get_tour_by_id_or_raise(request.tour_id)
    response_data = _convert_tour_to_schema(tour)

    return JSONResponse(
        status_code=200,
        content=response_data.model_dump(mode="json")
    )


@router.post("/list", response_model=TourList)
async def list_tours(
    request: Optional[ListToursRequest] = None,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """
    List tours by ID.

    Every tour is returned unless a page is given; paged responses also carry
    the page, its size and the total number of tours.
    """
    request = request or ListToursRequest()
    tour_service = TourService(db)

    tours = await tour_service.list_tours(page=request.page, size=request.size)
    if request.page is None:
        return _tour_list_response(tours)

    return _tour_list_response(
        tours,
        page=request.page,
        size=request.size,
        total=await tour_service.count_tours()
    )


@router.post("/update", response_model=Tour, responses=PROBLEM_RESPONSES)
async def update_tour(
    request: UpdateTourRequest,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """Replace a tour's details, tags and included items."""
    tour = await TourService(db).update_tour(request)
    response_data = _convert_tour_to_schema(tour)

    return JSONResponse(
        status_code=200,
        content=response_data.model_dump(mode="json")
    )


@router.post("/delete", response_model=DeleteTourResponse, responses=PROBLEM_RESPONSES)
async def delete_tour(
    request: DeleteTourRequest,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """Delete a tour with its availability slots and their bookings."""
    await TourService(db).delete_tour(request.tour_id)
    response_data = DeleteTourResponse(tour_id=request.tour_id)

    return JSONResponse(
        status_code=200,
        content=response_data.model_dump(mode="json")
    )


@router.post("/filter", response_model=TourList)
async def filter_tours(
    request: FilterToursRequest,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """
    Filter tours by tag.

    An empty tag list returns every tour; unknown tag names match OTHER.
    """
    tours = await TourService(db).filter_tours(request.tags)
    return _tour_list_response(tours)


@router.post("/search", response_model=TourList)
async def search_tours(
    request: SearchToursRequest,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """Search tours by name fragment and slot date window."""
    tours = await TourService(db).search_tours(
        name=request.name,
        start_date=request.start_date,
        end_date=request.end_date
    )
    return _tour_list_response(tours)


@router.post("/tags", response_model=Tour)
async def update_tags(
    request: UpdateTagsRequest,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """Replace a tour's tags."""
    tour = await TourService(db).update_tags(request.tour_id, request.tags)
    response_data = _convert_tour_to_schema(tour)

    return JSONResponse(
        status_code=200,
        content=response_data.model_dump(mode="json")
    )


@router.post("/include", response_model=IncludedItem)
async def create_included_item(
    request: CreateIncludedItemRequest,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """Add an included-item type to the catalog."""
    item = await TourService(db).create_included_item(request)
    response_data = IncludedItem.model_validate(item)

    return JSONResponse(
        status_code=200,
        content=response_data.model_dump(mode="json")
    )
