"""Availability router for slot administration and lookup."""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import DatabaseSession
from ..core.exceptions import InternalServerError, ProblemDetailsException
from ..schemas.availability import (
    Availability,
    AvailabilityList,
    CreateAvailabilityRequest,
    ListAvailabilityRequest,
    SearchAvailabilityRequest,
)
from ..schemas.common import PROBLEM_RESPONSES
from ..services.availability_service import AvailabilityService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/availability", tags=["availability"])


def _convert_availability_to_schema(slot_model, is_reserved: bool = False) -> Availability:
    """Convert availability model to schema."""
    return Availability(
        id=slot_model.id,
        tour_id=slot_model.tour_id,
        available_date=slot_model.available_date,
        available_slots=slot_model.available_slots,
        departure_time=slot_model.departure_time,
        return_time=slot_model.return_time,
        is_reserved=is_reserved
    )


@router.post("/create", response_model=Availability, responses=PROBLEM_RESPONSES)
async def create_availability(
    request: CreateAvailabilityRequest,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """
    Add a slot to a tour.

    The date must be in the future and may not clash with the tour's other
    slots on the same day.
    """
    availability_service = AvailabilityService(db)

    try:
        slot = await availability_service.create_availability(request)
        response_data = _convert_availability_to_schema(slot)

        return JSONResponse(
            status_code=200,
            content=response_data.model_dump(mode="json")
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in availability creation",
            extra={
                "tour_id": request.tour_id,
                "available_date": request.available_date.isoformat(),
                "error": str(e)
            },
            exc_info=True
        )
        raise InternalServerError() from e


@router.post("/list", response_model=AvailabilityList)
async def list_availability(
    request: ListAvailabilityRequest,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """List a tour's slots with whether each has been booked."""
    slots = await AvailabilityService(db).list_for_tour(request.tour_id)
    response_data = AvailabilityList(
        items=[_convert_availability_to_schema(slot, is_reserved) for slot, is_reserved in slots]
    )

    return JSONResponse(
        status_code=200,
        content=response_data.model_dump(mode="json")
    )


@router.post("/search", response_model=AvailabilityList)
async def search_availability(
    request: SearchAvailabilityRequest,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """Slots of every tour inside an inclusive date range."""
    slots = await AvailabilityService(db).find_by_date_range(request.start_date, request.end_date)
    response_data = AvailabilityList(
        items=[_convert_availability_to_schema(slot) for slot in slots]
    )

    return JSONResponse(
        status_code=200,
        content=response_data.model_dump(mode="json")
    )
