"""Booking router for booking operations."""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import DatabaseSession, RequiredAuth
from ..core.exceptions import InternalServerError, ProblemDetailsException
from ..schemas.booking import (
    Booking,
    BookingList,
    CreateBookingRequest,
    GetBookingRequest,
    ListBookingsRequest,
)
from ..schemas.common import PROBLEM_RESPONSES, Money, Problem
from ..schemas.tour import IncludedItem
from ..services.booking_service import BookingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/booking", tags=["booking"])


def _convert_booking_to_schema(booking_model) -> Booking:
    """Convert booking model to schema, enriched with tour details."""
    tour = booking_model.tour
    pay = booking_model.pay
    accommodation = booking_model.accommodation

    return Booking(
        id=booking_model.id,
        user_id=booking_model.user_id,
        tour_id=booking_model.tour_id,
        availability_id=booking_model.availability_id,
        tour_name=tour.name,
        tour_description=tour.description,
        start_date=booking_model.start_date,
        end_date=booking_model.end_date,
        creation_date=booking_model.created_at,
        accommodation=accommodation.room_type if accommodation else None,
        adults=booking_model.adults,
        children=booking_model.children,
        price=Money(amount=booking_model.price, currency=booking_model.currency),
        payment_method=pay.payment_method.name if pay else None,
        includes=[IncludedItem.model_validate(item) for item in tour.included_items]
    )


@router.post(
    "/create",
    response_model=Booking,
    responses={
        401: {"model": Problem, "description": "Missing or invalid bearer token"},
        **PROBLEM_RESPONSES
    }
)
async def create_booking(
    request: CreateBookingRequest,
    db: AsyncSession = DatabaseSession,
    current_user: dict = RequiredAuth
) -> JSONResponse:
    """
    Book seats on a tour date for the authenticated user.

    Returns 409 with code CAPACITY_EXCEEDED when the slot cannot seat the
    party; the slot is left unchanged in that case.
    """
    booking_service = BookingService(db)
    user_id = current_user["user_id"]

    try:
        booking = await booking_service.create_booking(user_id, request)
        response_data = _convert_booking_to_schema(booking)

        return JSONResponse(
            status_code=200,
            content=response_data.model_dump(mode="json")
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in booking creation",
            extra={
                "user_id": user_id,
                "tour_id": request.tour_id,
                "start_date": request.start_date.isoformat(),
                "error": str(e)
            },
            exc_info=True
        )
        raise InternalServerError() from e


@router.post("/get", response_model=Booking)
async def get_booking(
    request: GetBookingRequest,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """Get booking details."""
    booking = await BookingService(db).get_booking(request.booking_id)
    response_data = _convert_booking_to_schema(booking)

    logger.info(
        "Booking retrieved successfully",
        extra={"booking_id": request.booking_id}
    )

    return JSONResponse(
        status_code=200,
        content=response_data.model_dump(mode="json")
    )


@router.post("/list", response_model=BookingList)
async def list_bookings(
    request: ListBookingsRequest,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """List bookings, optionally for one tour and/or one user."""
    bookings = await BookingService(db).list_bookings(
        tour_id=request.tour_id,
        user_id=request.user_id
    )
    response_data = BookingList(items=[_convert_booking_to_schema(booking) for booking in bookings])

    return JSONResponse(
        status_code=200,
        content=response_data.model_dump(mode="json")
    )
