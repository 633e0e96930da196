"""Payment method router."""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import DatabaseSession
from ..schemas.payment import CreatePaymentMethodRequest, PaymentMethod, PaymentMethodList
from ..services.payment_service import PaymentService

router = APIRouter(prefix="/v1/payment-method", tags=["payment"])


@router.post("/create", response_model=PaymentMethod)
async def create_payment_method(
    request: CreatePaymentMethodRequest,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """Register a payment method. A duplicate name is rejected with 409."""
    method = await PaymentService(db).create_payment_method(request)
    response_data = PaymentMethod.model_validate(method)

    return JSONResponse(
        status_code=200,
        content=response_data.model_dump(mode="json")
    )


@router.post("/list", response_model=PaymentMethodList)
async def list_payment_methods(db: AsyncSession = DatabaseSession) -> JSONResponse:
    """List every payment method."""
    methods = await PaymentService(db).list_payment_methods()
    response_data = PaymentMethodList(items=[PaymentMethod.model_validate(m) for m in methods])

    return JSONResponse(
        status_code=200,
        content=response_data.model_dump(mode="json")
    )
