"""Payment method reference data."""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import ConflictError, NotFoundError
from ..models.payment import PaymentMethod
from ..schemas.payment import CreatePaymentMethodRequest

logger = logging.getLogger(__name__)


class PaymentService:
    """Service for payment method operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_payment_method(self, request: CreatePaymentMethodRequest) -> PaymentMethod:
        """
        Register a payment method.

        Raises:
            ConflictError: If a method with the same name exists
        """
        stmt = select(PaymentMethod).where(PaymentMethod.name == request.name)
        result = await self.db.execute(stmt)
        existing = result.scalar_one_or_none()
        if existing:
            raise ConflictError(
                detail=f"Payment method '{request.name}' already exists",
                conflicting_resource={"id": existing.id, "name": existing.name}
            )

        method = PaymentMethod(name=request.name, description=request.description)
        self.db.add(method)
        await self.db.commit()

        logger.info(
            "Payment method created",
            extra={"payment_method_id": method.id, "payment_method_name": method.name}
        )
        return method

    async def list_payment_methods(self) -> list[PaymentMethod]:
        result = await self.db.execute(select(PaymentMethod).order_by(PaymentMethod.id))
        return list(result.scalars())

    async def get_payment_method(self, payment_method_id: int) -> Optional[PaymentMethod]:
        stmt = select(PaymentMethod).where(PaymentMethod.id == payment_method_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_payment_method_or_raise(self, payment_method_id: int) -> PaymentMethod:
        """
        Get payment method by ID or raise NotFoundError.

        Raises:
            NotFoundError: If the payment method does not exist
        """
        method = await self.get_payment_method(payment_method_id)
        if not method:
            logger.warning(
                "Payment method not found",
                extra={"payment_method_id": payment_method_id}
            )
            raise NotFoundError(resource_type="payment method", resource_id=payment_method_id)
        return method
