"""Payment-method Pydantic schemas."""

from pydantic import BaseModel, Field


class CreatePaymentMethodRequest(BaseModel):
    """Request schema for registering a payment method."""

    name: str = Field(..., min_length=1, max_length=100, description="Payment method name")
    description: str | None = Field(None, max_length=2000, description="Payment method description")


class PaymentMethod(BaseModel):
    """Payment method response schema."""

    id: int = Field(..., description="Unique payment method ID")
    name: str = Field(..., description="Payment method name")
    description: str | None = Field(None, description="Payment method description")

    model_config = {"from_attributes": True}


class PaymentMethodList(BaseModel):
    """List of payment methods."""

    items: list[PaymentMethod] = Field(default_factory=list, description="Payment methods")
