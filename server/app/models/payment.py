"""Payment model definitions."""

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base


class PaymentMethod(Base):
    """Reference data: a way customers can pay."""

    __tablename__ = "payment_methods"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<PaymentMethod(id={self.id}, name='{self.name}')>"


class Pay(Base):
    """Payment record created alongside a booking."""

    __tablename__ = "pays"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    payment_method_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("payment_methods.id"),
        nullable=False,
        index=True
    )

    # Amount in minor units
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    payment_date: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_pay_amount_non_negative"),
    )

    payment_method: Mapped[PaymentMethod] = relationship(lazy="selectin")

    def __repr__(self) -> str:
        return f"<Pay(id={self.id}, amount={self.amount} {self.currency}, method_id={self.payment_method_id})>"
