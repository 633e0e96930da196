"""Booking and Accommodation model definitions."""

from datetime import datetime
from enum import Enum

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base
from .payment import Pay
from .tour import Tour


class AccommodationType(str, Enum):
    """Room configuration attached to a booking."""
    SINGLE = "SINGLE"
    DOUBLE = "DOUBLE"
    TRIPLE = "TRIPLE"
    QUADRUPLE = "QUADRUPLE"

    @classmethod
    def lookup(cls, value: str | None) -> "AccommodationType":
        """
        Map a requested room type to a member.

        Absent or unrecognized values map to SINGLE.
        """
        if value:
            try:
                return cls(value.strip().upper())
            except ValueError:
                pass
        return cls.SINGLE


class Accommodation(Base):
    """Lookup row for a room type, shared by every booking that uses it."""

    __tablename__ = "accommodations"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    room_type: Mapped[AccommodationType] = mapped_column(
        String(20),
        nullable=False,
        unique=True,
        default=AccommodationType.SINGLE
    )

    def __repr__(self) -> str:
        return f"<Accommodation(id={self.id}, room_type={self.room_type})>"


class Booking(Base):
    """Booking entity: seats taken on one availability slot by one user."""

    __tablename__ = "bookings"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    tour_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("tours.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    availability_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("availabilities.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    accommodation_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("accommodations.id"),
        nullable=True
    )
    pay_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("pays.id"),
        nullable=True,
        unique=True
    )

    # Booking details
    start_date: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    end_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    adults: Mapped[int] = mapped_column(Integer, nullable=False)
    children: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Price in minor units
    price: Mapped[int] = mapped_column(Integer, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        CheckConstraint("adults >= 1", name="ck_booking_adults_positive"),
        CheckConstraint("children >= 0", name="ck_booking_children_non_negative"),
        CheckConstraint("price >= 0", name="ck_booking_price_non_negative"),
        UniqueConstraint("user_id", "availability_id", name="uq_booking_user_availability"),
    )

    # Relationships
    tour: Mapped[Tour] = relationship(lazy="selectin")
    accommodation: Mapped[Accommodation | None] = relationship(lazy="selectin")
    pay: Mapped[Pay | None] = relationship(lazy="selectin")

    @property
    def party_size(self) -> int:
        return self.adults + self.children

    def __repr__(self) -> str:
        return (
            f"<Booking(id={self.id}, user_id={self.user_id}, tour_id={self.tour_id}, "
            f"availability_id={self.availability_id}, party={self.adults}+{self.children})>"
        )
