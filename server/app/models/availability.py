"""Availability slot model definition."""

from datetime import datetime, time

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, Time, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from ..core.database import Base


class Availability(Base):
    """Bookable (date, capacity) unit belonging to a tour."""

    __tablename__ = "availabilities"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    # Plain reference to the owning tour, no back-navigation
    tour_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("tours.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    available_date: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    available_slots: Mapped[int] = mapped_column(Integer, nullable=False)
    departure_time: Mapped[time] = mapped_column(Time, nullable=False)
    return_time: Mapped[time] = mapped_column(Time, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        nullable=False,
        default=datetime.utcnow,
        server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint("available_slots >= 0", name="ck_availability_slots_non_negative"),
        UniqueConstraint("tour_id", "available_date", name="uq_availability_tour_date"),
    )

    @property
    def ends_at(self) -> datetime:
        """Return of the trip: the slot's day at its return time."""
        return datetime.combine(self.available_date.date(), self.return_time)

    def __repr__(self) -> str:
        return (
            f"<Availability(id={self.id}, tour_id={self.tour_id}, "
            f"available_date={self.available_date}, slots={self.available_slots})>"
        )
