"""Tour catalog model definitions."""

from datetime import datetime
from enum import Enum

from sqlalchemy import JSON, CheckConstraint, Column, ForeignKey, Integer, String, Table, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base


class TourStatus(str, Enum):
    """Tour status enumeration."""
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    CANCELLED = "CANCELLED"


class TagOption(str, Enum):
    """Tour category tags."""
    VACATION = "VACATION"
    ECOTOURISM = "ECOTOURISM"
    LUXURY = "LUXURY"
    ADVENTURE = "ADVENTURE"
    ADRENALIN = "ADRENALIN"
    BEACH = "BEACH"
    MOUNTAIN = "MOUNTAIN"
    CRUISE = "CRUISE"
    CITY = "CITY"
    OTHER = "OTHER"

    @classmethod
    def lookup(cls, name: str | None) -> "TagOption":
        """Map a free-form tag name to a tag, falling back to OTHER."""
        if name:
            try:
                return cls(name.strip().upper())
            except ValueError:
                pass
        return cls.OTHER


tour_tags = Table(
    "tour_tags",
    Base.metadata,
    Column("tour_id", Integer, ForeignKey("tours.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", Integer, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)

tour_included_items = Table(
    "tour_included_items",
    Base.metadata,
    Column("tour_id", Integer, ForeignKey("tours.id", ondelete="CASCADE"), primary_key=True),
    Column("included_item_id", Integer, ForeignKey("included_items.id", ondelete="CASCADE"), primary_key=True),
)


class Tag(Base):
    """Tag entity, one row per TagOption in use."""

    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(32), nullable=False, unique=True, index=True)

    def __repr__(self) -> str:
        return f"<Tag(id={self.id}, name='{self.name}')>"


class IncludedItem(Base):
    """Something a tour includes (lodging, transport, meals...)."""

    __tablename__ = "included_items"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    type: Mapped[str] = mapped_column(String(100), nullable=False, unique=True, index=True)
    icon: Mapped[str | None] = mapped_column(String(255), nullable=True)
    details: Mapped[str | None] = mapped_column(String(255), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<IncludedItem(id={self.id}, type='{self.type}')>"


class Tour(Base):
    """
    Tour entity representing a tour offering.

    Availability slots reference their tour by id; a tour does not hold its
    slots.
    """

    __tablename__ = "tours"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    # Tour information
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[TourStatus] = mapped_column(
        String(20),
        nullable=False,
        default=TourStatus.ACTIVE,
        index=True
    )

    # Prices in minor units
    adult_price: Mapped[int] = mapped_column(Integer, nullable=False)
    child_price: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")

    # Destination
    destination_country: Mapped[str] = mapped_column(String(100), nullable=False)
    destination_city: Mapped[str] = mapped_column(String(100), nullable=False)

    hotels: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    images: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    created_at: Mapped[datetime] = mapped_column(
        nullable=False,
        default=datetime.utcnow,
        server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint("adult_price >= 0", name="ck_tour_adult_price_non_negative"),
        CheckConstraint("child_price >= 0", name="ck_tour_child_price_non_negative"),
        CheckConstraint("length(currency) = 3", name="ck_tour_currency_length"),
    )

    # Relationships
    tags: Mapped[list[Tag]] = relationship(secondary=tour_tags, lazy="selectin")
    included_items: Mapped[list[IncludedItem]] = relationship(
        secondary=tour_included_items,
        lazy="selectin"
    )

    def price_for(self, adults: int, children: int) -> int:
        """Price in minor units for a party."""
        return self.adult_price * adults + self.child_price * children

    def __repr__(self) -> str:
        return f"<Tour(id={self.id}, name='{self.name}', status={self.status})>"
