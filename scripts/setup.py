#!/usr/bin/env python3
"""Setup script for the tour booking API: migrations plus reference data."""

import asyncio
import logging
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import func, select

from app.core.database import async_session_factory, close_db
from app.models import Accommodation, AccommodationType, IncludedItem, PaymentMethod, Tag, TagOption

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

server_dir = Path(__file__).parent.parent / "server"

INCLUDED_ITEMS = [
    ("Lodging", "hotel", "2 bedrooms", "Stay at a hotel, hostel or cabin"),
    ("Transport", "directions_car", "2 flights", "Ground, air or sea transfers"),
    ("Tickets", "airplane_ticket", "4 tickets", "Entry to parks, museums, events or shows"),
    ("Meals", "restaurant", "Breakfast", "Meals as listed in the itinerary"),
    ("Guide", "hiking", "Local guide", "Accompanied by a licensed local guide"),
]

PAYMENT_METHODS = [
    ("Credit card", "Visa, Mastercard and American Express"),
    ("Debit card", "Bank debit cards"),
    ("Bank transfer", "Direct transfer to the company account"),
    ("Cash", "Paid at the office before departure"),
]


def run_migrations():
    """Bring the schema up to the latest Alembic revision."""
    logger.info("Running database migrations...")
    alembic_cfg = Config(str(server_dir / "db" / "alembic.ini"))
    command.upgrade(alembic_cfg, "head")
    logger.info("Database migrations completed")


async def _is_empty(db, model) -> bool:
    result = await db.execute(select(func.count()).select_from(model))
    return result.scalar() == 0


async def seed_reference_data():
    """Insert tags, included items, room types and payment methods on an empty database."""
    logger.info("Seeding reference data...")

    async with async_session_factory() as db:
        try:
            if await _is_empty(db, Tag):
                db.add_all(Tag(name=option.value) for option in TagOption)

            if await _is_empty(db, IncludedItem):
                db.add_all(
                    IncludedItem(type=item_type, icon=icon, details=details, description=description)
                    for item_type, icon, details, description in INCLUDED_ITEMS
                )

            if await _is_empty(db, Accommodation):
                db.add_all(Accommodation(room_type=room_type.value) for room_type in AccommodationType)

            if await _is_empty(db, PaymentMethod):
                db.add_all(
                    PaymentMethod(name=name, description=description)
                    for name, description in PAYMENT_METHODS
                )

            await db.commit()
            logger.info("Reference data seeded successfully!")

        except Exception as e:
            await db.rollback()
            logger.error(f"Failed to seed reference data: {e}")
            raise

    await close_db()


def main():
    """Main setup function."""
    logger.info("Starting tour booking API setup...")

    run_migrations()
    asyncio.run(seed_reference_data())

    logger.info("Setup completed successfully!")
    logger.info("You can now start the API server with: cd server && uvicorn app.main:app --reload")


if __name__ == "__main__":
    main()
