"""Test configuration and fixtures."""

from datetime import datetime, time

import jwt
import pytest
import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.config import settings
from app.core.database import Base
from app.core.dependencies import get_db
from app.models import *  # noqa: F403 - Import all models

# Test database URL (in-memory SQLite for speed)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Slot date shared by the seeded fixtures
FUTURE_DATE = datetime(2030, 1, 1, 9, 0)


def make_token(user_id: int, **claims) -> str:
    """Sign a bearer token the way the identity service would."""
    payload = {"sub": str(user_id), **claims}
    return jwt.encode(payload, settings.bearer_token_secret, algorithm=settings.jwt_algorithm)


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create a test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    # Create tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Drop tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def test_session(test_engine):
    """Create a test database session."""
    async_session = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def test_app(test_engine, test_session):
    """Create a test FastAPI application."""
    from fastapi import FastAPI
    from fastapi.exceptions import RequestValidationError
    from fastapi.middleware.cors import CORSMiddleware

    from app.core.exceptions import (
        ProblemDetailsException,
        generic_exception_handler,
        problem_details_handler,
        request_validation_handler,
    )
    from app.routers import availability, booking, health, metrics, payment, tour

    # Create a simplified test app without lifespan
    app = FastAPI(
        title="Tour Booking API (Test)",
        description="Test version of the API",
        version="1.0.0-test",
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Simplified for tests
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
        allow_headers=["*"],
    )

    # Register exception handlers
    app.add_exception_handler(ProblemDetailsException, problem_details_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    # Add inline health endpoints (like in main app)
    @app.get("/health")
    async def health_check():
        return {
            "status": "healthy",
            "service": "tour-booking-api",
            "version": "1.0.0",
            "environment": "test",
            "debug": True,
        }

    @app.get("/ready")
    async def readiness_check():
        async with test_engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return {
            "status": "ready",
            "service": "tour-booking-api",
            "checks": {
                "database": "ok",
            },
        }

    @app.get("/info")
    async def service_info():
        return {
            "service": "tour-booking-api",
            "version": "1.0.0",
            "description": "Tour catalog, availability and booking service",
            "environment": "test",
            "debug": True,
            "features": {
                "authentication": True,
                "metrics": True,
                "tracing": True,
                "problem_details": True,
            },
            "endpoints": {
                "health": "/health",
                "readiness": "/ready",
                "info": "/info",
                "metrics": "/metrics",
                "docs": None,
                "redoc": None,
            },
        }

    # Register API routers
    app.include_router(health.router)
    app.include_router(tour.router)
    app.include_router(availability.router)
    app.include_router(booking.router)
    app.include_router(payment.router)
    app.include_router(metrics.router)

    # Override database dependency
    async def override_get_db():
        yield test_session

    app.dependency_overrides[get_db] = override_get_db

    yield app

    # Clean up
    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def test_client(test_app):
    """Create a test HTTP client."""
    from httpx import ASGITransport
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def user(test_session):
    """A registered user."""
    user = User(name="Ada Traveler", email="ada@example.com")  # noqa: F405
    test_session.add(user)
    await test_session.commit()
    return user


@pytest.fixture
def auth_headers(user):
    """Bearer token headers for the seeded user."""
    return {"Authorization": f"Bearer {make_token(user.id, email=user.email)}"}


@pytest_asyncio.fixture
async def accommodations(test_session):
    """One accommodation row per room type, as the setup script seeds them."""
    rows = [Accommodation(room_type=room_type.value) for room_type in AccommodationType]  # noqa: F405
    test_session.add_all(rows)
    await test_session.commit()
    return {row.room_type: row for row in rows}


@pytest_asyncio.fixture
async def payment_method(test_session):
    """A payment method customers can pick."""
    method = PaymentMethod(name="Credit card", description="Visa and Mastercard")  # noqa: F405
    test_session.add(method)
    await test_session.commit()
    return method


@pytest_asyncio.fixture
async def included_items(test_session):
    """Catalog of included items."""
    items = [
        IncludedItem(type="Lodging", icon="hotel", details="2 bedrooms", description="Hotel stay"),  # noqa: F405
        IncludedItem(type="Transport", icon="directions_car", details="2 flights", description="Transfers"),  # noqa: F405
    ]
    test_session.add_all(items)
    await test_session.commit()
    return items


@pytest_asyncio.fixture
async def tour(test_session, included_items):
    """A tour priced at 100.00 per adult and 50.00 per child."""
    tour = Tour(  # noqa: F405
        name="Patagonia Trek",
        description="Ten days across the southern ice fields",
        adult_price=10000,
        child_price=5000,
        currency="USD",
        destination_country="Argentina",
        destination_city="El Calafate",
        hotels=["Hotel Glaciar"],
        images=["https://img.example.com/patagonia.jpg"],
        tags=[Tag(name="ADVENTURE"), Tag(name="MOUNTAIN")],  # noqa: F405
        included_items=included_items,
    )
    test_session.add(tour)
    await test_session.commit()
    return tour


@pytest_asyncio.fixture
async def slot(test_session, tour):
    """Ten seats on the tour's FUTURE_DATE departure."""
    slot = Availability(  # noqa: F405
        tour_id=tour.id,
        available_date=FUTURE_DATE,
        available_slots=10,
        departure_time=time(8, 0),
        return_time=time(18, 30),
    )
    test_session.add(slot)
    await test_session.commit()
    return slot


@pytest.fixture
def sample_tour_data(included_items):
    """Sample tour creation payload."""
    return {
        "name": "Northern Lights Adventure",
        "description": "Experience the magical Aurora Borealis in Iceland",
        "adult_price": 29999,
        "child_price": 14999,
        "currency": "EUR",
        "tags": ["adventure", "winter"],
        "includes": ["Lodging"],
        "hotels": ["Aurora Lodge"],
        "destination": {"country": "Iceland", "city": "Reykjavik"},
        "images": ["https://img.example.com/aurora.jpg"],
        "availability": [
            {
                "available_date": "2030-02-10T20:00:00Z",
                "available_slots": 12,
                "departure_time": "20:00:00",
                "return_time": "23:30:00"
            }
        ]
    }


@pytest.fixture
def sample_booking_data(tour):
    """Sample booking payload for the seeded tour and slot."""
    return {
        "tour_id": tour.id,
        "start_date": FUTURE_DATE.isoformat(),
        "adults": 2,
        "children": 1,
        "accommodation_booking": "DOUBLE"
    }


@pytest.fixture
def token_factory():
    """Sign tokens for arbitrary user ids and claims."""
    return make_token
