"""
Test configuration and fixtures
Each test runs against a fresh SQLite file database
"""

import os
import tempfile
from typing import Any, AsyncGenerator, Dict, List, Tuple

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession

# Set test environment before the app reads its settings
TEST_ROOT = tempfile.mkdtemp(prefix="bts-explorer-tests-")
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(TEST_ROOT, 'test.db')}"
os.environ["UPLOAD_DIR"] = os.path.join(TEST_ROOT, "uploads")
os.environ["PUBLIC_BASE_URL"] = "http://testserver"
os.environ["SEED_ON_STARTUP"] = "false"
os.environ["REDIS_BROADCAST_ENABLED"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

from app.core.database import Base, async_session, engine
from app.models import Event, Place, Review, Station
from app.services.websocket_service import get_notifier


class RecordingNotifier:
    """Notifier that keeps every published message for assertions"""

    def __init__(self):
        self.messages: List[Tuple[str, Dict[str, Any]]] = []

    async def notify(self, event: str, payload: Dict[str, Any]) -> None:
        self.messages.append((event, payload))


async def reset_schema():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


@pytest_asyncio.fixture
async def setup_database():
    """Recreate every table for the test"""
    await reset_schema()
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(setup_database) -> AsyncGenerator[AsyncSession, None]:
    """Session on the application engine"""
    async with async_session() as session:
        try:
            yield session
        finally:
            if session.in_transaction():
                await session.rollback()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest_asyncio.fixture
async def client(setup_database, notifier):
    """
    HTTP client with the broadcast notifier replaced by a recorder.
    Requests open their own sessions, like in production.
    """
    from app.main import app

    app.dependency_overrides[get_notifier] = lambda: notifier

    try:
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
            yield ac
    finally:
        # Clean up override
        app.dependency_overrides.clear()


# Data fixtures
@pytest_asyncio.fixture
async def stations(db_session) -> List[Station]:
    """A handful of stations from both Green Lines, inserted out of order"""
    rows = [
        Station(id="N12", name="Sena Nikhom"),
        Station(id="E4", name="Asok"),
        Station(id="N8", name="Mo Chit"),
        Station(id="CEN", name="Siam"),
        Station(id="N19", name="Sai Yud"),
        Station(id="N9", name="Ha Yaek Lat Phrao"),
        Station(id="S2", name="Sala Daeng"),
    ]
    db_session.add_all(rows)
    await db_session.commit()
    return rows


@pytest_asyncio.fixture
async def test_place(db_session, stations) -> Place:
    """Create test place at Mo Chit"""
    place = Place(
        station_id="N8",
        name="Chatuchak Weekend Market",
        category="Market",
        description="Over 15,000 stalls",
        image="http://testserver/uploads/cover.jpg",
        gallery=["a.jpg", "b.jpg"],
        opening_hours="Sat-Sun 09:00-18:00",
        travel_info="Exit 1",
        phone="02-272-4270",
        contact={"Facebook": "https://facebook.com/chatuchak"},
        location={"lat": 13.7999, "lng": 100.5502},
    )
    db_session.add(place)
    await db_session.commit()
    await db_session.refresh(place)
    return place


@pytest_asyncio.fixture
async def test_reviews(db_session, test_place) -> List[Review]:
    """Two reviews, rating 4 then rating 2"""
    reviews = []
    for user, rating in (("Ploy", 4), ("Ton", 2)):
        review = Review(place_id=test_place.id, user=user, rating=rating, comment="")
        db_session.add(review)
        await db_session.flush()
        reviews.append(review)
    await db_session.commit()
    return reviews


@pytest_asyncio.fixture
async def test_events(db_session, test_place) -> List[Event]:
    from datetime import date

    events = [
        Event(place_id=test_place.id, event_date=date(2025, 10, 1), title="Vintage fair"),
        Event(place_id=test_place.id, event_date=date(2025, 12, 24), title="Christmas market"),
        Event(place_id=test_place.id, event_date=date(2025, 11, 15), title="Food festival",
              description="Street food from every region"),
    ]
    db_session.add_all(events)
    await db_session.commit()
    return events


def build_place_payload(**overrides) -> Dict[str, Any]:
    payload = {
        "name": "Or Tor Kor Market",
        "station_id": "N8",
        "category": "Market",
        "description": "Fresh produce market",
        "openingHours": "06:00-18:00",
        "travelInfo": "Exit 3",
        "gallery": ["x.jpg"],
        "contact": {"Website": "https://example.com"},
        "latitude": "13.7985",
        "longitude": "100.5487",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def place_payload():
    """Factory for a valid place create/update body"""
    return build_place_payload

