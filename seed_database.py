"""
Database Seeding Script for BTS Green Line Explorer
Rebuilds the schema, loads the Green Line stations and imports places from
a data.json export.

Usage: python seed_database.py [path/to/data.json]
"""

import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Dict, List

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import Base, async_session, engine
from app.core.seeding import GREEN_LINE_STATIONS
from app.models import Event, Place, Review, Station
from app.models.types import decode_json
from app.schemas.event import EventIn
from app.schemas.place import PlaceIn
from app.schemas.review import ReviewCreate

DEFAULT_DATA_PATH = Path(__file__).resolve().parent / "data.json"


async def create_tables():
    """Drop and recreate all database tables"""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    print("[OK] Database tables created")


async def create_stations(session: AsyncSession):
    """Insert the Green Line station codes"""
    session.add_all(Station(id=code, name=name) for code, name in GREEN_LINE_STATIONS)
    await session.flush()
    print(f"[OK] Created {len(GREEN_LINE_STATIONS)} stations")


def load_places(path: Path) -> List[Dict[str, Any]]:
    """Read the exported place list"""
    raw = path.read_text(encoding="utf-8")
    if not raw.strip():
        raise ValueError(f"{path} is empty")
    records = json.loads(raw)
    if not isinstance(records, list):
        raise ValueError(f"{path} must contain a JSON array of places")
    return records


async def create_places(session: AsyncSession, records: List[Dict[str, Any]]):
    """
    Import places. Reviews and events embedded in a record (as lists or
    JSON-encoded text) are imported with it; invalid records are skipped.
    """
    places = reviews = events = skipped = 0
    station_ids = {code for code, _ in GREEN_LINE_STATIONS}

    for index, record in enumerate(records):
        try:
            payload = PlaceIn.model_validate(record)
        except ValidationError as e:
            print(f"[SKIP] Record {index}: {e.error_count()} validation error(s)")
            skipped += 1
            continue
        if payload.station_id not in station_ids:
            print(f"[SKIP] Record {index}: unknown station {payload.station_id}")
            skipped += 1
            continue

        place = Place(**payload.to_columns())
        session.add(place)
        await session.flush()
        places += 1

        for item in decode_json(record.get("reviews"), list, list):
            try:
                review = ReviewCreate.model_validate(item)
            except ValidationError:
                continue
            session.add(Review(place_id=place.id, **review.model_dump()))
            reviews += 1

        for item in decode_json(record.get("events"), list, list):
            if not isinstance(item, dict):
                continue
            try:
                event = EventIn.model_validate({**item, "place_id": place.id})
            except ValidationError:
                continue
            session.add(Event(**event.model_dump()))
            events += 1

    await session.flush()
    print(f"[OK] Created {places} places, {reviews} reviews, {events} events ({skipped} skipped)")


async def seed_database(data_path: Path = DEFAULT_DATA_PATH):
    """Main seeding function"""
    print("\n>>> Starting database seeding...")

    records: List[Dict[str, Any]] = []
    if data_path.exists():
        records = load_places(data_path)
    else:
        print(f"[WARN] {data_path} not found, seeding stations only")

    # Create tables
    await create_tables()

    async with async_session() as session:
        try:
            await create_stations(session)
            await create_places(session, records)

            # Commit all changes
            await session.commit()
            print("\n[OK] Database seeding completed successfully!")

        except Exception as e:
            await session.rollback()
            print(f"\n[ERROR] Error during seeding: {e}")
            raise

    await engine.dispose()


if __name__ == "__main__":
    path = Path(sys.argv[1]) if len(sys.argv) > 1 else DEFAULT_DATA_PATH
    asyncio.run(seed_database(path))
