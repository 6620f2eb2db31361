"""
Event calendar service
"""

from datetime import date
from typing import List, Optional
import logging

from sqlalchemy import select, update, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import db_manager
from app.core.exceptions import ReferentialIntegrityError, ValidationError
from app.models.event import Event
from app.models.place import Place
from app.schemas.event import EventIn, EventResponse

logger = logging.getLogger(__name__)


class EventService:
    """Service for calendar events"""

    @staticmethod
    async def list_events(
        db: AsyncSession,
        start: Optional[date] = None,
        end: Optional[date] = None
    ) -> List[EventResponse]:
        """Events joined with their place, latest date first"""
        if start and end and start > end:
            raise ValidationError("start must not be after end", field="start")

        stmt = (
            select(Event, Place.name, Place.station_id)
            .join(Place, Place.id == Event.place_id)
        )
        if start:
            stmt = stmt.where(Event.event_date >= start)
        if end:
            stmt = stmt.where(Event.event_date <= end)
        stmt = stmt.order_by(Event.event_date.desc(), Event.id.desc())

        result = await db.execute(stmt)
        return [
            EventResponse(
                id=event.id,
                place_id=event.place_id,
                event_date=event.event_date,
                title=event.title,
                description=event.description,
                place_name=place_name,
                station_id=station_id
            )
            for event, place_name, station_id in result.all()
        ]

    @staticmethod
    async def create_event(db: AsyncSession, payload: EventIn) -> Event:
        event = Event(**payload.model_dump())
        try:
            async with db_manager.transaction(db):
                db.add(event)
        except IntegrityError as e:
            raise ReferentialIntegrityError(
                f"Place {payload.place_id} does not exist",
                details={"place_id": payload.place_id}
            ) from e

        logger.info(f"Event {event.id} created for place {event.place_id} on {event.event_date}")
        return event

    @staticmethod
    async def update_event(db: AsyncSession, event_id: int, payload: EventIn) -> int:
        """Full replace of every event column; returns affected row count"""
        stmt = (
            update(Event)
            .where(Event.id == event_id)
            .values(**payload.model_dump())
        )
        try:
            async with db_manager.transaction(db):
                result = await db.execute(stmt)
        except IntegrityError as e:
            raise ReferentialIntegrityError(
                f"Place {payload.place_id} does not exist",
                details={"place_id": payload.place_id}
            ) from e

        logger.info(f"Event {event_id} updated ({result.rowcount} row(s))")
        return result.rowcount

    @staticmethod
    async def delete_event(db: AsyncSession, event_id: int) -> int:
        async with db_manager.transaction(db):
            result = await db.execute(delete(Event).where(Event.id == event_id))

        if result.rowcount:
            logger.info(f"Event {event_id} deleted")
        return result.rowcount


event_service = EventService()
