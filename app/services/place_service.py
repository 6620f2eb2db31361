"""
Place directory service
Queries places, shapes aggregate review stats and owns the cascade delete
"""

from typing import List, Optional
import logging

from sqlalchemy import select, update, delete, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.database import db_manager
from app.core.exceptions import NotFoundError, ReferentialIntegrityError, TransactionError
from app.models.event import Event
from app.models.place import Place
from app.models.review import Review
from app.schemas.place import PlaceIn, PlaceWithReviews

logger = logging.getLogger(__name__)


def average_or_none(average, review_count: int) -> Optional[float]:
    """No reviews means no rating, not a rating of zero."""
    if not review_count or average is None:
        return None
    return round(float(average), 2)


class PlaceService:
    """Service for place listing and admin CRUD"""

    @staticmethod
    def _places_with_stats():
        stats = (
            select(
                Review.place_id.label("place_id"),
                func.avg(Review.rating).label("average_rating"),
                func.count(Review.id).label("review_count")
            )
            .group_by(Review.place_id)
            .subquery()
        )
        return (
            select(Place, stats.c.average_rating, stats.c.review_count)
            .outerjoin(stats, stats.c.place_id == Place.id)
            .options(selectinload(Place.reviews))
            .execution_options(populate_existing=True)
        )

    @staticmethod
    async def list_places_by_station(db: AsyncSession, station_id: str) -> List[PlaceWithReviews]:
        """Places near a station with average rating, count and reviews newest-first"""
        stmt = (
            PlaceService._places_with_stats()
            .where(Place.station_id == station_id)
            .order_by(Place.name, Place.id)
        )
        result = await db.execute(stmt)
        return [
            PlaceWithReviews.from_place(place, average_or_none(average, count), count or 0)
            for place, average, count in result.all()
        ]

    @staticmethod
    async def get_place(db: AsyncSession, place_id: int) -> PlaceWithReviews:
        stmt = PlaceService._places_with_stats().where(Place.id == place_id)
        result = await db.execute(stmt)
        row = result.first()
        if row is None:
            raise NotFoundError("Place", place_id)
        place, average, count = row
        return PlaceWithReviews.from_place(place, average_or_none(average, count), count or 0)

    @staticmethod
    async def list_all_places(db: AsyncSession) -> List[Place]:
        result = await db.execute(select(Place).order_by(Place.name, Place.id))
        return list(result.scalars().all())

    @staticmethod
    async def create_place(db: AsyncSession, payload: PlaceIn) -> Place:
        place = Place(**payload.to_columns())
        try:
            async with db_manager.transaction(db):
                db.add(place)
        except IntegrityError as e:
            raise ReferentialIntegrityError(
                f"Station {payload.station_id} does not exist",
                details={"station_id": payload.station_id}
            ) from e

        logger.info(f"Place {place.id} created at station {place.station_id}")
        return place

    @staticmethod
    async def update_place(db: AsyncSession, place_id: int, payload: PlaceIn) -> int:
        """
        Full replace: every column is overwritten with the payload, so
        callers must resend fields they did not change.
        """
        stmt = (
            update(Place)
            .where(Place.id == place_id)
            .values(**payload.to_columns())
        )
        try:
            async with db_manager.transaction(db):
                result = await db.execute(stmt)
        except IntegrityError as e:
            raise ReferentialIntegrityError(
                f"Station {payload.station_id} does not exist",
                details={"station_id": payload.station_id}
            ) from e

        logger.info(f"Place {place_id} updated ({result.rowcount} row(s))")
        return result.rowcount

    @staticmethod
    async def delete_place(db: AsyncSession, place_id: int) -> int:
        """
        Remove the place together with its reviews and events in one
        transaction. Returns the number of place rows deleted.
        """
        try:
            async with db_manager.transaction(db):
                reviews = await db.execute(delete(Review).where(Review.place_id == place_id))
                events = await db.execute(delete(Event).where(Event.place_id == place_id))
                result = await db.execute(delete(Place).where(Place.id == place_id))
        except SQLAlchemyError as e:
            logger.error(f"Cascade delete of place {place_id} failed: {e}")
            raise TransactionError(f"Failed to delete place {place_id}") from e

        if result.rowcount:
            logger.info(
                f"Place {place_id} deleted with {reviews.rowcount} review(s) "
                f"and {events.rowcount} event(s)"
            )
        return result.rowcount


place_service = PlaceService()
