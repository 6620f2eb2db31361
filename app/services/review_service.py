"""
Review service
"""

from typing import List
import logging

from sqlalchemy import select, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import db_manager
from app.core.exceptions import NotFoundError, ReferentialIntegrityError
from app.models.place import Place
from app.models.review import Review
from app.schemas.review import ReviewCreate

logger = logging.getLogger(__name__)


class ReviewService:
    """Unauthenticated review submission and admin moderation"""

    @staticmethod
    async def add_review(db: AsyncSession, place_id: int, payload: ReviewCreate) -> Review:
        place = await db.get(Place, place_id)
        if place is None:
            raise NotFoundError("Place", place_id)

        review = Review(place_id=place_id, **payload.model_dump())
        try:
            async with db_manager.transaction(db):
                db.add(review)
        except IntegrityError as e:
            # Place removed between the lookup and the insert
            raise ReferentialIntegrityError(
                f"Place {place_id} does not exist",
                details={"place_id": place_id}
            ) from e

        # created_at is filled in by the database
        await db.refresh(review)
        logger.info(f"Review {review.id} added to place {place_id} (rating {review.rating})")
        return review

    @staticmethod
    async def list_reviews_for_place(db: AsyncSession, place_id: int) -> List[Review]:
        stmt = (
            select(Review)
            .where(Review.place_id == place_id)
            .order_by(Review.id.desc())
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def delete_review(db: AsyncSession, review_id: int) -> int:
        """Delete one review and return the id of the place it belonged to"""
        review = await db.get(Review, review_id)
        if review is None:
            raise NotFoundError("Review", review_id)
        place_id = review.place_id

        async with db_manager.transaction(db):
            result = await db.execute(delete(Review).where(Review.id == review_id))

        if not result.rowcount:
            # Deleted concurrently by another request
            raise NotFoundError("Review", review_id)

        logger.info(f"Review {review_id} deleted from place {place_id}")
        return place_id


review_service = ReviewService()
