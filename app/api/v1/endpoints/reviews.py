"""
Review endpoints
Adding or deleting a review pushes a review-updated broadcast to every
connected client.
"""

from typing import Any, List
import logging
from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.database import get_session
from app.schemas.base import MAX_ROW_ID
from app.schemas.response import ChangesResponse, SuccessResponse
from app.schemas.review import ReviewCreate, ReviewResponse
from app.services.place_service import place_service
from app.services.review_service import review_service
from app.services.websocket_service import Notifier, get_notifier

router = APIRouter()
logger = logging.getLogger(__name__)


async def publish_review_update(db: AsyncSession, notifier: Notifier, place_id: int, review_id: int):
    """Broadcast the place's fresh review state; listeners filter on placeId"""
    place = await place_service.get_place(db, place_id)
    await notifier.notify(
        settings.BROADCAST_EVENT,
        {
            "placeId": place_id,
            "reviewId": review_id,
            "place": place.model_dump(mode="json", by_alias=True)
        }
    )


@router.post(
    "/places/{place_id}/reviews",
    response_model=SuccessResponse[ReviewResponse],
    status_code=status.HTTP_201_CREATED
)
async def add_review(
    review_in: ReviewCreate,
    place_id: int = Path(..., ge=1, le=MAX_ROW_ID),
    db: AsyncSession = Depends(get_session),
    notifier: Notifier = Depends(get_notifier)
) -> Any:
    """
    Submit a review for a place. No authentication.
    """
    review = await review_service.add_review(db, place_id, review_in)
    await publish_review_update(db, notifier, place_id, review.id)
    return SuccessResponse(message="Review added", data=ReviewResponse.model_validate(review))


@router.get("/reviews/place/{place_id}", response_model=SuccessResponse[List[ReviewResponse]])
async def list_reviews_for_place(
    place_id: int = Path(..., ge=1, le=MAX_ROW_ID),
    db: AsyncSession = Depends(get_session)
) -> Any:
    """
    List a place's reviews, newest first
    """
    reviews = await review_service.list_reviews_for_place(db, place_id)
    return SuccessResponse(data=[ReviewResponse.model_validate(r) for r in reviews])


@router.delete("/reviews/{review_id}", response_model=SuccessResponse[ChangesResponse])
async def delete_review(
    review_id: int = Path(..., ge=1, le=MAX_ROW_ID),
    db: AsyncSession = Depends(get_session),
    notifier: Notifier = Depends(get_notifier)
) -> Any:
    """
    Delete a review (admin moderation)
    """
    place_id = await review_service.delete_review(db, review_id)
    await publish_review_update(db, notifier, place_id, review_id)
    return SuccessResponse(message="Review deleted", data=ChangesResponse(changes=1))
