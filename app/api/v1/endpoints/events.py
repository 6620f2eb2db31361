"""
Event calendar endpoints
"""

from typing import Any, List, Optional
from datetime import date
import logging
from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_session
from app.core.exceptions import NotFoundError
from app.schemas.base import MAX_ROW_ID
from app.schemas.event import EventIn, EventResponse
from app.schemas.response import ChangesResponse, CreatedResponse, SuccessResponse
from app.services.event_service import event_service

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", response_model=SuccessResponse[List[EventResponse]])
async def list_events(
    start: Optional[date] = Query(None, description="First calendar day, inclusive"),
    end: Optional[date] = Query(None, description="Last calendar day, inclusive"),
    db: AsyncSession = Depends(get_session)
) -> Any:
    """
    List events with their place name and station, latest date first
    """
    events = await event_service.list_events(db, start=start, end=end)
    return SuccessResponse(data=events)


@router.post(
    "",
    response_model=SuccessResponse[CreatedResponse],
    status_code=status.HTTP_201_CREATED
)
@router.post(
    "/add",
    response_model=SuccessResponse[CreatedResponse],
    status_code=status.HTTP_201_CREATED
)
async def create_event(
    event_in: EventIn,
    db: AsyncSession = Depends(get_session)
) -> Any:
    """
    Create an event; place_id, event_date and title are required
    """
    event = await event_service.create_event(db, event_in)
    return SuccessResponse(message="Event created", data=CreatedResponse(id=event.id))


@router.put("/{event_id}", response_model=SuccessResponse[ChangesResponse])
async def update_event(
    event_in: EventIn,
    event_id: int = Path(..., ge=1, le=MAX_ROW_ID),
    db: AsyncSession = Depends(get_session)
) -> Any:
    """
    Replace every field of an event. An unknown id reports zero changes.
    """
    changes = await event_service.update_event(db, event_id, event_in)
    return SuccessResponse(data=ChangesResponse(changes=changes))


@router.delete("/{event_id}", response_model=SuccessResponse[ChangesResponse])
async def delete_event(
    event_id: int = Path(..., ge=1, le=MAX_ROW_ID),
    db: AsyncSession = Depends(get_session)
) -> Any:
    """
    Delete an event
    """
    changes = await event_service.delete_event(db, event_id)
    if not changes:
        raise NotFoundError("Event", event_id)
    return SuccessResponse(message="Event deleted", data=ChangesResponse(changes=changes))
