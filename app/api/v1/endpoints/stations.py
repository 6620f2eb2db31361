"""
Station directory endpoints
"""

from typing import Any, List, Literal
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_session
from app.schemas.response import SuccessResponse
from app.schemas.station import StationResponse
from app.services.station_service import station_service

router = APIRouter()


@router.get("", response_model=SuccessResponse[List[StationResponse]])
async def list_stations(
    order: Literal["asc", "desc"] = Query("asc", description="Station-number order"),
    db: AsyncSession = Depends(get_session)
) -> Any:
    """
    List every station in line order (N9 before N10)
    """
    stations = await station_service.list_stations(db, descending=order == "desc")
    return SuccessResponse(data=[StationResponse.model_validate(s) for s in stations])


@router.get("/{station_id}", response_model=SuccessResponse[StationResponse])
async def get_station(
    station_id: str,
    db: AsyncSession = Depends(get_session)
) -> Any:
    """
    Get a single station by code
    """
    station = await station_service.get_station(db, station_id)
    return SuccessResponse(data=StationResponse.model_validate(station))
