"""
Station directory service
"""

import re
from typing import List, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError
from app.models.station import Station

_STATION_CODE = re.compile(r"^(\D*)(\d+)$")


def station_sort_key(station_id: str) -> Tuple[str, int, str]:
    """
    Operational order for station codes: line prefix, then stop number
    ("N9" < "N10"). Codes without a trailing number sort by the full string.
    """
    match = _STATION_CODE.match(station_id)
    if not match:
        return (station_id, -1, station_id)
    prefix, number = match.groups()
    return (prefix, int(number), station_id)


class StationService:
    """Read access to the station reference table"""

    @staticmethod
    async def list_stations(db: AsyncSession, descending: bool = False) -> List[Station]:
        result = await db.execute(select(Station))
        stations = list(result.scalars().all())
        stations.sort(key=lambda s: station_sort_key(s.id), reverse=descending)
        return stations

    @staticmethod
    async def get_station(db: AsyncSession, station_id: str) -> Station:
        station = await db.get(Station, station_id)
        if station is None:
            raise NotFoundError("Station", station_id)
        return station


station_service = StationService()
