"""
Station schemas
"""

from app.schemas.base import BaseSchema


class StationResponse(BaseSchema):
    """Station as listed by the directory"""
    id: str
    name: str
