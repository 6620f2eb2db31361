"""
Database models
"""

from app.models.station import Station
from app.models.place import Place
from app.models.review import Review
from app.models.event import Event

__all__ = [
    "Station",
    "Place",
    "Review",
    "Event"
]
