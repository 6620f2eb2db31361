"""
Pydantic schemas for request and response validation
"""

from app.schemas.station import StationResponse
from app.schemas.place import (
    Coordinates,
    PlaceIn,
    PlaceResponse,
    PlaceWithReviews
)
from app.schemas.review import (
    ReviewCreate,
    ReviewSummary,
    ReviewResponse
)
from app.schemas.event import (
    EventIn,
    EventResponse
)
from app.schemas.upload import (
    UploadResponse,
    GalleryUploadResponse
)
from app.schemas.response import (
    SuccessResponse,
    ErrorResponse,
    CreatedResponse,
    ChangesResponse,
    HealthResponse
)

__all__ = [
    "StationResponse",
    "Coordinates",
    "PlaceIn",
    "PlaceResponse",
    "PlaceWithReviews",
    "ReviewCreate",
    "ReviewSummary",
    "ReviewResponse",
    "EventIn",
    "EventResponse",
    "UploadResponse",
    "GalleryUploadResponse",
    "SuccessResponse",
    "ErrorResponse",
    "CreatedResponse",
    "ChangesResponse",
    "HealthResponse"
]
