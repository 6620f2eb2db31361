"""
Place schemas

Internal names are snake_case; the wire format keeps the camelCase keys the
UIs were built against (openingHours, travelInfo). Both spellings are
accepted on input.
"""

import math
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, Field, field_validator, model_validator

from app.models.types import decode_json
from app.schemas.base import BaseSchema, IDSchema
from app.schemas.review import ReviewSummary

# Artifacts that form encoders send for empty inputs
_EMPTY_MARKERS = {"", "undefined", "null", "none"}

_OPTIONAL_TEXT_FIELDS = (
    "category",
    "description",
    "image",
    "opening_hours",
    "travel_info",
    "phone",
)


def clean_text(value: Any) -> Any:
    """Blank strings and form artifacts become None; other strings are stripped."""
    if isinstance(value, str):
        stripped = value.strip()
        if stripped.lower() in _EMPTY_MARKERS:
            return None
        return stripped
    return value


def parse_coordinate(value: Any) -> Optional[float]:
    """Parse a latitude/longitude sent as number or string; None if not numeric."""
    value = clean_text(value)
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def parse_location(location: Any = None, latitude: Any = None, longitude: Any = None) -> Optional[Dict[str, float]]:
    """
    Build a {lat, lng} pair from either a location object or separate
    latitude/longitude values. Anything incomplete or non-numeric is None.
    """
    location = clean_text(location)
    if isinstance(location, str):
        location = decode_json(location, lambda: None)
    if isinstance(location, dict):
        latitude = location.get("lat", location.get("latitude"))
        longitude = location.get("lng", location.get("longitude"))
    elif isinstance(location, (list, tuple)) and len(location) == 2:
        latitude, longitude = location

    lat = parse_coordinate(latitude)
    lng = parse_coordinate(longitude)
    if lat is None or lng is None:
        return None
    if not (-90 <= lat <= 90 and -180 <= lng <= 180):
        return None
    return {"lat": lat, "lng": lng}


def parse_gallery(value: Any) -> List[str]:
    """Ordered list of image URLs from a list or a JSON-encoded list."""
    value = clean_text(value)
    if value is None:
        return []
    if isinstance(value, str):
        if value.startswith("["):
            value = decode_json(value, list, list)
        else:
            value = [value]
    if not isinstance(value, (list, tuple)):
        return []
    urls = []
    for item in value:
        item = clean_text(item)
        if isinstance(item, str) and item:
            urls.append(item)
    return urls


def parse_contact(value: Any) -> Dict[str, str]:
    """
    Platform -> URL mapping. Accepts a mapping, its JSON encoding, or a list
    of {platform, url} pairs; a repeated platform keeps the last URL.
    """
    value = clean_text(value)
    if value is None:
        return {}
    if isinstance(value, str):
        value = decode_json(value, dict)

    pairs = []
    if isinstance(value, dict):
        pairs = list(value.items())
    elif isinstance(value, (list, tuple)):
        for item in value:
            if isinstance(item, dict):
                pairs.append((item.get("platform"), item.get("url")))
            elif isinstance(item, (list, tuple)) and len(item) == 2:
                pairs.append((item[0], item[1]))

    contact: Dict[str, str] = {}
    for platform, url in pairs:
        platform = clean_text(platform)
        url = clean_text(url)
        if platform and url:
            contact[str(platform)] = str(url)
    return contact


class Coordinates(BaseSchema):
    lat: float
    lng: float


class PlaceIn(BaseSchema):
    """
    Create / full-replace payload. Every column is written; fields the caller
    leaves out are stored as null or empty.
    """
    name: str = Field(..., min_length=1, max_length=255)
    station_id: str = Field(
        ...,
        min_length=1,
        max_length=16,
        validation_alias=AliasChoices("station_id", "stationId"),
    )
    category: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    image: Optional[str] = None
    gallery: List[str] = Field(default_factory=list)
    opening_hours: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("openingHours", "opening_hours", "openinghours"),
    )
    travel_info: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("travelInfo", "travel_info", "travelinfo"),
    )
    phone: Optional[str] = Field(None, max_length=50)
    contact: Dict[str, str] = Field(default_factory=dict)
    location: Optional[Coordinates] = None

    @model_validator(mode="before")
    @classmethod
    def normalise(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        data["location"] = parse_location(
            data.get("location"),
            data.pop("latitude", None),
            data.pop("longitude", None),
        )
        return data

    @field_validator("name", "station_id", mode="before")
    @classmethod
    def strip_required(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator(*_OPTIONAL_TEXT_FIELDS, mode="before")
    @classmethod
    def empty_to_none(cls, v):
        return clean_text(v)

    @field_validator("gallery", mode="before")
    @classmethod
    def coerce_gallery(cls, v):
        return parse_gallery(v)

    @field_validator("contact", mode="before")
    @classmethod
    def coerce_contact(cls, v):
        return parse_contact(v)

    def to_columns(self) -> Dict[str, Any]:
        """Column values for an insert or a full-replace update."""
        return {
            "station_id": self.station_id,
            "name": self.name,
            "category": self.category,
            "description": self.description,
            "image": self.image,
            "gallery": list(self.gallery),
            "opening_hours": self.opening_hours,
            "travel_info": self.travel_info,
            "phone": self.phone,
            "contact": dict(self.contact),
            "location": self.location.model_dump() if self.location else None,
        }

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Chatuchak Weekend Market",
                "station_id": "N8",
                "category": "Market",
                "description": "Over 15,000 stalls",
                "image": "http://localhost:3001/uploads/1700000000000-ab12cd34.jpg",
                "gallery": [],
                "openingHours": "Sat-Sun 09:00-18:00",
                "travelInfo": "Exit 1, walk 5 minutes",
                "phone": "02-272-4270",
                "contact": {"Facebook": "https://facebook.com/chatuchak"},
                "location": {"lat": 13.7999, "lng": 100.5502}
            }
        }


class PlaceResponse(IDSchema):
    """Place as stored, JSON sub-fields decoded"""
    station_id: str
    name: str
    category: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    gallery: List[Any] = Field(default_factory=list)
    opening_hours: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("opening_hours", "openingHours"),
        serialization_alias="openingHours",
    )
    travel_info: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("travel_info", "travelInfo"),
        serialization_alias="travelInfo",
    )
    phone: Optional[str] = None
    contact: Dict[str, Any] = Field(default_factory=dict)
    location: Optional[Coordinates] = None

    @field_validator("location", mode="before")
    @classmethod
    def drop_incomplete_location(cls, v):
        if v is None or isinstance(v, Coordinates):
            return v
        return parse_location(v)


class PlaceWithReviews(PlaceResponse):
    """Place with its derived review statistics"""
    average_rating: Optional[float] = None
    review_count: int = 0
    reviews: List[ReviewSummary] = Field(default_factory=list)

    @classmethod
    def from_place(cls, place, average_rating: Optional[float], review_count: int) -> "PlaceWithReviews":
        base = PlaceResponse.model_validate(place)
        return cls(
            **base.model_dump(),
            average_rating=average_rating,
            review_count=review_count,
            reviews=[ReviewSummary.model_validate(review) for review in place.reviews],
        )
