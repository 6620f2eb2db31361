"""
Event schemas
"""

from pydantic import AliasChoices, Field, field_validator
from typing import Optional
from datetime import date, datetime

from app.schemas.base import BaseSchema, IDSchema, MAX_ROW_ID


class EventIn(BaseSchema):
    """Create / full-replace payload for a calendar event"""
    place_id: int = Field(..., ge=1, le=MAX_ROW_ID)
    event_date: date
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None

    @field_validator("event_date", mode="before")
    @classmethod
    def date_part_only(cls, v):
        # Calendar granularity: "2025-10-15T00:00:00.000Z" -> "2025-10-15"
        if isinstance(v, datetime):
            return v.date()
        if isinstance(v, str) and "T" in v:
            return v.split("T", 1)[0]
        return v

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("description", mode="before")
    @classmethod
    def blank_description(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    class Config:
        json_schema_extra = {
            "example": {
                "place_id": 1,
                "event_date": "2025-10-15",
                "title": "Night market opening",
                "description": "Live music from 18:00"
            }
        }


class EventResponse(IDSchema):
    """Event joined with the name and station of its place"""
    place_id: int
    event_date: date
    title: str
    description: Optional[str] = None
    place_name: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("place_name", "placeName"),
        serialization_alias="placeName",
    )
    station_id: Optional[str] = None
