"""
Review schemas
"""

from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from app.schemas.base import BaseSchema, IDSchema


class ReviewCreate(BaseSchema):
    """Review submitted from the place detail view or the admin panel"""
    user: str = Field(..., min_length=1, max_length=255)
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = ""

    @field_validator("user", mode="before")
    @classmethod
    def strip_user(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("comment", mode="before")
    @classmethod
    def default_comment(cls, v):
        return "" if v is None else v

    class Config:
        json_schema_extra = {
            "example": {
                "user": "Ploy",
                "rating": 5,
                "comment": "Great coffee two minutes from the skywalk"
            }
        }


class ReviewSummary(IDSchema):
    """Review as embedded in a place listing"""
    user: str
    rating: int
    comment: Optional[str] = None


class ReviewResponse(ReviewSummary):
    """Review as returned by the review endpoints"""
    place_id: int
    created_at: Optional[datetime] = None
