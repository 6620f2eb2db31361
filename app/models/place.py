"""
Place model
"""

from sqlalchemy import Column, String, Text, ForeignKey
from sqlalchemy.orm import relationship

from app.models.base import BaseModel
from app.models.types import SafeJSON


class Place(BaseModel):
    """
    Point of interest near a station
    """
    __tablename__ = "places"

    station_id = Column(
        String(16),
        ForeignKey("stations.id"),
        nullable=False,
        index=True
    )
    name = Column(String(255), nullable=False, index=True)
    category = Column(String(100))
    description = Column(Text)
    image = Column(Text)
    gallery = Column(SafeJSON(default_factory=list, expected=list))
    opening_hours = Column(Text)
    travel_info = Column(Text)
    phone = Column(String(50))
    contact = Column(SafeJSON(default_factory=dict, expected=dict))
    location = Column(SafeJSON(expected=dict))

    # Relationships
    station = relationship("Station", back_populates="places")
    reviews = relationship(
        "Review",
        back_populates="place",
        cascade="all, delete-orphan",
        order_by="Review.id.desc()"
    )
    events = relationship("Event", back_populates="place", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Place(id={self.id}, name={self.name}, station_id={self.station_id})>"
