"""
Event model
"""

from sqlalchemy import Column, Date, Integer, String, Text, ForeignKey
from sqlalchemy.orm import relationship

from app.models.base import BaseModel


class Event(BaseModel):
    """
    Dated happening at a place, shown on the calendar
    """
    __tablename__ = "events"

    place_id = Column(
        Integer,
        ForeignKey("places.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    event_date = Column(Date, nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text)

    # Relationships
    place = relationship("Place", back_populates="events")

    def __repr__(self):
        return f"<Event(id={self.id}, title={self.title}, event_date={self.event_date})>"
