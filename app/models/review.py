"""
Review model
"""

from sqlalchemy import Column, Integer, String, Text, ForeignKey
from sqlalchemy.orm import relationship

from app.models.base import BaseModel


class Review(BaseModel):
    """
    Unauthenticated rating and comment on a place
    """
    __tablename__ = "reviews"

    place_id = Column(
        Integer,
        ForeignKey("places.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    user = Column(String(255), nullable=False)
    rating = Column(Integer, nullable=False)
    comment = Column(Text)

    # Relationships
    place = relationship("Place", back_populates="reviews")

    def __repr__(self):
        return f"<Review(id={self.id}, place_id={self.place_id}, rating={self.rating})>"
