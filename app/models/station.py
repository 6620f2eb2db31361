"""
Station model
"""

from sqlalchemy import Column, String
from sqlalchemy.orm import relationship

from app.models.base import Base, TimestampMixin


class Station(TimestampMixin, Base):
    """
    A stop on the line, keyed by its line-prefixed code (e.g. "N8")
    """
    __tablename__ = "stations"

    id = Column(String(16), primary_key=True)
    name = Column(String(255), nullable=False)

    # Relationships
    places = relationship("Place", back_populates="station")

    def __repr__(self):
        return f"<Station(id={self.id}, name={self.name})>"
