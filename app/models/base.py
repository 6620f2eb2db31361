"""
Base model class with common fields
"""

from sqlalchemy import Column, DateTime, Integer, func

from app.core.database import Base


class TimestampMixin:
    """created_at / updated_at maintained by the database"""

    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )


class BaseModel(TimestampMixin, Base):
    """
    Abstract base model with an integer surrogate key
    """
    __abstract__ = True

    id = Column(Integer, primary_key=True, autoincrement=True)
