"""
Base Pydantic schemas
"""

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """Base schema with common configuration"""
    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        use_enum_values=True,
    )


class IDSchema(BaseSchema):
    """Schema with ID field"""
    id: int


# Largest value an Integer primary key holds on every supported database
MAX_ROW_ID = 2**31 - 1
