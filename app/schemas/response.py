"""
Generic response schemas
"""

from pydantic import BaseModel
from typing import Any, Optional, Dict, Generic, TypeVar

T = TypeVar('T')


class SuccessResponse(BaseModel, Generic[T]):
    """Envelope for every successful response"""
    message: str = "success"
    data: T


class ErrorResponse(BaseModel):
    """Envelope for every failed response"""
    error: str
    code: Optional[str] = None
    details: Optional[Dict[str, Any]] = None


class CreatedResponse(BaseModel):
    """Id of a newly created row"""
    id: int


class ChangesResponse(BaseModel):
    """Affected row count of an update or delete"""
    changes: int


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    checks: Optional[Dict[str, bool]] = None
    version: Optional[str] = None
