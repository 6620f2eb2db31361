"""
Custom application exceptions
"""

from typing import Optional, Dict, Any


class ExplorerException(Exception):
    """Base exception for the explorer API"""

    def __init__(
        self,
        message: str,
        code: str,
        status_code: int = 400,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(ExplorerException):
    """Resource not found errors"""

    def __init__(self, resource: str, identifier: Any = None):
        message = f"{resource} not found"
        if identifier is not None:
            message = f"{resource} with id {identifier} not found"
        super().__init__(
            message=message,
            code="NOT_FOUND",
            status_code=404
        )


class ValidationError(ExplorerException):
    """Validation errors"""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            status_code=400,
            details=details
        )


class ReferentialIntegrityError(ExplorerException):
    """A row points at a parent that does not exist"""

    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(
            message=message,
            code="REFERENCE_ERROR",
            status_code=400,
            details=details
        )


class UploadError(ExplorerException):
    """Rejected file upload"""

    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(
            message=message,
            code="UPLOAD_ERROR",
            status_code=400,
            details=details
        )


class TransactionError(ExplorerException):
    """A multi-statement write was rolled back"""

    def __init__(self, message: str = "Transaction failed and was rolled back"):
        super().__init__(
            message=message,
            code="TRANSACTION_FAILED",
            status_code=500
        )
