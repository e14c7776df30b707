"""
Domain exceptions raised by the service layer.

Routes never build error responses for these by hand: the handlers registered
in ``travelmgr.main`` translate each class into its HTTP status.
"""
from typing import Any, Dict, Optional


class TravelMgrError(Exception):
    """Base class for all expected application failures."""

    status_code: int = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/API responses."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(TravelMgrError):
    """Malformed or inconsistent input (split amounts, dates, references)."""
    status_code = 400


class ForbiddenError(TravelMgrError):
    """The principal is not allowed to perform the operation."""
    status_code = 403


class NotFoundError(TravelMgrError):
    """The aggregate or one of its sub-entries does not exist."""
    status_code = 404


class StoreError(TravelMgrError):
    """The underlying store failed; state of the write is unknown."""
    status_code = 500
