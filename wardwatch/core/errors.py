"""
Domain errors raised by the service layer.

Services never build HTTP responses themselves. They raise one of these and
the exception handlers registered in wardwatch.main translate it into a status
code and JSON body at the request boundary.
"""

from typing import Dict, List, Optional


class WardWatchError(Exception):
    """Base class for every expected failure in the application."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> Dict:
        return {"message": self.message}


class ValidationFailed(WardWatchError):
    """
    Input failed field constraints.

    Carries every violated field, not just the first one found.
    """

    status_code = 400
    default_message = "Validation failed"

    def __init__(self, errors: List[Dict[str, str]], message: Optional[str] = None):
        super().__init__(message)
        self.errors = errors

    def to_dict(self) -> Dict:
        return {"message": self.message, "errors": self.errors}


class AuthenticationFailed(WardWatchError):
    status_code = 401
    default_message = "Authentication required"


class AccessDenied(WardWatchError):
    status_code = 403
    default_message = "Access denied"


class NotFound(WardWatchError):
    status_code = 404
    default_message = "Resource not found"


class Conflict(WardWatchError):
    """Uniqueness violation. Reported as 400 to stay compatible with existing clients."""

    status_code = 400
    default_message = "Resource already exists"
