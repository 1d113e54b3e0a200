"""
Domain failures raised by services and dependencies.

Each error carries the HTTP status it maps to; the translation into a
response body happens once, in the exception handlers registered by
``hms.main``.
"""
from typing import Optional


class HMSError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(HMSError):
    status_code = 401
    default_message = "Unauthorized"


class Forbidden(HMSError):
    status_code = 403
    default_message = "Forbidden: insufficient role"


class InvalidInput(HMSError):
    status_code = 400
    default_message = "Invalid input"


class InvalidReference(HMSError):
    """A referenced entity id does not exist."""
    status_code = 400
    default_message = "Referenced entity not found"


class NotFound(HMSError):
    status_code = 404
    default_message = "Not found"


class Conflict(HMSError):
    status_code = 409
    default_message = "Conflict"


class InsufficientStock(Conflict):
    default_message = "Insufficient stock"
