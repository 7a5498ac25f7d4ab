"""Exception hierarchy for the booking client."""

from typing import Optional

from .enums import ValidationCode


class BookingError(Exception):
    """Base class for all booking client errors."""


class DraftValidationError(BookingError):
    """Client-side input error; the user corrects the draft and retries."""

    def __init__(self, code: ValidationCode, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


class WizardClosedError(BookingError):
    """Operation attempted on a wizard that was submitted or abandoned."""


class GatewayError(BookingError):
    """A backend request did not produce a usable answer."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class RequestFailure(GatewayError):
    """Network failure, timeout, server error or unusable response."""


class ConflictError(GatewayError):
    """The table/time was taken between the availability check and submit."""


class ServerValidationError(GatewayError):
    """The server rejected the payload, or sent a record of unexpected shape."""


class SessionExpiredError(GatewayError):
    """The backend answered 401; the session has been invalidated."""
