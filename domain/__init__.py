"""Domain layer for the restaurant booking client."""

from .enums import (
    ReservationStatus,
    TableStatus,
    TableLocation,
    TimeSlot,
    WizardStep,
    AvailabilityTier,
    ValidationCode,
    NotificationLevel,
)
from .errors import (
    BookingError,
    DraftValidationError,
    WizardClosedError,
    GatewayError,
    RequestFailure,
    ConflictError,
    ServerValidationError,
    SessionExpiredError,
)
from .models import (
    Table,
    TableCreate,
    ReservationCreate,
    Reservation,
    AvailabilityQuery,
    AvailabilityResult,
    ReservationStats,
    UserProfile,
    ApiResponse,
)

__all__ = [
    # Enums
    "ReservationStatus",
    "TableStatus",
    "TableLocation",
    "TimeSlot",
    "WizardStep",
    "AvailabilityTier",
    "ValidationCode",
    "NotificationLevel",
    # Errors
    "BookingError",
    "DraftValidationError",
    "WizardClosedError",
    "GatewayError",
    "RequestFailure",
    "ConflictError",
    "ServerValidationError",
    "SessionExpiredError",
    # Models
    "Table",
    "TableCreate",
    "ReservationCreate",
    "Reservation",
    "AvailabilityQuery",
    "AvailabilityResult",
    "ReservationStats",
    "UserProfile",
    "ApiResponse",
]
