"""Domain enums for the restaurant booking client."""

from enum import Enum, IntEnum


class ReservationStatus(str, Enum):
    """Reservation status enumeration."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    SEATED = "seated"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class TableStatus(str, Enum):
    """Table status enumeration."""

    AVAILABLE = "available"
    OCCUPIED = "occupied"
    RESERVED = "reserved"
    MAINTENANCE = "maintenance"


class TableLocation(str, Enum):
    """Where a table stands."""

    INDOORS = "indoors"
    OUTDOORS = "outdoors"
    BALCONY = "balcony"
    PRIVATE = "private"


class TimeSlot(str, Enum):
    """Bookable hourly time slots."""

    SLOT_10 = "10:00"
    SLOT_11 = "11:00"
    SLOT_12 = "12:00"
    SLOT_13 = "13:00"
    SLOT_14 = "14:00"
    SLOT_15 = "15:00"
    SLOT_16 = "16:00"
    SLOT_17 = "17:00"
    SLOT_18 = "18:00"
    SLOT_19 = "19:00"
    SLOT_20 = "20:00"
    SLOT_21 = "21:00"
    SLOT_22 = "22:00"

    @classmethod
    def values(cls) -> list[str]:
        return [slot.value for slot in cls]


class WizardStep(IntEnum):
    """Ordered steps of the booking wizard."""

    CUSTOMER_INFO = 0
    DATE_TIME = 1
    TABLE_SELECTION = 2
    CONFIRMATION = 3


class AvailabilityTier(str, Enum):
    """Which strategy produced an availability answer."""

    PRIMARY = "primary"          # server-side availability endpoint
    SECONDARY = "secondary"      # local filter over tables + reservations
    TERTIARY = "tertiary"        # capacity only
    UNAVAILABLE = "unavailable"  # no table list at all


class ValidationCode(str, Enum):
    """Reasons a wizard step or submit can be refused."""

    MISSING_FIELD = "missing_field"
    INVALID_EMAIL = "invalid_email"
    INVALID_PHONE = "invalid_phone"
    INVALID_DATE = "invalid_date"
    PAST_DATE = "past_date"
    INVALID_TIME = "invalid_time"
    INVALID_PARTY_SIZE = "invalid_party_size"
    NO_TABLE_SELECTED = "no_table_selected"
    TABLE_TOO_SMALL = "table_too_small"
    NO_NEXT_STEP = "no_next_step"
    WRONG_STEP = "wrong_step"
    SUBMIT_IN_PROGRESS = "submit_in_progress"


class NotificationLevel(str, Enum):
    """Severity passed to the notification sink."""

    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
