"""Domain models using Pydantic v2 for the restaurant booking client."""

from datetime import date
from typing import Any, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from core.utils_datetime import parse_iso_date
from .enums import AvailabilityTier, ReservationStatus, TableLocation, TableStatus


class WireModel(BaseModel):
    """Base for records exchanged with the backend (camelCase JSON)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        coerce_numbers_to_str=True,
        extra="ignore",
    )

    def to_wire(self) -> dict[str, Any]:
        """Serialize to the backend's JSON shape."""
        return self.model_dump(mode="json", by_alias=True)


class Table(WireModel):
    """A table as owned by the backend; read-only on the client."""

    id: str = Field(..., validation_alias=AliasChoices("id", "_id"))
    table_number: str = Field(..., min_length=1)
    capacity: int = Field(..., gt=0)
    location: TableLocation = TableLocation.INDOORS
    status: TableStatus = TableStatus.AVAILABLE

    model_config = ConfigDict(frozen=True)

    def can_seat(self, party_size: int) -> bool:
        return self.capacity >= party_size


class TableCreate(WireModel):
    """Payload for adding a table."""

    table_number: str = Field(..., min_length=1)
    capacity: int = Field(..., gt=0)
    location: TableLocation = TableLocation.INDOORS
    status: TableStatus = TableStatus.AVAILABLE


class ReservationBase(WireModel):
    """Fields shared by reservation payloads and records."""

    customer_name: str = Field(..., min_length=1)
    customer_email: str = ""
    customer_phone: str = ""
    reservation_date: date
    reservation_time: str
    party_size: int = Field(..., ge=1)
    special_requests: str = ""

    @field_validator("reservation_date", mode="before")
    @classmethod
    def parse_reservation_date(cls, v: Any) -> date:
        """Accept ISO dates as well as ISO timestamps."""
        parsed = parse_iso_date(v)
        if parsed is None:
            raise ValueError(f"reservationDate is not an ISO date: {v!r}")
        return parsed

    @field_validator("special_requests", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v


class ReservationCreate(ReservationBase):
    """Body of POST /api/reservations. The server assigns the id."""

    table_number: str = Field(..., min_length=1)
    status: Literal["pending"] = "pending"


class Reservation(ReservationBase):
    """A reservation record returned by the backend."""

    id: str = Field(..., validation_alias=AliasChoices("id", "_id"))
    table_number: Optional[str] = None
    status: ReservationStatus = ReservationStatus.PENDING


class AvailabilityQuery(BaseModel):
    """Desired date, time slot and party size. Pure value."""

    date: date
    time: str
    party_size: int = Field(..., ge=1)

    model_config = ConfigDict(frozen=True)

    def to_params(self) -> dict[str, Any]:
        """Query-string parameters for GET /api/tables/available."""
        return {
            "date": self.date.isoformat(),
            "time": self.time,
            "partySize": self.party_size,
        }


class AvailabilityResult(BaseModel):
    """Tables able to host a query, plus the tier that found them."""

    query: AvailabilityQuery
    tier: AvailabilityTier
    tables: List[Table] = Field(default_factory=list)

    @property
    def degraded(self) -> bool:
        """True when the answer did not come from the server-side check."""
        return self.tier != AvailabilityTier.PRIMARY

    @property
    def is_empty(self) -> bool:
        return not self.tables

    @property
    def table_numbers(self) -> List[str]:
        return [table.table_number for table in self.tables]


class ReservationStats(BaseModel):
    """Reservation counts per status."""

    total: int = 0
    pending: int = 0
    confirmed: int = 0
    seated: int = 0
    completed: int = 0
    cancelled: int = 0


class UserProfile(BaseModel):
    """Profile of the signed-in user, used to pre-fill the booking form."""

    username: str = ""
    email: str = ""
    phone: str = ""

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)


class ApiResponse(BaseModel):
    """The backend's response envelope: {success, data, message}."""

    success: bool = False
    data: Any = None
    message: Optional[str] = None

    model_config = ConfigDict(extra="ignore")
