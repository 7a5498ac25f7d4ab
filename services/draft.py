"""
In-progress reservation draft with step-gating validation.
Holds everything the booking wizard collects; performs no I/O.
"""

import re
from dataclasses import dataclass, field, fields
from typing import Any, List, Optional

from core.logging import get_logger
from core.settings import settings
from core.utils_datetime import get_today, parse_iso_date
from domain.enums import TimeSlot, ValidationCode, WizardStep
from domain.errors import DraftValidationError
from domain.models import AvailabilityQuery, ReservationCreate, Table, UserProfile


logger = get_logger(__name__)

EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')


@dataclass
class ValidationIssue:
    """A single reason a step cannot be left."""
    code: ValidationCode
    message: str
    field: Optional[str] = None


@dataclass
class StepValidationResult:
    """Result of validating one wizard step."""
    step: int
    is_valid: bool = True
    issues: List[ValidationIssue] = field(default_factory=list)

    def add_issue(self, code: ValidationCode, message: str, field_name: Optional[str] = None):
        """Add an issue and mark as invalid."""
        self.issues.append(ValidationIssue(code=code, message=message, field=field_name))
        self.is_valid = False

    @property
    def first_issue(self) -> Optional[ValidationIssue]:
        return self.issues[0] if self.issues else None

    @property
    def reason(self) -> Optional[str]:
        """Human-readable reason for the first failure."""
        return self.issues[0].message if self.issues else None

    @property
    def codes(self) -> List[ValidationCode]:
        return [issue.code for issue in self.issues]

    @classmethod
    def failure(cls, step: int, code: ValidationCode, message: str) -> "StepValidationResult":
        result = cls(step=step)
        result.add_issue(code, message)
        return result


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def _default_date() -> str:
    return get_today().isoformat()


@dataclass
class ReservationDraftState:
    """
    Mutable holder for the booking form.

    Exactly one wizard owns a draft. The selected table is set only through
    select_table(), which keeps selected_table.capacity >= party_size.
    """
    customer_name: str = ""
    customer_email: str = ""
    customer_phone: str = ""
    reservation_date: str = field(default_factory=_default_date)
    reservation_time: str = field(default_factory=lambda: settings.default_reservation_time)
    party_size: int = field(default_factory=lambda: settings.default_party_size)
    special_requests: str = ""
    selected_table: Optional[Table] = None

    @classmethod
    def from_profile(cls, profile: Optional[UserProfile]) -> "ReservationDraftState":
        """Create a draft pre-filled with the signed-in user's contact details."""
        draft = cls()
        if profile is not None:
            draft.customer_name = profile.username
            draft.customer_email = profile.email
            draft.customer_phone = profile.phone
        return draft

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def update_field(self, name: str, value: Any) -> None:
        """
        Set one form field.

        Raises:
            AttributeError: if name is not a draft field. Use select_table()
                for the table.
        """
        if name == "selected_table" or name not in _FIELD_NAMES:
            raise AttributeError(f"{type(self).__name__} has no editable field {name!r}")

        setattr(self, name, value)

        if (
            name == "party_size"
            and self.selected_table is not None
            and not self.selected_table.can_seat(self._party_size_or_zero())
        ):
            logger.debug(
                "Clearing table %s: too small for party of %s",
                self.selected_table.table_number, value
            )
            self.selected_table = None

    def select_table(self, table: Table) -> None:
        """
        Select a table for the reservation.

        Raises:
            DraftValidationError: if the table cannot seat the party.
        """
        party_size = self._party_size_or_zero()
        if not table.can_seat(party_size):
            raise DraftValidationError(
                ValidationCode.TABLE_TOO_SMALL,
                f"Table {table.table_number} seats {table.capacity}, party is {party_size}"
            )
        self.selected_table = table

    def clear_table(self) -> None:
        self.selected_table = None

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate_step(self, step: int) -> StepValidationResult:
        """
        Validate the fields gated by a wizard step.

        Args:
            step: Step index 0-3

        Returns:
            StepValidationResult; invalid results carry a human-readable reason
        """
        try:
            wizard_step = WizardStep(step)
        except ValueError:
            raise ValueError(f"Unknown wizard step: {step}") from None

        if wizard_step == WizardStep.CUSTOMER_INFO:
            return self._validate_customer_info()
        if wizard_step == WizardStep.DATE_TIME:
            return self._validate_date_time()
        if wizard_step == WizardStep.TABLE_SELECTION:
            return self._validate_table_selection()
        return StepValidationResult(step=step)

    def _validate_customer_info(self) -> StepValidationResult:
        result = StepValidationResult(step=WizardStep.CUSTOMER_INFO)

        name = _text(self.customer_name)
        email = _text(self.customer_email)
        phone = _text(self.customer_phone)

        if not name or not email or not phone:
            result.add_issue(
                ValidationCode.MISSING_FIELD,
                "Please fill in all customer information"
            )
            return result

        if not EMAIL_PATTERN.match(email):
            result.add_issue(
                ValidationCode.INVALID_EMAIL,
                "Please enter a valid email address",
                "customer_email"
            )

        if len(phone) < settings.min_phone_length:
            result.add_issue(
                ValidationCode.INVALID_PHONE,
                "Please enter a valid phone number",
                "customer_phone"
            )

        return result

    def _validate_date_time(self) -> StepValidationResult:
        result = StepValidationResult(step=WizardStep.DATE_TIME)

        if not self.reservation_date or not self.reservation_time:
            result.add_issue(ValidationCode.MISSING_FIELD, "Please select date and time")
            return result

        reservation_date = parse_iso_date(self.reservation_date)
        if reservation_date is None:
            result.add_issue(
                ValidationCode.INVALID_DATE,
                f"Invalid date: {self.reservation_date}",
                "reservation_date"
            )
        elif reservation_date < get_today():
            result.add_issue(
                ValidationCode.PAST_DATE,
                "Cannot book for past dates",
                "reservation_date"
            )

        if self.reservation_time not in TimeSlot.values():
            result.add_issue(
                ValidationCode.INVALID_TIME,
                f"Please choose a time between {TimeSlot.SLOT_10.value} and {TimeSlot.SLOT_22.value} on the hour",
                "reservation_time"
            )

        party_size = self._party_size_or_zero()
        if not 1 <= party_size <= settings.max_party_size:
            result.add_issue(
                ValidationCode.INVALID_PARTY_SIZE,
                f"Party size must be between 1 and {settings.max_party_size}",
                "party_size"
            )

        return result

    def _validate_table_selection(self) -> StepValidationResult:
        result = StepValidationResult(step=WizardStep.TABLE_SELECTION)
        if self.selected_table is None:
            result.add_issue(ValidationCode.NO_TABLE_SELECTED, "Please select a table", "selected_table")
        return result

    # ------------------------------------------------------------------
    # Projections
    # ------------------------------------------------------------------

    def availability_query(self) -> AvailabilityQuery:
        """
        Build the availability query for the current date, time and party size.

        Raises:
            DraftValidationError: if the date or party size is unusable
        """
        reservation_date = parse_iso_date(self.reservation_date)
        if reservation_date is None:
            raise DraftValidationError(ValidationCode.INVALID_DATE, f"Invalid date: {self.reservation_date}")
        party_size = self._party_size_or_zero()
        if party_size < 1:
            raise DraftValidationError(
                ValidationCode.INVALID_PARTY_SIZE,
                f"Party size must be between 1 and {settings.max_party_size}"
            )
        return AvailabilityQuery(
            date=reservation_date,
            time=_text(self.reservation_time),
            party_size=party_size,
        )

    def to_payload(self) -> ReservationCreate:
        """
        Build the create-reservation body.

        Raises:
            DraftValidationError: if no table is selected
        """
        if self.selected_table is None:
            raise DraftValidationError(ValidationCode.NO_TABLE_SELECTED, "Please select a table")

        return ReservationCreate(
            customer_name=self.customer_name,
            customer_email=self.customer_email,
            customer_phone=self.customer_phone,
            table_number=self.selected_table.table_number,
            reservation_date=self.reservation_date,
            reservation_time=self.reservation_time,
            party_size=self.party_size,
            special_requests=self.special_requests or "",
        )

    def _party_size_or_zero(self) -> int:
        try:
            return int(self.party_size)
        except (TypeError, ValueError):
            return 0


_FIELD_NAMES = frozenset(f.name for f in fields(ReservationDraftState))
