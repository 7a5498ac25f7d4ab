"""
Four-step booking wizard.

Customer Info -> Date/Time -> Table Selection -> Confirmation. The wizard
owns one ReservationDraftState, resolves availability whenever the table
step is entered, and submits the finished draft exactly once per call.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from pydantic import ValidationError

from core.logging import LogContext, get_logger
from domain.enums import AvailabilityTier, NotificationLevel, ValidationCode, WizardStep
from domain.errors import (
    ConflictError,
    DraftValidationError,
    GatewayError,
    ServerValidationError,
    WizardClosedError,
)
from domain.models import AvailabilityResult, Reservation, Table
from services.availability import AvailabilityResolver
from services.draft import ReservationDraftState, StepValidationResult, ValidationIssue


logger = get_logger(__name__)

Notify = Callable[[NotificationLevel, str], None]


def log_notification(level: NotificationLevel, message: str) -> None:
    """Default sink: write user-facing notifications to the log."""
    log_level = logging.WARNING if level in (NotificationLevel.WARNING, NotificationLevel.ERROR) else logging.INFO
    logger.log(log_level, f"[{level.value}] {message}")


@dataclass
class SubmissionResult:
    """Outcome of BookingWizard.submit()."""
    success: bool
    reservation: Optional[Reservation] = None
    error: Optional[str] = None
    code: Optional[ValidationCode] = None
    conflict: bool = False


class BookingWizard:
    """Finite-state sequencer over the four booking steps."""

    def __init__(
        self,
        gateway,
        draft: Optional[ReservationDraftState] = None,
        resolver: Optional[AvailabilityResolver] = None,
        notify: Optional[Notify] = None,
    ):
        """
        Initialize the wizard at the first step.

        Args:
            gateway: ReservationGateway used for availability and submit
            draft: Draft to own (a fresh one when omitted)
            resolver: AvailabilityResolver (built over gateway when omitted)
            notify: Sink for user-visible messages
        """
        self.gateway = gateway
        self.draft: Optional[ReservationDraftState] = draft if draft is not None else ReservationDraftState()
        self.resolver = resolver or AvailabilityResolver(gateway)
        self.notify: Notify = notify or log_notification

        self.step = WizardStep.CUSTOMER_INFO
        self.availability: Optional[AvailabilityResult] = None
        self.last_issue: Optional[ValidationIssue] = None
        self.reservation: Optional[Reservation] = None
        self.completed = False
        self.abandoned = False

        self._availability_seq = 0
        self._pending_refreshes = 0
        self._submission: Optional[asyncio.Task] = None

    @property
    def is_closed(self) -> bool:
        return self.completed or self.abandoned

    @property
    def is_checking_availability(self) -> bool:
        return self._pending_refreshes > 0

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    async def next(self) -> StepValidationResult:
        """
        Validate the current step and advance.

        Entering the table step re-resolves availability every time.
        """
        self._ensure_open()

        if self.step == WizardStep.CONFIRMATION:
            result = StepValidationResult.failure(
                self.step, ValidationCode.NO_NEXT_STEP, "Confirm the reservation to finish"
            )
            self.last_issue = result.first_issue
            return result

        result = self.draft.validate_step(self.step)
        if not result.is_valid:
            self.last_issue = result.first_issue
            logger.info(f"Step {self.step.name} blocked: {[c.value for c in result.codes]}")
            self.notify(NotificationLevel.ERROR, result.reason)
            return result

        self.last_issue = None
        self.step = WizardStep(self.step + 1)
        logger.debug(f"Advanced to step {self.step.name}")

        if self.step == WizardStep.TABLE_SELECTION:
            await self.refresh_availability()

        return result

    def back(self) -> bool:
        """Go to the previous step without validation. False at the first step."""
        self._ensure_open()
        if self.step == WizardStep.CUSTOMER_INFO:
            return False
        self.step = WizardStep(self.step - 1)
        self.last_issue = None
        return True

    # ------------------------------------------------------------------
    # Availability
    # ------------------------------------------------------------------

    async def refresh_availability(self) -> AvailabilityResult:
        """
        Resolve availability for the draft's date, time and party size.

        Only the most recently started refresh updates self.availability;
        a slower, older response is returned to its caller but not applied.
        """
        self._ensure_open()
        self._availability_seq += 1
        seq = self._availability_seq
        query = self.draft.availability_query()

        self._pending_refreshes += 1
        try:
            result = await self.resolver.resolve(query)
        finally:
            self._pending_refreshes -= 1

        if seq != self._availability_seq or self.is_closed:
            logger.debug(f"Discarding stale availability result #{seq} (latest #{self._availability_seq})")
            return result

        self.availability = result
        selected = self.draft.selected_table
        if selected is not None and selected.table_number not in result.table_numbers:
            logger.info(f"Selected table {selected.table_number} is no longer available")
            self.draft.clear_table()

        self._announce_availability(result)
        return result

    def _announce_availability(self, result: AvailabilityResult) -> None:
        count = len(result.tables)
        if result.tier == AvailabilityTier.UNAVAILABLE:
            self.notify(NotificationLevel.ERROR, "Availability could not be checked. Please try again.")
        elif result.is_empty:
            self.notify(
                NotificationLevel.WARNING,
                "No tables available for the selected time. Please try another time, date, or party size."
            )
        elif result.degraded:
            self.notify(NotificationLevel.INFO, f"Found {count} tables ({result.tier.value} fallback)")
        else:
            self.notify(NotificationLevel.SUCCESS, f"Found {count} available tables")

    def select_table(self, table: Table) -> None:
        """
        Choose a table on the table step.

        Raises:
            DraftValidationError: wrong step, or table too small for the party
        """
        self._ensure_open()
        if self.step != WizardStep.TABLE_SELECTION:
            raise DraftValidationError(ValidationCode.WRONG_STEP, "Tables are chosen on the table selection step")
        self.draft.select_table(table)

    # ------------------------------------------------------------------
    # Submit
    # ------------------------------------------------------------------

    async def submit(self) -> SubmissionResult:
        """
        Create the reservation from the finished draft.

        Never retries. A conflict sends the user back to the table step with
        fresh availability; other failures keep the wizard on confirmation.
        """
        self._ensure_open()

        if self.step != WizardStep.CONFIRMATION:
            return self._refuse(ValidationCode.WRONG_STEP, "Review the reservation before confirming")
        if self._submission is not None and not self._submission.done():
            return self._refuse(ValidationCode.SUBMIT_IN_PROGRESS, "Reservation is already being submitted")
        if self.draft.selected_table is None:
            return self._refuse(ValidationCode.NO_TABLE_SELECTED, "Please select a table")

        try:
            payload = self.draft.to_payload()
        except ValidationError as e:
            logger.warning(f"Draft cannot be submitted: {e.error_count()} invalid fields")
            return self._refuse(ValidationCode.MISSING_FIELD, "Reservation details are incomplete")

        self._submission = asyncio.ensure_future(self._submit(payload))
        return await asyncio.shield(self._submission)

    async def _submit(self, payload) -> SubmissionResult:
        with LogContext(
            __name__,
            table_number=payload.table_number,
            reservation_date=payload.reservation_date.isoformat(),
            reservation_time=payload.reservation_time,
            party_size=payload.party_size,
        ) as ctx:
            try:
                reservation = await self.gateway.create_reservation(payload)
            except ConflictError as e:
                ctx.log("warning", f"Reservation conflict: {e.message}")
                return await self._handle_conflict(e)
            except ServerValidationError as e:
                ctx.log("warning", f"Reservation rejected: {e.message}")
                self.notify(NotificationLevel.ERROR, e.message)
                return SubmissionResult(success=False, error=e.message)
            except GatewayError as e:
                ctx.log("error", f"Failed to create reservation: {e.message}")
                self.notify(NotificationLevel.ERROR, f"Failed to create reservation: {e.message}")
                return SubmissionResult(success=False, error=e.message)

            ctx.log("info", f"Reservation {reservation.id} created", reservation_id=reservation.id)

        self.reservation = reservation
        self.completed = True
        self.notify(NotificationLevel.SUCCESS, "Reservation created successfully!")
        return SubmissionResult(success=True, reservation=reservation)

    async def _handle_conflict(self, error: ConflictError) -> SubmissionResult:
        message = f"{error.message}. Please choose another table."
        self.notify(NotificationLevel.ERROR, message)
        if not self.abandoned:
            self.draft.clear_table()
            self.step = WizardStep.TABLE_SELECTION
            await self.refresh_availability()
        return SubmissionResult(success=False, error=error.message, conflict=True)

    def _refuse(self, code: ValidationCode, message: str) -> SubmissionResult:
        self.last_issue = ValidationIssue(code=code, message=message)
        self.notify(NotificationLevel.ERROR, message)
        return SubmissionResult(success=False, error=message, code=code)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def abandon(self) -> Optional[SubmissionResult]:
        """
        Leave the wizard and discard the draft.

        An in-flight submission is awaited first so its outcome still
        reaches the notification sink.
        """
        if self.abandoned:
            return None
        self.abandoned = True
        outcome = None
        if self._submission is not None and not self._submission.done():
            logger.info("Wizard abandoned during submit; waiting for the outcome")
            outcome = await self._submission
        self.draft = None
        return outcome

    def _ensure_open(self) -> None:
        if self.completed:
            raise WizardClosedError("Reservation already submitted")
        if self.abandoned:
            raise WizardClosedError("Booking wizard was abandoned")
