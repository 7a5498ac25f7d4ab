"""
Reservation list support: filtering, per-status stats and status changes.
"""
from collections import Counter
from datetime import date
from typing import Iterable, List, Optional, Union

from core.logging import get_logger
from domain.enums import NotificationLevel, ReservationStatus
from domain.errors import GatewayError
from domain.models import Reservation, ReservationStats


logger = get_logger(__name__)


def compute_stats(reservations: Iterable[Reservation]) -> ReservationStats:
    """Count reservations per status."""
    counts = Counter(reservation.status for reservation in reservations)
    return ReservationStats(
        total=sum(counts.values()),
        **{status.value: counts.get(status, 0) for status in ReservationStatus},
    )


def filter_reservations(
    reservations: Iterable[Reservation],
    status: Optional[Union[ReservationStatus, str]] = None,
    date: Optional[date] = None,
    search: Optional[str] = None,
) -> List[Reservation]:
    """
    Filter reservations for the list view.

    Args:
        status: Keep only this status
        date: Keep only this reservation date
        search: Case-insensitive match on name, email, phone or table number

    Returns:
        Matching reservations, ordered by date then time
    """
    wanted_status = ReservationStatus(status) if status is not None else None
    needle = search.strip().lower() if search else ""

    results = []
    for reservation in reservations:
        if wanted_status is not None and reservation.status != wanted_status:
            continue
        if date is not None and reservation.reservation_date != date:
            continue
        if needle:
            haystack = " ".join([
                reservation.customer_name,
                reservation.customer_email,
                reservation.customer_phone,
                reservation.table_number or "",
            ]).lower()
            if needle not in haystack:
                continue
        results.append(reservation)

    return sorted(results, key=lambda r: (r.reservation_date, r.reservation_time))


class ReservationBoard:
    """State behind the reservations list: the loaded records and their stats."""

    def __init__(self, gateway, notify=None):
        self.gateway = gateway
        self.notify = notify or (lambda level, message: None)
        self.reservations: List[Reservation] = []
        self.stats = ReservationStats()

    async def refresh(self) -> List[Reservation]:
        try:
            reservations = await self.gateway.fetch_reservations()
        except GatewayError as e:
            logger.error(f"Error fetching reservations: {e}")
            self.notify(NotificationLevel.ERROR, "Failed to connect to server. Please try again.")
            raise

        self.reservations = reservations
        self.stats = compute_stats(reservations)
        logger.info(f"Loaded {len(reservations)} reservations")
        return reservations

    async def change_status(
        self,
        reservation_id: str,
        status: Union[ReservationStatus, str],
    ) -> None:
        """
        Update a reservation's status and reload the list.

        Raises:
            ValueError: unknown status
            GatewayError: the update failed (the user has been notified)
        """
        new_status = ReservationStatus(status)
        try:
            await self.gateway.update_reservation_status(reservation_id, new_status)
        except GatewayError as e:
            logger.error(f"Error updating reservation {reservation_id}: {e}")
            self.notify(NotificationLevel.ERROR, "Failed to update reservation status")
            raise

        self.notify(NotificationLevel.SUCCESS, f"Reservation status updated to {new_status.value}")
        await self.refresh()

    async def cancel(self, reservation_id: str) -> None:
        await self.change_status(reservation_id, ReservationStatus.CANCELLED)
