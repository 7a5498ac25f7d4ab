"""
Table availability resolution with tiered degradation.

Tiers, first success wins; a tier runs only if the previous one raised:
  1. primary   - server-side availability endpoint, trusted verbatim
  2. secondary - all tables filtered locally against the day's reservations
  3. tertiary  - capacity-only filter over whatever table list is known
"""
from typing import Iterable, List, Optional

from core.logging import get_logger
from core.settings import settings
from domain.enums import AvailabilityTier, ReservationStatus, TableLocation, TableStatus
from domain.errors import GatewayError
from domain.models import AvailabilityQuery, AvailabilityResult, Reservation, Table


logger = get_logger(__name__)

# Reservations in these states no longer hold their table
NON_BLOCKING_STATUSES = {ReservationStatus.CANCELLED, ReservationStatus.COMPLETED}

DEMO_TABLES: List[Table] = [
    Table(id="1", table_number="T01", capacity=2, location=TableLocation.INDOORS),
    Table(id="2", table_number="T02", capacity=4, location=TableLocation.INDOORS),
    Table(id="3", table_number="T03", capacity=6, location=TableLocation.OUTDOORS),
    Table(id="4", table_number="T04", capacity=2, location=TableLocation.BALCONY),
    Table(id="5", table_number="T05", capacity=8, location=TableLocation.PRIVATE),
    Table(id="6", table_number="T06", capacity=4, location=TableLocation.INDOORS),
    Table(id="7", table_number="T07", capacity=2, location=TableLocation.INDOORS),
    Table(id="8", table_number="T08", capacity=4, location=TableLocation.OUTDOORS),
]


def filter_free_tables(
    tables: Iterable[Table],
    reservations: Iterable[Reservation],
    query: AvailabilityQuery,
) -> List[Table]:
    """
    Tables that fit the party, are available, and are not booked for the slot.

    Args:
        tables: Every table of the restaurant
        reservations: Reservations for the query's date
        query: Desired date, time and party size

    Returns:
        Free tables in their original order
    """
    booked = {
        reservation.table_number
        for reservation in reservations
        if reservation.reservation_time == query.time
        and reservation.status not in NON_BLOCKING_STATUSES
        and reservation.table_number
    }
    return [
        table for table in tables
        if table.can_seat(query.party_size)
        and table.status == TableStatus.AVAILABLE
        and table.table_number not in booked
    ]


def filter_by_capacity(tables: Iterable[Table], party_size: int) -> List[Table]:
    """Tables large enough for the party, ignoring status and bookings."""
    return [table for table in tables if table.can_seat(party_size)]


class AvailabilityResolver:
    """Resolves an AvailabilityQuery without ever raising a gateway error."""

    def __init__(self, gateway, use_demo_tables: Optional[bool] = None):
        """
        Initialize the resolver.

        Args:
            gateway: ReservationGateway (or any object with the same coroutines)
            use_demo_tables: Fall back to DEMO_TABLES when no table list is
                known (defaults to settings.use_demo_tables)
        """
        self.gateway = gateway
        self.use_demo_tables = settings.use_demo_tables if use_demo_tables is None else use_demo_tables
        self._table_cache: Optional[List[Table]] = None

    @property
    def cached_tables(self) -> Optional[List[Table]]:
        """Last table list fetched successfully, if any."""
        return self._table_cache

    async def resolve(self, query: AvailabilityQuery) -> AvailabilityResult:
        """
        Find tables able to host the query.

        Returns:
            AvailabilityResult tagged with the tier that produced it
        """
        try:
            tables = await self.gateway.fetch_available_tables(query)
        except GatewayError as e:
            logger.warning(
                f"Availability endpoint failed, falling back to local filtering: {e}",
                extra={"tier": AvailabilityTier.SECONDARY.value, "query": query.to_params()}
            )
        else:
            logger.info(
                f"Found {len(tables)} available tables for {query.date} {query.time}",
                extra={"tier": AvailabilityTier.PRIMARY.value, "query": query.to_params()}
            )
            return AvailabilityResult(query=query, tier=AvailabilityTier.PRIMARY, tables=tables)

        all_tables: Optional[List[Table]] = None
        try:
            all_tables = await self.gateway.fetch_all_tables()
            self._table_cache = list(all_tables)
            reservations = await self.gateway.fetch_reservations(date=query.date)
        except GatewayError as e:
            logger.warning(
                f"Local availability filtering failed, showing tables by capacity only: {e}",
                extra={"tier": AvailabilityTier.TERTIARY.value, "query": query.to_params()}
            )
        else:
            free = filter_free_tables(all_tables, reservations, query)
            logger.info(
                f"Found {len(free)} tables (fallback mode)",
                extra={"tier": AvailabilityTier.SECONDARY.value, "query": query.to_params()}
            )
            return AvailabilityResult(query=query, tier=AvailabilityTier.SECONDARY, tables=free)

        known_tables = self._known_tables(all_tables)
        if known_tables is None:
            logger.error(
                "No table list available; cannot resolve availability",
                extra={"tier": AvailabilityTier.UNAVAILABLE.value, "query": query.to_params()}
            )
            return AvailabilityResult(query=query, tier=AvailabilityTier.UNAVAILABLE, tables=[])

        tables = filter_by_capacity(known_tables, query.party_size)
        logger.info(
            f"Showing {len(tables)} tables by capacity only",
            extra={"tier": AvailabilityTier.TERTIARY.value, "query": query.to_params()}
        )
        return AvailabilityResult(query=query, tier=AvailabilityTier.TERTIARY, tables=tables)

    def _known_tables(self, fetched: Optional[List[Table]]) -> Optional[List[Table]]:
        if fetched is not None:
            return fetched
        if self._table_cache is not None:
            logger.info("Using cached table list")
            return self._table_cache
        if self.use_demo_tables:
            logger.info("Using demo tables (backend not available)")
            return list(DEMO_TABLES)
        return None
