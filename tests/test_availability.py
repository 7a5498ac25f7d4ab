"""
Tests for tiered availability resolution.
"""

import pytest
from datetime import date

from domain.enums import AvailabilityTier, ReservationStatus, TableStatus
from domain.errors import RequestFailure, ServerValidationError
from domain.models import AvailabilityQuery
from services.availability import (
    DEMO_TABLES,
    AvailabilityResolver,
    filter_by_capacity,
    filter_free_tables,
)

from tests.factories import FakeGateway, make_reservation, make_table


JUNE_FIRST = date(2024, 6, 1)


@pytest.fixture
def query():
    return AvailabilityQuery(date=JUNE_FIRST, time="19:00", party_size=4)


@pytest.fixture
def resolver(gateway):
    return AvailabilityResolver(gateway, use_demo_tables=False)


# ============================================================================
# Primary tier
# ============================================================================

class TestPrimaryTier:
    """Server-side availability is trusted verbatim."""

    @pytest.mark.asyncio
    async def test_scenario_party_of_four(self, resolver, query):
        result = await resolver.resolve(query)
        assert result.tier == AvailabilityTier.PRIMARY
        assert result.table_numbers == ["T02", "T03"]
        assert result.degraded is False

    @pytest.mark.asyncio
    async def test_result_returned_verbatim(self, gateway, resolver, query):
        gateway.available = [make_table("T09", 2)]
        result = await resolver.resolve(query)
        assert result.table_numbers == ["T09"]

    @pytest.mark.asyncio
    async def test_empty_result_does_not_fall_through(self, gateway, resolver, query):
        gateway.available = []
        result = await resolver.resolve(query)
        assert result.tier == AvailabilityTier.PRIMARY
        assert result.is_empty
        assert gateway.tables_calls == 0
        assert gateway.reservations_calls == []


# ============================================================================
# Secondary tier
# ============================================================================

class TestSecondaryTier:
    """Local filtering against the day's reservations."""

    @pytest.mark.asyncio
    async def test_scenario_without_conflicts(self, failing_primary_gateway, query):
        resolver = AvailabilityResolver(failing_primary_gateway, use_demo_tables=False)
        result = await resolver.resolve(query)
        assert result.tier == AvailabilityTier.SECONDARY
        assert result.table_numbers == ["T02", "T03"]
        assert failing_primary_gateway.reservations_calls == [{"date": JUNE_FIRST, "status": None}]

    @pytest.mark.asyncio
    async def test_excludes_table_booked_at_same_time(self, failing_primary_gateway, query):
        failing_primary_gateway.reservations = [make_reservation("T02", JUNE_FIRST, "19:00")]
        resolver = AvailabilityResolver(failing_primary_gateway)
        result = await resolver.resolve(query)
        assert result.table_numbers == ["T03"]

    @pytest.mark.asyncio
    async def test_booking_at_other_time_does_not_block(self, failing_primary_gateway, query):
        failing_primary_gateway.reservations = [make_reservation("T02", JUNE_FIRST, "18:00")]
        resolver = AvailabilityResolver(failing_primary_gateway)
        result = await resolver.resolve(query)
        assert result.table_numbers == ["T02", "T03"]

    @pytest.mark.asyncio
    async def test_cancelled_booking_does_not_block(self, failing_primary_gateway, query):
        failing_primary_gateway.reservations = [
            make_reservation("T02", JUNE_FIRST, "19:00", status=ReservationStatus.CANCELLED)
        ]
        resolver = AvailabilityResolver(failing_primary_gateway)
        result = await resolver.resolve(query)
        assert "T02" in result.table_numbers

    @pytest.mark.asyncio
    async def test_excludes_unavailable_status(self, failing_primary_gateway, query):
        failing_primary_gateway.tables.append(make_table("T04", 8, status=TableStatus.MAINTENANCE))
        resolver = AvailabilityResolver(failing_primary_gateway)
        result = await resolver.resolve(query)
        assert "T04" not in result.table_numbers

    @pytest.mark.asyncio
    async def test_malformed_primary_response_falls_back(self, gateway, query):
        gateway.available_error = ServerValidationError("Malformed Table data from server")
        result = await AvailabilityResolver(gateway).resolve(query)
        assert result.tier == AvailabilityTier.SECONDARY


# ============================================================================
# Tertiary tier
# ============================================================================

class TestTertiaryTier:
    """Capacity-only fallback."""

    @pytest.mark.asyncio
    async def test_includes_booked_tables(self, failing_primary_gateway, query):
        failing_primary_gateway.reservations = [make_reservation("T02", JUNE_FIRST, "19:00")]
        failing_primary_gateway.reservations_error = RequestFailure("reservations down", 500)
        resolver = AvailabilityResolver(failing_primary_gateway)

        result = await resolver.resolve(query)

        assert result.tier == AvailabilityTier.TERTIARY
        assert result.table_numbers == ["T02", "T03"]
        assert result.degraded is True

    @pytest.mark.asyncio
    async def test_uses_cached_tables_when_table_list_fails(self, gateway, query):
        resolver = AvailabilityResolver(gateway, use_demo_tables=False)
        gateway.available_error = RequestFailure("down")
        gateway.reservations_error = RequestFailure("down")
        await resolver.resolve(query)  # populates the cache

        gateway.tables_error = RequestFailure("down")
        result = await resolver.resolve(query)

        assert result.tier == AvailabilityTier.TERTIARY
        assert result.table_numbers == ["T02", "T03"]

    @pytest.mark.asyncio
    async def test_everything_down_yields_empty_unavailable(self, query):
        gateway = FakeGateway()
        gateway.available_error = RequestFailure("down")
        gateway.tables_error = RequestFailure("down")
        resolver = AvailabilityResolver(gateway, use_demo_tables=False)

        result = await resolver.resolve(query)

        assert result.tier == AvailabilityTier.UNAVAILABLE
        assert result.tables == []

    @pytest.mark.asyncio
    async def test_everything_down_with_demo_tables(self, query):
        gateway = FakeGateway()
        gateway.available_error = RequestFailure("down")
        gateway.tables_error = RequestFailure("down")
        resolver = AvailabilityResolver(gateway, use_demo_tables=True)

        result = await resolver.resolve(query)

        assert result.tier == AvailabilityTier.TERTIARY
        assert result.table_numbers == [t.table_number for t in DEMO_TABLES if t.capacity >= 4]

    @pytest.mark.asyncio
    async def test_each_tier_tried_once(self, query):
        gateway = FakeGateway([make_table("T01", 4)])
        gateway.available_error = RequestFailure("down")
        gateway.reservations_error = RequestFailure("down")
        await AvailabilityResolver(gateway).resolve(query)
        assert len(gateway.available_calls) == 1
        assert gateway.tables_calls == 1
        assert len(gateway.reservations_calls) == 1


# ============================================================================
# Filters
# ============================================================================

class TestFilters:
    """Pure filter helpers."""

    def test_filter_by_capacity(self, tables):
        assert [t.table_number for t in filter_by_capacity(tables, 5)] == ["T03"]

    def test_filter_free_tables_ignores_reservation_without_table(self, tables, query):
        reservation = make_reservation("T02", JUNE_FIRST, "19:00").model_copy(update={"table_number": None})
        free = filter_free_tables(tables, [reservation], query)
        assert [t.table_number for t in free] == ["T02", "T03"]
