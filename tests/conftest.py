"""Pytest configuration and fixtures for booking client tests."""
import pytest
from datetime import date, timedelta

from domain.errors import RequestFailure
from services.availability import AvailabilityResolver
from services.booking_wizard import BookingWizard
from services.draft import ReservationDraftState
from tests.factories import FakeGateway, make_table


@pytest.fixture(scope="function")
def tables():
    """T01 seats 2, T02 seats 4, T03 seats 6."""
    return [make_table("T01", 2), make_table("T02", 4), make_table("T03", 6)]


@pytest.fixture(scope="function")
def gateway(tables):
    return FakeGateway(tables)


@pytest.fixture(scope="function")
def failing_primary_gateway(gateway):
    gateway.available_error = RequestFailure("availability endpoint down", 503)
    return gateway


@pytest.fixture(scope="function")
def tomorrow():
    return date.today() + timedelta(days=1)


@pytest.fixture(scope="function")
def valid_draft(tomorrow):
    """Draft that passes steps 0 and 1."""
    return ReservationDraftState(
        customer_name="John Doe",
        customer_email="john@example.com",
        customer_phone="5551234567",
        reservation_date=tomorrow.isoformat(),
        reservation_time="19:00",
        party_size=4,
        special_requests="Window seat preferred",
    )


@pytest.fixture(scope="function")
def notifications():
    """Collected (level, message) pairs from the notification sink."""
    return []


@pytest.fixture(scope="function")
def wizard(gateway, valid_draft, notifications):
    return BookingWizard(
        gateway,
        draft=valid_draft,
        resolver=AvailabilityResolver(gateway, use_demo_tables=False),
        notify=lambda level, message: notifications.append((level, message)),
    )
