from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from app.application.use_cases.admit_booking import BookingAdmitter
from app.application.use_cases.availability import AvailabilityResolver
from app.application.use_cases.facilities import FacilityRegistry
from app.application.use_cases.validate_booking import BookingValidator, ValidatedBooking
from app.domain.entities.booking import PayerInfo
from app.domain.entities.time_slot import SlotCatalog
from app.infrastructure.notifications.mock_notifier import MockNotifier
from app.infrastructure.store.memory_store import MemoryBookingStore, MemoryFacilityStore

FIXED_NOW = datetime(2026, 10, 18, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def catalog() -> SlotCatalog:
    return SlotCatalog()


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def today() -> date:
    return FIXED_NOW.date()


@pytest.fixture
def booking_day(today: date) -> date:
    return today + timedelta(days=2)


@pytest.fixture
def validator(catalog: SlotCatalog) -> BookingValidator:
    return BookingValidator(catalog=catalog, clock=lambda: FIXED_NOW)


@pytest.fixture
def booking_store() -> MemoryBookingStore:
    return MemoryBookingStore()


@pytest.fixture
def facility_store() -> MemoryFacilityStore:
    return MemoryFacilityStore()


@pytest.fixture
def registry(facility_store: MemoryFacilityStore) -> FacilityRegistry:
    return FacilityRegistry(store=facility_store)


@pytest.fixture
def notifier() -> MockNotifier:
    return MockNotifier()


@pytest.fixture
def admitter(booking_store: MemoryBookingStore, notifier: MockNotifier) -> BookingAdmitter:
    return BookingAdmitter(store=booking_store, notifier=notifier)


@pytest.fixture
def resolver(booking_store, facility_store, catalog) -> AvailabilityResolver:
    return AvailabilityResolver(bookings=booking_store, facilities=facility_store, catalog=catalog)


@pytest.fixture
def make_validated(booking_day: date):
    def _make(slots, court="C1", sport="Tennis", day=None, email="ana@example.com", user_id="u1"):
        return ValidatedBooking(
            court_number=court,
            sport_name=sport,
            day=day or booking_day,
            time_slots=tuple(slots),
            payer=PayerInfo(user_id=user_id, name="Ana", email=email, phone_number="555-0100"),
            receipt_url="http://localhost/media/facility_receipts/r.png",
        )

    return _make


@pytest.fixture
def unit_price() -> Decimal:
    return Decimal("1500")
