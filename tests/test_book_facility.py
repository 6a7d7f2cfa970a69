from __future__ import annotations

from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from app.application.exceptions import MissingFieldError, NotFoundError, SlotConflictError
from app.application.ports.file_storage import FileStoragePort
from app.application.use_cases.admit_booking import BookingAdmitter
from app.application.use_cases.book_facility import RECEIPT_FOLDER, BookFacilityUseCase
from app.application.use_cases.booking_queries import BookingQueries
from app.domain.entities.booking import BookingRequest, PayerInfo
from app.infrastructure.storage.local_file_storage import LocalFileStorage


@pytest.fixture
def storage():
    storage = MagicMock(spec=FileStoragePort)
    storage.save.return_value = "http://localhost:8000/media/facility_receipts/abc.png"
    return storage


@pytest.fixture
def use_case(validator, admitter, registry, resolver, storage) -> BookFacilityUseCase:
    return BookFacilityUseCase(
        validator=validator,
        admitter=admitter,
        facilities=registry,
        availability=resolver,
        storage=storage,
    )


def _request(booking_day, slots=("09:00 - 10:00", "10:00 - 11:00"), user_id="u1") -> BookingRequest:
    return BookingRequest(
        court_number="1",
        sport_name="Tennis",
        date=booking_day,
        time_slots=list(slots),
        payer=PayerInfo(user_id=user_id, name="Ana", email="ana@example.com"),
    )


def test_books_at_registered_price(use_case, registry, storage, booking_day):
    registry.create("1", "Tennis", "1200")

    booking = use_case.execute(_request(booking_day), receipt=b"png-bytes", receipt_filename="receipt.png")

    storage.save.assert_called_once_with(b"png-bytes", RECEIPT_FOLDER, "receipt.png")
    assert booking.receipt_url == storage.save.return_value
    assert booking.court_price == Decimal("1200")
    assert booking.total_price == Decimal("2400")


def test_receipt_required(use_case, registry, storage, booking_day):
    registry.create("1", "Tennis", "1200")
    with pytest.raises(MissingFieldError) as exc:
        use_case.execute(_request(booking_day), receipt=None)
    assert exc.value.fields == ["receipt"]
    storage.save.assert_not_called()


def test_unknown_or_inactive_court_not_found(use_case, registry, storage, booking_day):
    with pytest.raises(NotFoundError):
        use_case.execute(_request(booking_day), receipt=b"x")

    court = registry.create("1", "Tennis", "1200")
    registry.toggle_status(court.facility_id)
    with pytest.raises(NotFoundError):
        use_case.execute(_request(booking_day), receipt=b"x")
    storage.save.assert_not_called()


def test_conflict_propagates(use_case, registry, booking_day):
    registry.create("1", "Tennis", "1200")
    use_case.execute(_request(booking_day), receipt=b"x")
    with pytest.raises(SlotConflictError) as exc:
        use_case.execute(_request(booking_day, slots=("10:00 - 11:00", "11:00 - 12:00")), receipt=b"x")
    assert exc.value.slots == ["10:00 - 11:00"]


def test_queries(use_case, registry, booking_store, booking_day):
    registry.create("1", "Tennis", "1200")
    first = use_case.execute(_request(booking_day, slots=("08:00 - 09:00",)), receipt=b"x")
    second = use_case.execute(_request(booking_day, slots=("12:00 - 13:00",), user_id="u2"), receipt=b"x")
    queries = BookingQueries(store=booking_store)

    assert queries.get_booking(first.booking_id) == first
    assert {b.booking_id for b in queries.list_bookings()} == {first.booking_id, second.booking_id}
    assert [b.booking_id for b in queries.list_user_bookings("u2")] == [second.booking_id]

    with pytest.raises(NotFoundError):
        queries.get_booking("missing")
    with pytest.raises(NotFoundError):
        queries.list_user_bookings("nobody")


def test_conflicting_request_stores_no_receipt(validator, admitter, registry, resolver, booking_day, tmp_path):
    """A request for held slots is refused before its receipt reaches storage."""
    use_case = BookFacilityUseCase(
        validator=validator,
        admitter=admitter,
        facilities=registry,
        availability=resolver,
        storage=LocalFileStorage(media_dir=str(tmp_path), base_url="/media"),
    )
    registry.create("1", "Tennis", "1200")
    use_case.execute(_request(booking_day), receipt=b"first")
    receipts = tmp_path / RECEIPT_FOLDER
    assert len(list(receipts.iterdir())) == 1

    with pytest.raises(SlotConflictError):
        use_case.execute(_request(booking_day, slots=("10:00 - 11:00",)), receipt=b"second")

    assert [p.read_bytes() for p in receipts.iterdir()] == [b"first"]


def test_receipt_removed_when_admission_fails(validator, registry, resolver, storage, booking_day):
    """Losing the race after the pre-check still leaves no receipt behind."""
    admitter = MagicMock(spec=BookingAdmitter)
    admitter.admit.side_effect = SlotConflictError(["09:00 - 10:00"])
    use_case = BookFacilityUseCase(
        validator=validator,
        admitter=admitter,
        facilities=registry,
        availability=resolver,
        storage=storage,
    )
    registry.create("1", "Tennis", "1200")

    with pytest.raises(SlotConflictError):
        use_case.execute(_request(booking_day), receipt=b"x")

    storage.delete.assert_called_once_with(storage.save.return_value)


def test_qr_code_download_lookup(booking_store, make_validated, admitter, unit_price):
    qr_storage = MagicMock(spec=FileStoragePort)
    qr_storage.read.return_value = b"\x89PNG qr"
    queries = BookingQueries(store=booking_store, storage=qr_storage)
    booking = admitter.admit(make_validated(["09:00 - 10:00"]), unit_price)

    with pytest.raises(NotFoundError) as exc:
        queries.get_qr_code(booking.booking_id)
    assert exc.value.message == "QR code not found"

    booking_store.attach_qr_code(booking.booking_id, "http://localhost/media/facility_qrcodes/q.png")
    assert queries.get_qr_code(booking.booking_id) == b"\x89PNG qr"
    qr_storage.read.assert_called_once_with("http://localhost/media/facility_qrcodes/q.png")

    with pytest.raises(NotFoundError) as exc:
        queries.get_qr_code("missing")
    assert exc.value.message == "Booking not found"
