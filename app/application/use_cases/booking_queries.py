from __future__ import annotations

from datetime import datetime, timezone

from app.application.exceptions import NotFoundError
from app.application.ports.booking_store import BookingStorePort
from app.application.ports.file_storage import FileStoragePort
from app.domain.entities.booking import Booking

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


class BookingQueries:
    def __init__(self, store: BookingStorePort, storage: FileStoragePort | None = None) -> None:
        self._store = store
        self._storage = storage

    def get_booking(self, booking_id: str) -> Booking:
        booking = self._store.get(booking_id)
        if booking is None:
            raise NotFoundError("Booking", booking_id)
        return booking

    def list_bookings(self) -> list[Booking]:
        return _newest_first(self._store.list_bookings())

    def list_user_bookings(self, user_id: str) -> list[Booking]:
        bookings = self._store.list_bookings(user_id=user_id)
        if not bookings:
            raise NotFoundError("Bookings for user", user_id)
        return _newest_first(bookings)

    def get_qr_code(self, booking_id: str) -> bytes:
        """PNG bytes of the booking's QR code."""
        booking = self.get_booking(booking_id)
        content = None
        if booking.qr_code_url and self._storage is not None:
            content = self._storage.read(booking.qr_code_url)
        if content is None:
            raise NotFoundError("QR code", booking_id)
        return content


def _newest_first(bookings: list[Booking]) -> list[Booking]:
    return sorted(bookings, key=lambda b: b.created_at or _EPOCH, reverse=True)
