from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation

from app.application.exceptions import SlotConflictError, SlotTakenError
from app.application.ports.booking_store import BookingStorePort
from app.application.ports.notifier import NotifierPort
from app.application.ports.qr_code import QrCodePort
from app.application.use_cases.validate_booking import ValidatedBooking
from app.application.utils.day_range import day_bounds, start_of_day
from app.domain.entities.booking import Booking


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class BookingAdmitter:
    """
    Commits validated bookings.

    The overlap check and the insert run under one lock per (court, sport, day),
    so two overlapping requests for the same key can never both pass the check.
    Stores also reject reused slots on insert; that signal is reported the same way.
    QR generation and the confirmation email run after the lock is released and
    never undo an admitted booking.

    Lock entries for days before yesterday are dropped whenever a new key is added.
    """

    def __init__(
        self,
        store: BookingStorePort,
        qr_codes: QrCodePort | None = None,
        notifier: NotifierPort | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._store = store
        self._qr_codes = qr_codes
        self._notifier = notifier
        self._clock = clock
        self._locks: dict[tuple[str, str, date], threading.Lock] = {}
        self._lock_lock = threading.Lock()  # guards _locks
        self._logger = logging.getLogger(__name__)

    def _get_lock(self, key: tuple[str, str, date]) -> threading.Lock:
        with self._lock_lock:
            if key not in self._locks:
                self._prune_locks()
                self._locks[key] = threading.Lock()
            return self._locks[key]

    def _prune_locks(self) -> None:
        cutoff = self._clock().astimezone(timezone.utc).date() - timedelta(days=1)
        for key in [k for k, lock in self._locks.items() if k[2] < cutoff and not lock.locked()]:
            del self._locks[key]

    def admit(self, booking: ValidatedBooking, unit_price: Decimal | int | float | str) -> Booking:
        price = _to_price(unit_price)
        log_context = {
            "court": booking.court_number,
            "sport": booking.sport_name,
            "date": booking.day.isoformat(),
        }

        with self._get_lock(booking.key):
            start, end = day_bounds(booking.day)
            existing = self._store.find_bookings(
                sport_name=booking.sport_name,
                start=start,
                end=end,
                court_number=booking.court_number,
            )
            occupied: set[str] = set()
            for other in existing:
                occupied.update(other.time_slots)

            overlap = [slot for slot in booking.time_slots if slot in occupied]
            if overlap:
                self._logger.info(
                    "Booking rejected",
                    extra={**log_context, "reason": "slot_conflict", "slots": overlap},
                )
                raise SlotConflictError(overlap)

            total_hours = len(booking.time_slots)
            draft = Booking(
                booking_id=None,
                court_number=booking.court_number,
                sport_name=booking.sport_name,
                date=start_of_day(booking.day),
                time_slots=booking.time_slots,
                total_hours=total_hours,
                court_price=price,
                total_price=price * total_hours,
                payer=booking.payer,
                receipt_url=booking.receipt_url,
                created_at=datetime.now(timezone.utc),
            )
            try:
                saved = self._store.insert(draft)
            except SlotTakenError as e:
                self._logger.info(
                    "Booking rejected",
                    extra={**log_context, "reason": "slot_taken", "slots": e.slots},
                )
                raise SlotConflictError(e.slots) from e

        self._logger.info(
            "Booking admitted",
            extra={**log_context, "booking_id": saved.booking_id, "slots": list(saved.time_slots)},
        )
        saved = self._attach_qr_code(saved)
        self._send_confirmation(saved)
        return saved

    def _attach_qr_code(self, booking: Booking) -> Booking:
        if self._qr_codes is None:
            return booking
        try:
            qr_code_url = self._qr_codes.generate(booking.qr_payload())
            return self._store.attach_qr_code(booking.booking_id, qr_code_url)
        except Exception as e:
            self._logger.exception(
                "QR code generation failed",
                extra={"booking_id": booking.booking_id, "error": str(e)},
            )
            return booking

    def _send_confirmation(self, booking: Booking) -> None:
        if self._notifier is None:
            return
        if not booking.payer.email:
            self._logger.info(
                "Skipping confirmation email",
                extra={"booking_id": booking.booking_id, "reason": "no_recipient"},
            )
            return
        try:
            self._notifier.send_booking_confirmation(booking.payer.email, booking.confirmation_summary())
        except Exception as e:
            self._logger.exception(
                "Confirmation email failed",
                extra={"booking_id": booking.booking_id, "error": str(e)},
            )


def _to_price(value: Decimal | int | float | str) -> Decimal:
    try:
        price = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ValueError(f"Invalid unit price: {value!r}") from e
    if not price.is_finite() or price < 0:
        raise ValueError(f"Invalid unit price: {value!r}")
    return price
