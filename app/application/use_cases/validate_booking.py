from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, datetime, timezone

from app.application.exceptions import InvalidSlotError, MissingFieldError, PastDateError
from app.application.utils.day_range import to_utc_day
from app.domain.entities.booking import BookingRequest, PayerInfo
from app.domain.entities.time_slot import SlotCatalog


@dataclass(frozen=True)
class ValidatedBooking:
    court_number: str
    sport_name: str
    day: date
    time_slots: tuple[str, ...]
    payer: PayerInfo = field(default_factory=PayerInfo)
    receipt_url: str | None = None

    @property
    def key(self) -> tuple[str, str, date]:
        return (self.court_number, self.sport_name, self.day)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class BookingValidator:
    def __init__(self, catalog: SlotCatalog, clock: Callable[[], datetime] = _utc_now) -> None:
        self._catalog = catalog
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    def validate(self, request: BookingRequest) -> ValidatedBooking:
        """
        Check a booking request before admission. Stops at the first failing rule:
        missing fields, then slot validity, then past date.
        Runs no persistence queries.
        """
        missing = [
            name
            for name, value in (
                ("courtNumber", request.court_number),
                ("sportName", request.sport_name),
                ("date", request.date),
                ("timeSlots", request.time_slots),
            )
            if value is None or (isinstance(value, str) and not value.strip())
        ]
        if missing:
            self._logger.info("Booking rejected", extra={"reason": "missing_field", "fields": missing})
            raise MissingFieldError(missing)

        slots = self._check_slots(request.time_slots)

        day = to_utc_day(request.date)
        today = to_utc_day(self._clock())
        if day < today:
            self._logger.info("Booking rejected", extra={"reason": "past_date", "date": day.isoformat()})
            raise PastDateError(day, today)

        return ValidatedBooking(
            court_number=str(request.court_number).strip(),
            sport_name=str(request.sport_name).strip(),
            day=day,
            time_slots=self._catalog.ordered(slots),
            payer=request.payer,
            receipt_url=request.receipt_url,
        )

    def _check_slots(self, time_slots) -> list[str]:
        if isinstance(time_slots, (str, bytes)):
            raise InvalidSlotError([time_slots], "Invalid timeSlots format. Must be a list.")
        slots = list(time_slots)
        if not slots:
            raise InvalidSlotError([], "At least one time slot is required")

        invalid = self._catalog.invalid_slots(slots)
        if invalid:
            self._logger.info("Booking rejected", extra={"reason": "invalid_slot", "slots": invalid})
            raise InvalidSlotError(invalid)

        repeated = [slot for slot, count in Counter(slots).items() if count > 1]
        if repeated:
            raise InvalidSlotError(repeated, "Time slots must not repeat")
        return slots
