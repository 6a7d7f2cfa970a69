from __future__ import annotations

import threading
import uuid
from collections.abc import Iterable
from dataclasses import replace
from datetime import date, datetime

from app.application.exceptions import FacilityExistsError, PersistenceError, SlotTakenError
from app.application.ports.booking_store import BookingStorePort
from app.application.ports.facility_store import FacilityStorePort
from app.domain.entities.booking import Booking
from app.domain.entities.facility import Facility


def booking_matches(
    booking: Booking,
    sport_name: str,
    start: datetime,
    end: datetime,
    court_number: str | None = None,
    time_slot: str | None = None,
) -> bool:
    if booking.sport_name != sport_name:
        return False
    if court_number is not None and booking.court_number != court_number:
        return False
    if not (start <= booking.date <= end):
        return False
    return time_slot is None or time_slot in booking.time_slots


def slot_keys(booking: Booking) -> list[tuple[str, str, date, str]]:
    return [(booking.court_number, booking.sport_name, booking.day, slot) for slot in booking.time_slots]


def check_facility_unique(facility: Facility, facilities: Iterable[Facility]) -> None:
    for other in facilities:
        if (
            other.facility_id != facility.facility_id
            and other.court_number == facility.court_number
            and other.sport_name == facility.sport_name
        ):
            raise FacilityExistsError(facility.court_number, facility.sport_name)


class MemoryBookingStore(BookingStorePort):
    def __init__(self) -> None:
        self._bookings: dict[str, Booking] = {}
        self._taken: set[tuple[str, str, date, str]] = set()  # unique (court, sport, day, slot)
        self._lock = threading.Lock()

    def find_bookings(
        self,
        sport_name: str,
        start: datetime,
        end: datetime,
        court_number: str | None = None,
        time_slot: str | None = None,
    ) -> list[Booking]:
        with self._lock:
            bookings = list(self._bookings.values())
        return [b for b in bookings if booking_matches(b, sport_name, start, end, court_number, time_slot)]

    def insert(self, booking: Booking) -> Booking:
        keys = slot_keys(booking)
        with self._lock:
            taken = [key[3] for key in keys if key in self._taken]
            if taken:
                raise SlotTakenError(taken)
            saved = replace(booking, booking_id=uuid.uuid4().hex)
            self._bookings[saved.booking_id] = saved
            self._taken.update(keys)
        return saved

    def get(self, booking_id: str) -> Booking | None:
        with self._lock:
            return self._bookings.get(booking_id)

    def list_bookings(self, user_id: str | None = None) -> list[Booking]:
        with self._lock:
            bookings = list(self._bookings.values())
        if user_id is None:
            return bookings
        return [b for b in bookings if b.payer.user_id == user_id]

    def attach_qr_code(self, booking_id: str, qr_code_url: str) -> Booking:
        with self._lock:
            booking = self._bookings.get(booking_id)
            if booking is None:
                raise PersistenceError(f"Booking {booking_id} disappeared before QR back-fill")
            updated = replace(booking, qr_code_url=qr_code_url)
            self._bookings[booking_id] = updated
        return updated


class MemoryFacilityStore(FacilityStorePort):
    def __init__(self) -> None:
        self._facilities: dict[str, Facility] = {}
        self._lock = threading.Lock()

    def add(self, facility: Facility) -> Facility:
        with self._lock:
            check_facility_unique(facility, self._facilities.values())
            saved = replace(facility, facility_id=uuid.uuid4().hex)
            self._facilities[saved.facility_id] = saved
        return saved

    def get(self, facility_id: str) -> Facility | None:
        with self._lock:
            return self._facilities.get(facility_id)

    def find(self, court_number: str, sport_name: str) -> Facility | None:
        with self._lock:
            for facility in self._facilities.values():
                if facility.court_number == court_number and facility.sport_name == sport_name:
                    return facility
        return None

    def list_facilities(self, sport_name: str | None = None, active_only: bool = False) -> list[Facility]:
        with self._lock:
            facilities = list(self._facilities.values())
        return [
            f
            for f in facilities
            if (sport_name is None or f.sport_name == sport_name) and (f.is_active or not active_only)
        ]

    def update(self, facility: Facility) -> Facility:
        with self._lock:
            if facility.facility_id not in self._facilities:
                raise PersistenceError(f"Facility {facility.facility_id} does not exist")
            check_facility_unique(facility, self._facilities.values())
            self._facilities[facility.facility_id] = facility
        return facility

    def delete(self, facility_id: str) -> bool:
        with self._lock:
            return self._facilities.pop(facility_id, None) is not None
