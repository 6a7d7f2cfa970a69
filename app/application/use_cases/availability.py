from __future__ import annotations

from datetime import date, datetime

from app.application.exceptions import InvalidSlotError, MissingFieldError
from app.application.ports.booking_store import BookingStorePort
from app.application.ports.facility_store import FacilityStorePort
from app.application.utils.day_range import day_bounds, to_utc_day
from app.domain.entities.facility import Facility
from app.domain.entities.time_slot import SlotCatalog


class AvailabilityResolver:
    """Read-only view of what is still free. Never takes the admission locks."""

    def __init__(
        self,
        bookings: BookingStorePort,
        facilities: FacilityStorePort,
        catalog: SlotCatalog,
    ) -> None:
        self._bookings = bookings
        self._facilities = facilities
        self._catalog = catalog

    def booked_slots(self, court_number: str, sport_name: str, day: date | datetime) -> set[str]:
        start, end = day_bounds(to_utc_day(day))
        booked: set[str] = set()
        for booking in self._bookings.find_bookings(
            sport_name=sport_name,
            start=start,
            end=end,
            court_number=court_number,
        ):
            booked.update(booking.time_slots)
        return booked

    def available_slots(self, court_number: str, sport_name: str, day: date | datetime) -> list[str]:
        """Catalog slots not held by any booking for this court, sport and day, in catalog order."""
        return self._catalog.subtract(self.booked_slots(court_number, sport_name, day))

    def available_facilities(
        self,
        sport_name: str | None,
        day: date | datetime | None,
        time_slot: str | None,
    ) -> list[Facility]:
        """Active courts for the sport with no booking holding time_slot on that day."""
        require_fields(sportName=sport_name, date=day, timeSlot=time_slot)
        if not self._catalog.is_valid_slot(time_slot):
            raise InvalidSlotError([time_slot])

        start, end = day_bounds(to_utc_day(day))
        booked_courts = {
            booking.court_number
            for booking in self._bookings.find_bookings(
                sport_name=sport_name,
                start=start,
                end=end,
                time_slot=time_slot,
            )
        }
        facilities = self._facilities.list_facilities(sport_name=sport_name, active_only=True)
        return sorted(
            (f for f in facilities if f.court_number not in booked_courts),
            key=lambda f: court_sort_key(f.court_number),
        )


def court_sort_key(court_number: str) -> tuple[int, int, str]:
    if court_number.isdigit():
        return (0, int(court_number), court_number)
    return (1, 0, court_number)


def require_fields(**values: object) -> None:
    """Raise MissingFieldError naming every value that is None or blank."""
    missing = [
        name
        for name, value in values.items()
        if value is None or (isinstance(value, str) and not value.strip())
    ]
    if missing:
        raise MissingFieldError(missing)
