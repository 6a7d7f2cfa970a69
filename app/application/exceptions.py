from __future__ import annotations

from datetime import date


class BookingError(Exception):
    """Client-fixable booking failure. Carries the offending values for reporting."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class MissingFieldError(BookingError):
    def __init__(self, fields: list[str]) -> None:
        super().__init__(f"Missing required fields: {', '.join(fields)}")
        self.fields = list(fields)


class InvalidSlotError(BookingError):
    def __init__(self, slots: list, message: str = "Invalid time slots") -> None:
        super().__init__(message)
        self.slots = list(slots)


class PastDateError(BookingError):
    def __init__(self, requested: date, today: date) -> None:
        super().__init__("Booking date cannot be in the past")
        self.requested = requested
        self.today = today


class SlotConflictError(BookingError):
    """Raised when requested slots overlap an admitted booking for the same court, sport and day."""

    def __init__(self, slots: list[str]) -> None:
        super().__init__("Some time slots are already booked")
        self.slots = list(slots)


class NotFoundError(BookingError):
    def __init__(self, resource: str, key: object = None) -> None:
        super().__init__(f"{resource} not found")
        self.resource = resource
        self.key = key


class PersistenceError(RuntimeError):
    """Raised when a store fails for reasons unrelated to the caller's input."""
    pass


class SlotTakenError(PersistenceError):
    """Raised by stores when an insert would reuse a (court, sport, day, slot) tuple."""

    def __init__(self, slots: list[str]) -> None:
        super().__init__(f"Slots already taken: {', '.join(slots)}")
        self.slots = list(slots)


class FacilityExistsError(PersistenceError):
    """Raised by stores when a facility would reuse a (court, sport) pair."""

    def __init__(self, court_number: str, sport_name: str) -> None:
        super().__init__(f"Court {court_number} for {sport_name} already exists")
        self.court_number = court_number
        self.sport_name = sport_name
