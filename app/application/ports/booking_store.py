from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from app.domain.entities.booking import Booking


class BookingStorePort(ABC):
    @abstractmethod
    def find_bookings(
        self,
        sport_name: str,
        start: datetime,
        end: datetime,
        court_number: str | None = None,
        time_slot: str | None = None,
    ) -> list[Booking]:
        """Bookings for the sport dated within [start, end], optionally narrowed to a court or a slot."""
        raise NotImplementedError

    @abstractmethod
    def insert(self, booking: Booking) -> Booking:
        """Persist a new booking and return it with its assigned id.

        Raises SlotTakenError if any of its slots is already held for the same court, sport and day.
        """
        raise NotImplementedError

    @abstractmethod
    def get(self, booking_id: str) -> Booking | None:
        raise NotImplementedError

    @abstractmethod
    def list_bookings(self, user_id: str | None = None) -> list[Booking]:
        raise NotImplementedError

    @abstractmethod
    def attach_qr_code(self, booking_id: str, qr_code_url: str) -> Booking:
        raise NotImplementedError
