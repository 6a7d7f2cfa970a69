from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any


@dataclass(frozen=True)
class PayerInfo:
    user_id: str | None = None
    name: str | None = None
    email: str | None = None
    phone_number: str | None = None


@dataclass(frozen=True)
class BookingRequest:
    """Raw booking input. Every field may be missing until validated."""

    court_number: str | None = None
    sport_name: str | None = None
    date: date | datetime | None = None
    time_slots: Sequence[str] | None = None
    payer: PayerInfo = field(default_factory=PayerInfo)
    receipt_url: str | None = None


@dataclass(frozen=True)
class Booking:
    booking_id: str | None
    court_number: str
    sport_name: str
    date: datetime  # UTC midnight of the booked day
    time_slots: tuple[str, ...]
    total_hours: int
    court_price: Decimal
    total_price: Decimal
    payer: PayerInfo = field(default_factory=PayerInfo)
    receipt_url: str | None = None
    qr_code_url: str | None = None
    created_at: datetime | None = None

    @property
    def day(self) -> date:
        return self.date.date()

    def qr_payload(self) -> dict[str, Any]:
        return {
            "bookingId": self.booking_id,
            "userName": self.payer.name,
            "userEmail": self.payer.email,
            "sportName": self.sport_name,
            "courtNumber": self.court_number,
            "date": self.date.isoformat(),
            "timeSlots": list(self.time_slots),
            "totalHours": self.total_hours,
            "courtPrice": str(self.court_price),
            "totalPrice": str(self.total_price),
        }

    def confirmation_summary(self) -> dict[str, Any]:
        return {
            "bookingId": self.booking_id,
            "userName": self.payer.name,
            "sportName": self.sport_name,
            "courtNumber": self.court_number,
            "date": self.day.isoformat(),
            "timeSlots": list(self.time_slots),
            "totalHours": self.total_hours,
            "totalPrice": str(self.total_price),
            "receipt": self.receipt_url,
            "qrCode": self.qr_code_url,
        }
