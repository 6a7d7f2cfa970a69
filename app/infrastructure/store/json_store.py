from __future__ import annotations

import json
import threading
import uuid
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, Iterator

from filelock import FileLock, Timeout

from app.application.exceptions import PersistenceError, SlotTakenError
from app.application.ports.booking_store import BookingStorePort
from app.application.ports.facility_store import FacilityStorePort
from app.domain.entities.booking import Booking, PayerInfo
from app.domain.entities.facility import Facility
from app.infrastructure.store.memory_store import booking_matches, check_facility_unique, slot_keys


class _JsonDocument:
    """
    One JSON file holding a list of records. Reads and writes are whole-file.

    Every read-modify-write runs inside locked(), which holds a thread lock and an
    OS file lock next to the document, so workers in other processes sharing the
    same data_dir see each other's writes before checking uniqueness.
    """

    def __init__(self, file_path: Path, lock_timeout: float = 10.0) -> None:
        self._file_path = file_path
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        self._thread_lock = threading.Lock()
        self._file_lock = FileLock(str(file_path.with_suffix(".json.lock")), timeout=lock_timeout)

    @contextmanager
    def locked(self) -> Iterator[None]:
        with self._thread_lock:
            try:
                self._file_lock.acquire()
            except Timeout as e:
                raise PersistenceError(f"Timed out waiting for lock on {self._file_path}") from e
            try:
                yield
            finally:
                self._file_lock.release()

    def load(self) -> list[dict[str, Any]]:
        """Load records, return empty list if the file is missing."""
        if not self._file_path.exists():
            return []
        try:
            with open(self._file_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            raise PersistenceError(f"Cannot read {self._file_path}: {e}") from e
        return data.get("records", [])

    def save(self, records: list[dict[str, Any]]) -> None:
        """Write records atomically via a temp file."""
        temp_path = self._file_path.with_suffix(".json.tmp")
        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump({"version": 1, "records": records}, f, indent=2, ensure_ascii=False)
            temp_path.replace(self._file_path)
        except OSError as e:
            if temp_path.exists():
                temp_path.unlink(missing_ok=True)
            raise PersistenceError(f"Cannot write {self._file_path}: {e}") from e


class JsonBookingStore(BookingStorePort):
    def __init__(self, data_dir: str = "./data") -> None:
        self._doc = _JsonDocument(Path(data_dir) / "bookings.json")

    def _serialize(self, booking: Booking) -> dict[str, Any]:
        return {
            "booking_id": booking.booking_id,
            "court_number": booking.court_number,
            "sport_name": booking.sport_name,
            "date": booking.date.isoformat(),
            "time_slots": list(booking.time_slots),
            "total_hours": booking.total_hours,
            "court_price": str(booking.court_price),
            "total_price": str(booking.total_price),
            "payer": {
                "user_id": booking.payer.user_id,
                "name": booking.payer.name,
                "email": booking.payer.email,
                "phone_number": booking.payer.phone_number,
            },
            "receipt_url": booking.receipt_url,
            "qr_code_url": booking.qr_code_url,
            "created_at": booking.created_at.isoformat() if booking.created_at else None,
        }

    def _deserialize(self, data: dict[str, Any]) -> Booking:
        created_at = data.get("created_at")
        return Booking(
            booking_id=data["booking_id"],
            court_number=data["court_number"],
            sport_name=data["sport_name"],
            date=datetime.fromisoformat(data["date"]),
            time_slots=tuple(data.get("time_slots", [])),
            total_hours=int(data["total_hours"]),
            court_price=Decimal(data["court_price"]),
            total_price=Decimal(data["total_price"]),
            payer=PayerInfo(**(data.get("payer") or {})),
            receipt_url=data.get("receipt_url"),
            qr_code_url=data.get("qr_code_url"),
            created_at=datetime.fromisoformat(created_at) if created_at else None,
        )

    def _load(self) -> list[Booking]:
        return [self._deserialize(record) for record in self._doc.load()]

    def find_bookings(
        self,
        sport_name: str,
        start: datetime,
        end: datetime,
        court_number: str | None = None,
        time_slot: str | None = None,
    ) -> list[Booking]:
        with self._doc.locked():
            bookings = self._load()
        return [b for b in bookings if booking_matches(b, sport_name, start, end, court_number, time_slot)]

    def insert(self, booking: Booking) -> Booking:
        with self._doc.locked():
            bookings = self._load()
            taken_keys = {key for existing in bookings for key in slot_keys(existing)}
            taken = [key[3] for key in slot_keys(booking) if key in taken_keys]
            if taken:
                raise SlotTakenError(taken)
            saved = replace(booking, booking_id=uuid.uuid4().hex)
            bookings.append(saved)
            self._doc.save([self._serialize(b) for b in bookings])
        return saved

    def get(self, booking_id: str) -> Booking | None:
        with self._doc.locked():
            bookings = self._load()
        return next((b for b in bookings if b.booking_id == booking_id), None)

    def list_bookings(self, user_id: str | None = None) -> list[Booking]:
        with self._doc.locked():
            bookings = self._load()
        if user_id is None:
            return bookings
        return [b for b in bookings if b.payer.user_id == user_id]

    def attach_qr_code(self, booking_id: str, qr_code_url: str) -> Booking:
        with self._doc.locked():
            bookings = self._load()
            for index, booking in enumerate(bookings):
                if booking.booking_id == booking_id:
                    bookings[index] = replace(booking, qr_code_url=qr_code_url)
                    self._doc.save([self._serialize(b) for b in bookings])
                    return bookings[index]
        raise PersistenceError(f"Booking {booking_id} disappeared before QR back-fill")


class JsonFacilityStore(FacilityStorePort):
    def __init__(self, data_dir: str = "./data") -> None:
        self._doc = _JsonDocument(Path(data_dir) / "facilities.json")

    def _serialize(self, facility: Facility) -> dict[str, Any]:
        return {
            "facility_id": facility.facility_id,
            "court_number": facility.court_number,
            "sport_name": facility.sport_name,
            "court_price": str(facility.court_price),
            "sport_category": facility.sport_category,
            "image_url": facility.image_url,
            "is_active": facility.is_active,
            "created_at": facility.created_at.isoformat() if facility.created_at else None,
            "updated_at": facility.updated_at.isoformat() if facility.updated_at else None,
        }

    def _deserialize(self, data: dict[str, Any]) -> Facility:
        created_at = data.get("created_at")
        updated_at = data.get("updated_at")
        return Facility(
            facility_id=data["facility_id"],
            court_number=data["court_number"],
            sport_name=data["sport_name"],
            court_price=Decimal(data["court_price"]),
            sport_category=data.get("sport_category"),
            image_url=data.get("image_url"),
            is_active=data.get("is_active", True),
            created_at=datetime.fromisoformat(created_at) if created_at else None,
            updated_at=datetime.fromisoformat(updated_at) if updated_at else None,
        )

    def _load(self) -> list[Facility]:
        return [self._deserialize(record) for record in self._doc.load()]

    def _save(self, facilities: list[Facility]) -> None:
        self._doc.save([self._serialize(f) for f in facilities])

    def add(self, facility: Facility) -> Facility:
        with self._doc.locked():
            facilities = self._load()
            check_facility_unique(facility, facilities)
            saved = replace(facility, facility_id=uuid.uuid4().hex)
            facilities.append(saved)
            self._save(facilities)
        return saved

    def get(self, facility_id: str) -> Facility | None:
        with self._doc.locked():
            facilities = self._load()
        return next((f for f in facilities if f.facility_id == facility_id), None)

    def find(self, court_number: str, sport_name: str) -> Facility | None:
        with self._doc.locked():
            facilities = self._load()
        return next(
            (f for f in facilities if f.court_number == court_number and f.sport_name == sport_name),
            None,
        )

    def list_facilities(self, sport_name: str | None = None, active_only: bool = False) -> list[Facility]:
        with self._doc.locked():
            facilities = self._load()
        return [
            f
            for f in facilities
            if (sport_name is None or f.sport_name == sport_name) and (f.is_active or not active_only)
        ]

    def update(self, facility: Facility) -> Facility:
        with self._doc.locked():
            facilities = self._load()
            for index, existing in enumerate(facilities):
                if existing.facility_id == facility.facility_id:
                    check_facility_unique(facility, facilities)
                    facilities[index] = facility
                    self._save(facilities)
                    return facility
        raise PersistenceError(f"Facility {facility.facility_id} does not exist")

    def delete(self, facility_id: str) -> bool:
        with self._doc.locked():
            facilities = self._load()
            remaining = [f for f in facilities if f.facility_id != facility_id]
            if len(remaining) == len(facilities):
                return False
            self._save(remaining)
        return True
