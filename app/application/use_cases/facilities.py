from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation

from app.application.exceptions import FacilityExistsError, NotFoundError
from app.application.ports.facility_store import FacilityStorePort
from app.application.ports.file_storage import FileStoragePort
from app.application.use_cases.availability import court_sort_key
from app.domain.entities.facility import Facility

_EDITABLE_FIELDS = ("court_number", "sport_name", "sport_category", "court_price")
IMAGE_FOLDER = "facility_images"


class FacilityRegistry:
    def __init__(self, store: FacilityStorePort, storage: FileStoragePort | None = None) -> None:
        self._store = store
        self._storage = storage
        self._logger = logging.getLogger(__name__)

    def create(
        self,
        court_number: str,
        sport_name: str,
        court_price: Decimal | int | float | str,
        sport_category: str | None = None,
    ) -> Facility:
        court_number = _required_text(court_number, "court_number")
        sport_name = _required_text(sport_name, "sport_name")

        now = datetime.now(timezone.utc)
        try:
            facility = self._store.add(
                Facility(
                    facility_id=None,
                    court_number=court_number,
                    sport_name=sport_name,
                    court_price=_price(court_price),
                    sport_category=sport_category,
                    created_at=now,
                    updated_at=now,
                )
            )
        except FacilityExistsError as e:
            raise ValueError(str(e)) from e
        self._logger.info(
            "Facility created",
            extra={"facility_id": facility.facility_id, "court": court_number, "sport": sport_name},
        )
        return facility

    def get(self, facility_id: str) -> Facility:
        facility = self._store.get(facility_id)
        if facility is None:
            raise NotFoundError("Facility", facility_id)
        return facility

    def list_facilities(self, active_only: bool = False) -> list[Facility]:
        facilities = self._store.list_facilities(active_only=active_only)
        return sorted(facilities, key=lambda f: (f.sport_name, court_sort_key(f.court_number)))

    def find_active(self, court_number: str, sport_name: str) -> Facility:
        facility = self._store.find(court_number, sport_name)
        if facility is None or not facility.is_active:
            raise NotFoundError("Facility", (court_number, sport_name))
        return facility

    def update(self, facility_id: str, **changes) -> Facility:
        """Partial update. Fields passed as None keep their current value."""
        unknown = set(changes) - set(_EDITABLE_FIELDS)
        if unknown:
            raise ValueError(f"Unknown facility fields: {', '.join(sorted(unknown))}")

        facility = self.get(facility_id)
        values = {k: v for k, v in changes.items() if v is not None}
        if "court_number" in values:
            values["court_number"] = _required_text(values["court_number"], "court_number")
        if "sport_name" in values:
            values["sport_name"] = _required_text(values["sport_name"], "sport_name")
        if "court_price" in values:
            values["court_price"] = _price(values["court_price"])

        updated = replace(facility, **values, updated_at=datetime.now(timezone.utc))
        try:
            return self._store.update(updated)
        except FacilityExistsError as e:
            raise ValueError(str(e)) from e

    def attach_image(self, facility_id: str, content: bytes, filename: str | None = None) -> Facility:
        """Store a court photo and point the facility at it. Replaces any earlier image."""
        if self._storage is None:
            raise RuntimeError("Facility images need a file storage")
        if not content:
            raise ValueError("image is required")
        facility = self.get(facility_id)
        image_url = self._storage.save(content, IMAGE_FOLDER, filename)
        updated = self._store.update(
            replace(facility, image_url=image_url, updated_at=datetime.now(timezone.utc))
        )
        if facility.image_url:
            self._storage.delete(facility.image_url)
        self._logger.info("Facility image stored", extra={"facility_id": facility_id, "url": image_url})
        return updated

    def toggle_status(self, facility_id: str) -> Facility:
        facility = self.get(facility_id)
        updated = replace(
            facility,
            is_active=not facility.is_active,
            updated_at=datetime.now(timezone.utc),
        )
        self._logger.info(
            "Facility status changed",
            extra={"facility_id": facility_id, "active": updated.is_active},
        )
        return self._store.update(updated)

    def delete(self, facility_id: str) -> None:
        if not self._store.delete(facility_id):
            raise NotFoundError("Facility", facility_id)
        self._logger.info("Facility removed", extra={"facility_id": facility_id})


def _required_text(value: str | None, name: str) -> str:
    text = (value or "").strip()
    if not text:
        raise ValueError(f"{name} is required")
    return text


def _price(value: Decimal | int | float | str) -> Decimal:
    try:
        price = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ValueError(f"Invalid court price: {value!r}") from e
    if not price.is_finite() or price < 0:
        raise ValueError(f"Invalid court price: {value!r}")
    return price
