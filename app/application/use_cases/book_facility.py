from __future__ import annotations

import logging
from dataclasses import replace

from app.application.exceptions import BookingError, MissingFieldError, PersistenceError, SlotConflictError
from app.application.ports.file_storage import FileStoragePort
from app.application.use_cases.admit_booking import BookingAdmitter
from app.application.use_cases.availability import AvailabilityResolver
from app.application.use_cases.facilities import FacilityRegistry
from app.application.use_cases.validate_booking import BookingValidator
from app.domain.entities.booking import Booking, BookingRequest

RECEIPT_FOLDER = "facility_receipts"


class BookFacilityUseCase:
    def __init__(
        self,
        validator: BookingValidator,
        admitter: BookingAdmitter,
        facilities: FacilityRegistry,
        availability: AvailabilityResolver,
        storage: FileStoragePort,
    ) -> None:
        self._validator = validator
        self._admitter = admitter
        self._facilities = facilities
        self._availability = availability
        self._storage = storage
        self._logger = logging.getLogger(__name__)

    def execute(
        self,
        request: BookingRequest,
        receipt: bytes | None,
        receipt_filename: str | None = None,
    ) -> Booking:
        """
        Validate, upload the payment receipt, then admit at the court's registered price.
        The client never supplies the unit price.

        Slots already held are refused before the receipt is stored. A receipt stored
        for a request the admitter then rejects is removed again.
        """
        validated = self._validator.validate(request)
        if not receipt:
            raise MissingFieldError(["receipt"])

        facility = self._facilities.find_active(validated.court_number, validated.sport_name)

        booked = self._availability.booked_slots(validated.court_number, validated.sport_name, validated.day)
        taken = [slot for slot in validated.time_slots if slot in booked]
        if taken:
            raise SlotConflictError(taken)

        receipt_url = self._storage.save(receipt, RECEIPT_FOLDER, receipt_filename)
        self._logger.info(
            "Receipt stored",
            extra={"court": validated.court_number, "sport": validated.sport_name, "url": receipt_url},
        )
        try:
            return self._admitter.admit(replace(validated, receipt_url=receipt_url), facility.court_price)
        except (BookingError, PersistenceError):
            self._discard_receipt(receipt_url)
            raise

    def _discard_receipt(self, receipt_url: str) -> None:
        try:
            self._storage.delete(receipt_url)
        except PersistenceError as e:
            self._logger.exception("Receipt cleanup failed", extra={"url": receipt_url, "error": str(e)})
