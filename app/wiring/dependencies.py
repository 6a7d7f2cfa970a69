from functools import lru_cache
import logging

from app.core.config import settings
from app.application.ports.booking_store import BookingStorePort
from app.application.ports.facility_store import FacilityStorePort
from app.application.ports.file_storage import FileStoragePort
from app.application.ports.notifier import NotifierPort
from app.application.use_cases.admit_booking import BookingAdmitter
from app.application.use_cases.availability import AvailabilityResolver
from app.application.use_cases.book_facility import BookFacilityUseCase
from app.application.use_cases.booking_queries import BookingQueries
from app.application.use_cases.facilities import FacilityRegistry
from app.application.use_cases.validate_booking import BookingValidator
from app.domain.entities.time_slot import SlotCatalog
from app.infrastructure.notifications.mock_notifier import MockNotifier
from app.infrastructure.notifications.resend_notifier import ResendNotifier
from app.infrastructure.qr.qr_code_generator import QrCodeGenerator
from app.infrastructure.storage.local_file_storage import LocalFileStorage
from app.infrastructure.store.json_store import JsonBookingStore, JsonFacilityStore
from app.infrastructure.store.memory_store import MemoryBookingStore, MemoryFacilityStore


_booking_store: BookingStorePort | None = None
_facility_store: FacilityStorePort | None = None


def _use_json_store() -> bool:
    return settings.BOOKING_STORE.lower() == "json"


def get_booking_store() -> BookingStorePort:
    global _booking_store
    if _booking_store is None:
        if _use_json_store():
            _booking_store = JsonBookingStore(data_dir=settings.DATA_DIR)
        else:
            _booking_store = MemoryBookingStore()
    return _booking_store


def get_facility_store() -> FacilityStorePort:
    global _facility_store
    if _facility_store is None:
        if _use_json_store():
            _facility_store = JsonFacilityStore(data_dir=settings.DATA_DIR)
        else:
            _facility_store = MemoryFacilityStore()
    return _facility_store


@lru_cache
def get_slot_catalog() -> SlotCatalog:
    return SlotCatalog(tuple(settings.TIME_SLOTS))


@lru_cache
def get_file_storage() -> FileStoragePort:
    base_url = settings.PUBLIC_BASE_URL.rstrip("/") + settings.MEDIA_URL
    return LocalFileStorage(media_dir=settings.MEDIA_DIR, base_url=base_url)


@lru_cache
def get_notifier() -> NotifierPort:
    logger = logging.getLogger(__name__)
    if not settings.RESEND_API_KEY:
        logger.info("Using MockNotifier (RESEND_API_KEY missing)")
        return MockNotifier()
    return ResendNotifier(
        api_key=settings.RESEND_API_KEY,
        from_email=settings.EMAIL_FROM,
        base_url=settings.RESEND_API_URL,
        business_name=settings.BUSINESS_NAME,
    )


@lru_cache
def get_booking_admitter() -> BookingAdmitter:
    # One instance per process: the per-key admission locks live on it.
    return BookingAdmitter(
        store=get_booking_store(),
        qr_codes=QrCodeGenerator(storage=get_file_storage()),
        notifier=get_notifier(),
    )


def get_booking_validator() -> BookingValidator:
    return BookingValidator(catalog=get_slot_catalog())


def get_facility_registry() -> FacilityRegistry:
    return FacilityRegistry(store=get_facility_store(), storage=get_file_storage())


def get_availability_resolver() -> AvailabilityResolver:
    return AvailabilityResolver(
        bookings=get_booking_store(),
        facilities=get_facility_store(),
        catalog=get_slot_catalog(),
    )


def get_booking_queries() -> BookingQueries:
    return BookingQueries(store=get_booking_store(), storage=get_file_storage())


def get_book_facility_use_case() -> BookFacilityUseCase:
    return BookFacilityUseCase(
        validator=get_booking_validator(),
        admitter=get_booking_admitter(),
        facilities=get_facility_registry(),
        availability=get_availability_resolver(),
        storage=get_file_storage(),
    )
