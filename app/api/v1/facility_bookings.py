from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.responses import JSONResponse, Response
from pydantic import ValidationError

from app.api.v1.schemas import (
    AvailableFacilitiesRequestSchema,
    AvailableFacilitiesResponseSchema,
    AvailableSlotsRequestSchema,
    AvailableSlotsResponseSchema,
    FacilityBookingCreatedSchema,
    FacilityBookingCreateSchema,
    FacilityBookingSchema,
    FacilitySchema,
)
from app.application.use_cases.availability import AvailabilityResolver, require_fields
from app.application.use_cases.book_facility import BookFacilityUseCase
from app.application.use_cases.booking_queries import BookingQueries
from app.application.use_cases.facilities import FacilityRegistry
from app.wiring.dependencies import (
    get_availability_resolver,
    get_book_facility_use_case,
    get_booking_queries,
    get_facility_registry,
)

router = APIRouter(prefix="/facility-booking")
logger = logging.getLogger(__name__)


@router.post("", status_code=201, response_model=FacilityBookingCreatedSchema)
def create_facility_booking(
    booking: str = Form(...),
    receipt: UploadFile | None = File(None),
    uc: BookFacilityUseCase = Depends(get_book_facility_use_case),
):
    try:
        payload = FacilityBookingCreateSchema.model_validate_json(booking)
    except ValidationError as e:
        logger.info("Booking payload rejected", extra={"reason": "invalid_payload", "error": str(e)})
        raise HTTPException(status_code=422, detail=json.loads(e.json(include_url=False)))

    content = receipt.file.read() if receipt is not None else None
    created = uc.execute(
        payload.to_request(),
        receipt=content,
        receipt_filename=receipt.filename if receipt is not None else None,
    )
    return FacilityBookingCreatedSchema(
        msg="Booking created successfully, and confirmation email sent",
        facility_booking=FacilityBookingSchema.from_entity(created),
    )


@router.post("/available-slots", response_model=AvailableSlotsResponseSchema)
def get_available_time_slots(
    req: AvailableSlotsRequestSchema,
    resolver: AvailabilityResolver = Depends(get_availability_resolver),
    registry: FacilityRegistry = Depends(get_facility_registry),
):
    require_fields(courtNumber=req.court_number, sportName=req.sport_name, date=req.date)
    registry.find_active(req.court_number, req.sport_name)
    slots = resolver.available_slots(req.court_number, req.sport_name, req.date)
    return AvailableSlotsResponseSchema(available_slots=slots)


@router.post("/available-facilities", response_model=AvailableFacilitiesResponseSchema)
def get_available_facilities(
    req: AvailableFacilitiesRequestSchema,
    resolver: AvailabilityResolver = Depends(get_availability_resolver),
):
    facilities = resolver.available_facilities(req.sport_name, req.date, req.time_slot)
    if not facilities:
        return JSONResponse(status_code=404, content={"msg": "No available facilities for the selected time slot"})
    return AvailableFacilitiesResponseSchema(
        available_facilities=[FacilitySchema.from_entity(f) for f in facilities]
    )


@router.get("", response_model=list[FacilityBookingSchema])
def get_all_facility_bookings(queries: BookingQueries = Depends(get_booking_queries)):
    return [FacilityBookingSchema.from_entity(b) for b in queries.list_bookings()]


@router.get("/user/{user_id}", response_model=list[FacilityBookingSchema])
def get_facility_bookings_by_user(user_id: str, queries: BookingQueries = Depends(get_booking_queries)):
    return [FacilityBookingSchema.from_entity(b) for b in queries.list_user_bookings(user_id)]


@router.get("/{booking_id}", response_model=FacilityBookingSchema)
def get_facility_booking(booking_id: str, queries: BookingQueries = Depends(get_booking_queries)):
    return FacilityBookingSchema.from_entity(queries.get_booking(booking_id))


@router.get("/{booking_id}/download-qr")
def download_qr_code(booking_id: str, queries: BookingQueries = Depends(get_booking_queries)):
    content = queries.get_qr_code(booking_id)
    return Response(
        content=content,
        media_type="image/png",
        headers={"Content-Disposition": f'attachment; filename="Booking-{booking_id}-QRCode.png"'},
    )
