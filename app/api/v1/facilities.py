from __future__ import annotations

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from app.api.v1.schemas import FacilityCreateSchema, FacilitySchema, FacilityUpdateSchema, MessageSchema
from app.application.use_cases.facilities import FacilityRegistry
from app.wiring.dependencies import get_facility_registry

router = APIRouter(prefix="/facilities")


@router.post("", status_code=201, response_model=FacilitySchema)
def create_facility(req: FacilityCreateSchema, registry: FacilityRegistry = Depends(get_facility_registry)):
    try:
        facility = registry.create(
            court_number=req.court_number,
            sport_name=req.sport_name,
            court_price=req.court_price,
            sport_category=req.sport_category,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return FacilitySchema.from_entity(facility)


@router.get("", response_model=list[FacilitySchema])
def get_all_facilities(registry: FacilityRegistry = Depends(get_facility_registry)):
    return [FacilitySchema.from_entity(f) for f in registry.list_facilities()]


@router.get("/available", response_model=list[FacilitySchema])
def get_active_facilities(registry: FacilityRegistry = Depends(get_facility_registry)):
    return [FacilitySchema.from_entity(f) for f in registry.list_facilities(active_only=True)]


@router.get("/{facility_id}", response_model=FacilitySchema)
def get_facility(facility_id: str, registry: FacilityRegistry = Depends(get_facility_registry)):
    return FacilitySchema.from_entity(registry.get(facility_id))


@router.put("/{facility_id}", response_model=FacilitySchema)
def update_facility(
    facility_id: str,
    req: FacilityUpdateSchema,
    registry: FacilityRegistry = Depends(get_facility_registry),
):
    try:
        facility = registry.update(facility_id, **req.model_dump(exclude_unset=True))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return FacilitySchema.from_entity(facility)


@router.put("/{facility_id}/image", response_model=FacilitySchema)
def upload_facility_image(
    facility_id: str,
    image: UploadFile = File(...),
    registry: FacilityRegistry = Depends(get_facility_registry),
):
    try:
        facility = registry.attach_image(facility_id, image.file.read(), image.filename)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return FacilitySchema.from_entity(facility)


@router.patch("/{facility_id}/toggle-status", response_model=FacilitySchema)
def toggle_facility_status(facility_id: str, registry: FacilityRegistry = Depends(get_facility_registry)):
    return FacilitySchema.from_entity(registry.toggle_status(facility_id))


@router.delete("/{facility_id}", response_model=MessageSchema)
def delete_facility(facility_id: str, registry: FacilityRegistry = Depends(get_facility_registry)):
    registry.delete(facility_id)
    return MessageSchema(msg="Facility removed successfully.")
