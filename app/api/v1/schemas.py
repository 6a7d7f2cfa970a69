from __future__ import annotations

import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from app.domain.entities.booking import Booking, BookingRequest, PayerInfo
from app.domain.entities.facility import Facility


class RequestSchema(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")


class ResponseSchema(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CourtNumberMixin(BaseModel):
    @field_validator("court_number", mode="before", check_fields=False)
    @classmethod
    def court_number_to_str(cls, value: object) -> object:
        # Clients send court numbers as JSON numbers as often as strings.
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class FacilityBookingCreateSchema(CourtNumberMixin, RequestSchema):
    user_id: str | None = None
    user_name: str | None = None
    user_email: str | None = None
    user_phone_number: str | None = None
    court_number: str | None = None
    sport_name: str | None = None
    date: dt.datetime | dt.date | None = None
    time_slots: list[str] | None = None

    def to_request(self) -> BookingRequest:
        return BookingRequest(
            court_number=self.court_number,
            sport_name=self.sport_name,
            date=self.date,
            time_slots=self.time_slots,
            payer=PayerInfo(
                user_id=self.user_id,
                name=self.user_name,
                email=self.user_email,
                phone_number=self.user_phone_number,
            ),
        )


class AvailableSlotsRequestSchema(CourtNumberMixin, RequestSchema):
    court_number: str | None = None
    sport_name: str | None = None
    date: dt.datetime | dt.date | None = None


class AvailableSlotsResponseSchema(ResponseSchema):
    available_slots: list[str]


class AvailableFacilitiesRequestSchema(RequestSchema):
    sport_name: str | None = None
    date: dt.datetime | dt.date | None = None
    time_slot: str | None = None


class FacilityBookingSchema(ResponseSchema):
    id: str
    user_id: str | None = None
    user_name: str | None = None
    user_email: str | None = None
    user_phone_number: str | None = None
    sport_name: str
    court_number: str
    court_price: float
    date: dt.datetime
    time_slots: list[str]
    total_hours: int
    total_price: float
    receipt: str | None = None
    qr_code: str | None = None
    created_at: dt.datetime | None = None

    @classmethod
    def from_entity(cls, booking: Booking) -> "FacilityBookingSchema":
        return cls(
            id=booking.booking_id,
            user_id=booking.payer.user_id,
            user_name=booking.payer.name,
            user_email=booking.payer.email,
            user_phone_number=booking.payer.phone_number,
            sport_name=booking.sport_name,
            court_number=booking.court_number,
            court_price=float(booking.court_price),
            date=booking.date,
            time_slots=list(booking.time_slots),
            total_hours=booking.total_hours,
            total_price=float(booking.total_price),
            receipt=booking.receipt_url,
            qr_code=booking.qr_code_url,
            created_at=booking.created_at,
        )


class FacilityBookingCreatedSchema(ResponseSchema):
    msg: str
    facility_booking: FacilityBookingSchema


class FacilityCreateSchema(CourtNumberMixin, RequestSchema):
    court_number: str
    sport_name: str
    court_price: Decimal = Field(ge=0)
    sport_category: str | None = None


class FacilityUpdateSchema(CourtNumberMixin, RequestSchema):
    court_number: str | None = None
    sport_name: str | None = None
    court_price: Decimal | None = Field(default=None, ge=0)
    sport_category: str | None = None


class FacilitySchema(ResponseSchema):
    id: str
    court_number: str
    sport_name: str
    sport_category: str | None = None
    court_price: float
    image_url: str | None = None
    is_active: bool
    created_at: dt.datetime | None = None
    updated_at: dt.datetime | None = None

    @classmethod
    def from_entity(cls, facility: Facility) -> "FacilitySchema":
        return cls(
            id=facility.facility_id,
            court_number=facility.court_number,
            sport_name=facility.sport_name,
            sport_category=facility.sport_category,
            court_price=float(facility.court_price),
            image_url=facility.image_url,
            is_active=facility.is_active,
            created_at=facility.created_at,
            updated_at=facility.updated_at,
        )


class AvailableFacilitiesResponseSchema(ResponseSchema):
    available_facilities: list[FacilitySchema]


class MessageSchema(BaseModel):
    msg: str
