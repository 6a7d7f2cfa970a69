from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.application.exceptions import (
    BookingError,
    InvalidSlotError,
    MissingFieldError,
    NotFoundError,
    PastDateError,
    PersistenceError,
    SlotConflictError,
)

logger = logging.getLogger(__name__)


def booking_error_response(exc: BookingError) -> JSONResponse:
    body: dict[str, object] = {"msg": exc.message}
    status_code = 400
    if isinstance(exc, MissingFieldError):
        body["missingFields"] = exc.fields
    elif isinstance(exc, InvalidSlotError):
        body["invalidSlots"] = exc.slots
    elif isinstance(exc, PastDateError):
        body["date"] = exc.requested.isoformat()
        body["today"] = exc.today.isoformat()
    elif isinstance(exc, SlotConflictError):
        status_code = 409
        body["unavailableSlots"] = exc.slots
    elif isinstance(exc, NotFoundError):
        status_code = 404
    return JSONResponse(status_code=status_code, content=body)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(BookingError)
    async def handle_booking_error(request: Request, exc: BookingError) -> JSONResponse:
        return booking_error_response(exc)

    @app.exception_handler(PersistenceError)
    async def handle_persistence_error(request: Request, exc: PersistenceError) -> JSONResponse:
        logger.error("Store failure", extra={"path": request.url.path, "error": str(exc)})
        return JSONResponse(status_code=500, content={"msg": "Server error"})
