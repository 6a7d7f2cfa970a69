import logging
from pathlib import Path

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from app.api.errors import register_exception_handlers
from app.api.v1.facilities import router as facilities_router
from app.api.v1.facility_bookings import router as facility_bookings_router
from app.core.config import settings

class ContextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        extras = []
        for key in (
            "booking_id",
            "facility_id",
            "court",
            "sport",
            "date",
            "slots",
            "fields",
            "reason",
            "recipient",
            "url",
            "status",
            "error",
            "path",
        ):
            value = getattr(record, key, None)
            if value not in (None, ""):
                extras.append(f"{key}={value}")
        base = super().format(record)
        if extras:
            return f"{base} | " + " ".join(extras)
        return base


handler = logging.StreamHandler()
handler.setFormatter(ContextFormatter("%(levelname)s:%(name)s:%(message)s"))

root = logging.getLogger()
root.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
root.handlers.clear()
root.addHandler(handler)

app = FastAPI(title=settings.APP_NAME, version="1.0.0")

register_exception_handlers(app)
app.include_router(facilities_router, prefix="/api/v1", tags=["facilities"])
app.include_router(facility_bookings_router, prefix="/api/v1", tags=["facility-booking"])

Path(settings.MEDIA_DIR).mkdir(parents=True, exist_ok=True)
app.mount(settings.MEDIA_URL, StaticFiles(directory=settings.MEDIA_DIR), name="media")


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
