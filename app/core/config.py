from pydantic_settings import BaseSettings, SettingsConfigDict

from app.domain.entities.time_slot import DEFAULT_TIME_SLOTS


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    APP_NAME: str = "Court Booking Service"
    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    BOOKING_STORE: str = "memory"  # "memory" | "json"
    DATA_DIR: str = "./data"

    # Receipts and QR images
    MEDIA_DIR: str = "./media"
    MEDIA_URL: str = "/media"
    PUBLIC_BASE_URL: str = "http://localhost:8000"

    # JSON list in the environment, e.g. TIME_SLOTS='["08:00 - 09:00", "09:00 - 10:00"]'
    TIME_SLOTS: list[str] = list(DEFAULT_TIME_SLOTS)

    RESEND_API_KEY: str | None = None
    RESEND_API_URL: str = "https://api.resend.com"
    EMAIL_FROM: str = "Bookings <bookings@example.com>"
    BUSINESS_NAME: str = "Sports Complex"


settings = Settings()
