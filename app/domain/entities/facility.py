from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True)
class Facility:
    facility_id: str | None
    court_number: str
    sport_name: str
    court_price: Decimal  # per one-hour slot
    sport_category: str | None = None
    image_url: str | None = None
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None
