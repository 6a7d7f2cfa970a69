from __future__ import annotations

import logging
from typing import Any

from app.application.ports.notifier import NotifierPort


class MockNotifier(NotifierPort):
    def __init__(self) -> None:
        self.sent: list[tuple[str, dict[str, Any]]] = []
        self._logger = logging.getLogger(__name__)

    def send_booking_confirmation(self, recipient: str, summary: dict[str, Any]) -> None:
        self.sent.append((recipient, dict(summary)))
        self._logger.info(
            "Mock booking confirmation",
            extra={"recipient": recipient, "booking_id": summary.get("bookingId")},
        )
