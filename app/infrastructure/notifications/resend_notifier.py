from __future__ import annotations

import logging
from html import escape
from typing import Any

import httpx

from app.application.ports.notifier import NotifierPort


class ResendNotifier(NotifierPort):
    """Sends booking confirmations through the Resend HTTP API."""

    def __init__(
        self,
        api_key: str,
        from_email: str,
        base_url: str = "https://api.resend.com",
        business_name: str = "Sports Complex",
        client: httpx.Client | None = None,
    ) -> None:
        if not api_key:
            raise ValueError("RESEND_API_KEY is required for email notifications")
        self._api_key = api_key
        self._from_email = from_email
        self._base_url = base_url.rstrip("/")
        self._business_name = business_name
        self._client = client or httpx.Client(timeout=10.0)
        self._logger = logging.getLogger(__name__)

    def send_booking_confirmation(self, recipient: str, summary: dict[str, Any]) -> None:
        payload = {
            "from": self._from_email,
            "to": [recipient],
            "subject": f"{self._business_name}: booking confirmed",
            "html": self._render_html(summary),
            "text": self._render_text(summary),
        }
        headers = {"Authorization": f"Bearer {self._api_key}"}
        resp = self._client.post(f"{self._base_url}/emails", json=payload, headers=headers)
        if resp.status_code >= 400:
            self._logger.error(
                "Confirmation email send failed",
                extra={
                    "status": resp.status_code,
                    "error": resp.text,
                    "booking_id": summary.get("bookingId"),
                },
            )
            resp.raise_for_status()
        self._logger.info(
            "Confirmation email sent",
            extra={"recipient": recipient, "booking_id": summary.get("bookingId")},
        )

    def _lines(self, summary: dict[str, Any]) -> list[tuple[str, str]]:
        return [
            ("Booking ID", str(summary.get("bookingId") or "")),
            ("Sport", str(summary.get("sportName") or "")),
            ("Court", str(summary.get("courtNumber") or "")),
            ("Date", str(summary.get("date") or "")),
            ("Time slots", ", ".join(summary.get("timeSlots") or [])),
            ("Total hours", str(summary.get("totalHours") or "")),
            ("Total price", str(summary.get("totalPrice") or "")),
        ]

    def _render_text(self, summary: dict[str, Any]) -> str:
        greeting = f"Hi {summary.get('userName') or 'there'},"
        body = "\n".join(f"{label}: {value}" for label, value in self._lines(summary))
        return f"{greeting}\n\nYour booking is confirmed.\n\n{body}\n"

    def _render_html(self, summary: dict[str, Any]) -> str:
        rows = "".join(
            f"<tr><td><strong>{escape(label)}</strong></td><td>{escape(value)}</td></tr>"
            for label, value in self._lines(summary)
        )
        parts = [
            f"<p>Hi {escape(str(summary.get('userName') or 'there'))},</p>",
            "<p>Your booking is confirmed.</p>",
            f"<table>{rows}</table>",
        ]
        if summary.get("qrCode"):
            parts.append(f'<p><img src="{escape(summary["qrCode"])}" alt="Booking QR code"></p>')
        if summary.get("receipt"):
            parts.append(f'<p><a href="{escape(summary["receipt"])}">View receipt</a></p>')
        return "".join(parts)
