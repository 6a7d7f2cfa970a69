"""
Tests for file storage, QR rendering and the Resend email client.
"""

from __future__ import annotations

import json

import httpx
import pytest

from app.application.exceptions import PersistenceError
from app.infrastructure.notifications.resend_notifier import ResendNotifier
from app.infrastructure.qr.qr_code_generator import QrCodeGenerator
from app.infrastructure.storage.local_file_storage import LocalFileStorage

SUMMARY = {
    "bookingId": "b1",
    "userName": "Ana <script>",
    "sportName": "Tennis",
    "courtNumber": "1",
    "date": "2026-10-20",
    "timeSlots": ["09:00 - 10:00", "10:00 - 11:00"],
    "totalHours": 2,
    "totalPrice": "3000",
    "receipt": "http://localhost:8000/media/facility_receipts/r.png",
    "qrCode": "http://localhost:8000/media/facility_qrcodes/q.png",
}


def test_local_storage_writes_and_addresses_file(tmp_path):
    storage = LocalFileStorage(media_dir=str(tmp_path), base_url="http://localhost:8000/media/")

    url = storage.save(b"data", "facility_receipts", "Receipt.PNG")

    assert url.startswith("http://localhost:8000/media/facility_receipts/")
    assert url.endswith(".png")
    name = url.rsplit("/", 1)[1]
    assert (tmp_path / "facility_receipts" / name).read_bytes() == b"data"


def test_local_storage_drops_unsafe_suffix_and_folder(tmp_path):
    storage = LocalFileStorage(media_dir=str(tmp_path), base_url="/media")
    url = storage.save(b"x", "facility_receipts", "evil.p h p")
    assert "." not in url.rsplit("/", 1)[1]
    with pytest.raises(ValueError):
        storage.save(b"x", "../outside")


def test_qr_code_rendered_as_png(tmp_path):
    storage = LocalFileStorage(media_dir=str(tmp_path), base_url="/media")
    url = QrCodeGenerator(storage=storage).generate({"bookingId": "b1", "timeSlots": ["09:00 - 10:00"]})

    assert url.startswith("/media/facility_qrcodes/")
    name = url.rsplit("/", 1)[1]
    assert (tmp_path / "facility_qrcodes" / name).read_bytes().startswith(b"\x89PNG")


def test_resend_notifier_posts_email():
    """Payload, auth header and escaping of the confirmation email."""
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(200, json={"id": "email_1"})

    notifier = ResendNotifier(
        api_key="re_test",
        from_email="Bookings <bookings@example.com>",
        base_url="https://api.resend.test",
        business_name="Arena",
        client=httpx.Client(transport=httpx.MockTransport(handler)),
    )
    notifier.send_booking_confirmation("ana@example.com", SUMMARY)

    request = captured[0]
    body = json.loads(request.content)
    assert str(request.url) == "https://api.resend.test/emails"
    assert request.headers["Authorization"] == "Bearer re_test"
    assert body["to"] == ["ana@example.com"]
    assert body["subject"] == "Arena: booking confirmed"
    assert "09:00 - 10:00, 10:00 - 11:00" in body["text"]
    assert "&lt;script&gt;" in body["html"]
    assert SUMMARY["qrCode"] in body["html"]


def test_resend_notifier_raises_on_error_status():
    client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(422, json={"message": "bad"})))
    notifier = ResendNotifier(api_key="re_test", from_email="a@example.com", client=client)
    with pytest.raises(httpx.HTTPStatusError):
        notifier.send_booking_confirmation("ana@example.com", SUMMARY)


def test_resend_notifier_requires_key():
    with pytest.raises(ValueError):
        ResendNotifier(api_key="", from_email="a@example.com")


def test_local_storage_reads_and_deletes_own_files(tmp_path):
    storage = LocalFileStorage(media_dir=str(tmp_path), base_url="/media")
    url = storage.save(b"receipt", "facility_receipts", "r.jpg")

    assert storage.read(url) == b"receipt"
    assert storage.delete(url)
    assert storage.read(url) is None
    assert not storage.delete(url)

    assert storage.read("https://elsewhere.example/media/facility_receipts/x.png") is None
    assert storage.read("/media/../secrets/" + "0" * 32) is None
    assert not storage.delete("/media/facility_receipts/../../etc/passwd")


def test_local_storage_write_failure_is_persistence_error(tmp_path):
    blocker = tmp_path / "media"
    blocker.write_bytes(b"not a directory")
    storage = LocalFileStorage(media_dir=str(blocker), base_url="/media")
    with pytest.raises(PersistenceError):
        storage.save(b"x", "facility_receipts", "r.png")
