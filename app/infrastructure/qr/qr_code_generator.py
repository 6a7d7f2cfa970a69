from __future__ import annotations

import io
import json
from typing import Any

import qrcode

from app.application.ports.file_storage import FileStoragePort
from app.application.ports.qr_code import QrCodePort


class QrCodeGenerator(QrCodePort):
    def __init__(self, storage: FileStoragePort, folder: str = "facility_qrcodes") -> None:
        self._storage = storage
        self._folder = folder

    def generate(self, payload: dict[str, Any]) -> str:
        data = json.dumps(payload, ensure_ascii=False, default=str)
        img = qrcode.make(data)
        buf = io.BytesIO()
        img.save(buf, format="PNG")
        return self._storage.save(buf.getvalue(), self._folder, "qrcode.png")
