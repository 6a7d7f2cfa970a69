from abc import ABC, abstractmethod
from typing import Any


class QrCodePort(ABC):
    @abstractmethod
    def generate(self, payload: dict[str, Any]) -> str:
        """Render payload as a QR image. Returns an addressable URL."""
        raise NotImplementedError
