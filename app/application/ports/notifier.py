from abc import ABC, abstractmethod
from typing import Any


class NotifierPort(ABC):
    @abstractmethod
    def send_booking_confirmation(self, recipient: str, summary: dict[str, Any]) -> None:
        raise NotImplementedError
