from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

DEFAULT_TIME_SLOTS: tuple[str, ...] = (
    "08:00 - 09:00",
    "09:00 - 10:00",
    "10:00 - 11:00",
    "11:00 - 12:00",
    "12:00 - 13:00",
    "13:00 - 14:00",
    "14:00 - 15:00",
    "15:00 - 16:00",
    "16:00 - 17:00",
    "17:00 - 18:00",
)


@dataclass(frozen=True)
class SlotCatalog:
    """Ordered set of bookable slot labels for one court-day."""

    slots: tuple[str, ...] = DEFAULT_TIME_SLOTS

    def __post_init__(self) -> None:
        if not self.slots:
            raise ValueError("Slot catalog must contain at least one slot")
        if len(set(self.slots)) != len(self.slots):
            raise ValueError("Slot catalog contains duplicate labels")

    def __iter__(self) -> Iterator[str]:
        return iter(self.slots)

    def __len__(self) -> int:
        return len(self.slots)

    def is_valid_slot(self, label: object) -> bool:
        return isinstance(label, str) and label in self.slots

    def invalid_slots(self, labels: Iterable[object]) -> list[object]:
        return [label for label in labels if not self.is_valid_slot(label)]

    def subtract(self, booked: Iterable[str]) -> list[str]:
        taken = set(booked)
        return [slot for slot in self.slots if slot not in taken]

    def ordered(self, labels: Iterable[str]) -> tuple[str, ...]:
        wanted = set(labels)
        return tuple(slot for slot in self.slots if slot in wanted)
