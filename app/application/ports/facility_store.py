from __future__ import annotations

from abc import ABC, abstractmethod

from app.domain.entities.facility import Facility


class FacilityStorePort(ABC):
    @abstractmethod
    def add(self, facility: Facility) -> Facility:
        """Persist a new facility. Returns it with its assigned id.

        Raises FacilityExistsError if the (court, sport) pair is already registered.
        """
        raise NotImplementedError

    @abstractmethod
    def get(self, facility_id: str) -> Facility | None:
        raise NotImplementedError

    @abstractmethod
    def find(self, court_number: str, sport_name: str) -> Facility | None:
        raise NotImplementedError

    @abstractmethod
    def list_facilities(self, sport_name: str | None = None, active_only: bool = False) -> list[Facility]:
        raise NotImplementedError

    @abstractmethod
    def update(self, facility: Facility) -> Facility:
        """Replace a stored facility. Raises FacilityExistsError on a (court, sport) clash."""
        raise NotImplementedError

    @abstractmethod
    def delete(self, facility_id: str) -> bool:
        """Remove facility. Returns True if it existed."""
        raise NotImplementedError
