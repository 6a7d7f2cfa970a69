from abc import ABC, abstractmethod


class FileStoragePort(ABC):
    @abstractmethod
    def save(self, content: bytes, folder: str, filename: str | None = None) -> str:
        """Store binary content. Returns an addressable URL."""
        raise NotImplementedError

    @abstractmethod
    def read(self, url: str) -> bytes | None:
        """Content previously stored under url, or None if it is not held here."""
        raise NotImplementedError

    @abstractmethod
    def delete(self, url: str) -> bool:
        """Remove the file behind url. Returns True if it existed."""
        raise NotImplementedError
