from __future__ import annotations

import logging
import re
import uuid
from pathlib import Path

from app.application.exceptions import PersistenceError
from app.application.ports.file_storage import FileStoragePort

_FOLDER_RE = re.compile(r"^[A-Za-z0-9_-]+$")
_SUFFIX_RE = re.compile(r"^\.[a-z0-9]{1,8}$")
_NAME_RE = re.compile(r"^[0-9a-f]{32}(\.[a-z0-9]{1,8})?$")


class LocalFileStorage(FileStoragePort):
    """Writes files under media_dir and addresses them below base_url."""

    def __init__(self, media_dir: str, base_url: str) -> None:
        self._media_dir = Path(media_dir)
        self._base_url = base_url.rstrip("/")
        self._logger = logging.getLogger(__name__)

    def save(self, content: bytes, folder: str, filename: str | None = None) -> str:
        if not _FOLDER_RE.match(folder):
            raise ValueError(f"Invalid storage folder: {folder!r}")

        suffix = Path(filename).suffix.lower() if filename else ""
        name = uuid.uuid4().hex + (suffix if _SUFFIX_RE.match(suffix) else "")

        target_dir = self._media_dir / folder
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
            (target_dir / name).write_bytes(content)
        except OSError as e:
            self._logger.error("File store failed", extra={"url": folder, "error": str(e)})
            raise PersistenceError(f"Cannot store file in {target_dir}: {e}") from e

        url = f"{self._base_url}/{folder}/{name}"
        self._logger.info("File stored", extra={"url": url, "size": len(content)})
        return url

    def read(self, url: str) -> bytes | None:
        path = self._path_for(url)
        if path is None or not path.is_file():
            return None
        try:
            return path.read_bytes()
        except OSError as e:
            raise PersistenceError(f"Cannot read {path}: {e}") from e

    def delete(self, url: str) -> bool:
        path = self._path_for(url)
        if path is None or not path.is_file():
            return False
        try:
            path.unlink()
        except OSError as e:
            raise PersistenceError(f"Cannot delete {path}: {e}") from e
        self._logger.info("File removed", extra={"url": url})
        return True

    def _path_for(self, url: str) -> Path | None:
        """File behind a URL this storage issued. None for foreign or malformed URLs."""
        prefix = f"{self._base_url}/"
        if not url or not url.startswith(prefix):
            return None
        folder, _, name = url[len(prefix):].partition("/")
        if not _FOLDER_RE.match(folder) or not _NAME_RE.match(name):
            return None
        return self._media_dir / folder / name
