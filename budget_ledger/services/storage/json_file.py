"""
JSON File Storage Implementation

DESIGN DECISION: The document lives in a single JSON file named after
the storage key, the desktop equivalent of one browser local-storage slot:
1. The user can open and back up the file directly
2. No database setup required
3. One file per key keeps the "whole document, one write" model

TRADEOFFS:
- Two processes writing the same file: last writer wins, no detection
- A quota is enforced on write to mirror browser storage limits

Writes go to a temporary file first and are moved into place, so a
crash mid-write never leaves a truncated document behind.
"""

import os
import tempfile
from pathlib import Path
from typing import Optional

from budget_ledger.config import get_settings
from budget_ledger.services.storage.interface import (
    DocumentStorageInterface,
    StorageQuotaExceededError,
    StorageReadError,
    StorageWriteError,
)


class JsonFileStorage(DocumentStorageInterface):
    """
    Stores the serialized document at <data_dir>/<storage_key>.json.
    """

    def __init__(
        self,
        data_dir: Optional[Path] = None,
        storage_key: Optional[str] = None,
        max_bytes: Optional[int] = None,
    ):
        settings = get_settings().storage
        self._data_dir = Path(data_dir if data_dir is not None else settings.data_dir).expanduser()
        self._key = storage_key or settings.storage_key
        self._max_bytes = max_bytes if max_bytes is not None else settings.max_document_bytes

    @property
    def key(self) -> str:
        return self._key

    @property
    def path(self) -> Path:
        return self._data_dir / f"{self._key}.json"

    def read(self) -> Optional[str]:
        if not self.path.exists():
            return None
        try:
            return self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise StorageReadError(f"Failed to read {self.path}: {e}") from e

    def write(self, payload: str) -> None:
        encoded = payload.encode("utf-8")
        if self._max_bytes and len(encoded) > self._max_bytes:
            raise StorageQuotaExceededError(len(encoded), self._max_bytes)

        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._data_dir,
                prefix=f".{self._key}.",
                suffix=".tmp",
            )
            try:
                with os.fdopen(fd, "wb") as handle:
                    handle.write(encoded)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageWriteError(f"Failed to write {self.path}: {e}") from e

    def clear(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageWriteError(f"Failed to remove {self.path}: {e}") from e
