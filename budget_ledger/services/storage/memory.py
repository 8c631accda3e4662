"""
In-Memory Storage

A dictionary-backed store used by tests and by embedders that
persist the snapshot themselves.
"""

from typing import Optional

from budget_ledger.services.storage.interface import (
    DocumentStorageInterface,
    StorageQuotaExceededError,
)


class InMemoryStorage(DocumentStorageInterface):
    """
    Keeps serialized documents in a dict keyed by storage key.

    Several instances may share one `slots` dict to simulate two
    application instances writing the same storage.
    """

    def __init__(
        self,
        storage_key: str = "hb_budget_v1",
        max_bytes: Optional[int] = None,
        slots: Optional[dict[str, str]] = None,
    ):
        self._key = storage_key
        self._max_bytes = max_bytes
        self.slots = slots if slots is not None else {}
        self.write_count = 0

    @property
    def key(self) -> str:
        return self._key

    def read(self) -> Optional[str]:
        return self.slots.get(self._key)

    def write(self, payload: str) -> None:
        size = len(payload.encode("utf-8"))
        if self._max_bytes is not None and size > self._max_bytes:
            raise StorageQuotaExceededError(size, self._max_bytes)
        self.slots[self._key] = payload
        self.write_count += 1

    def clear(self) -> None:
        self.slots.pop(self._key, None)
