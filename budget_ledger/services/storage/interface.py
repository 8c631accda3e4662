"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Keep the document in a local JSON file today
2. Use in-memory storage for testing
3. Swap in another key-value backend without touching the ledger

The interface is intentionally tiny. The whole document is stored as
one serialized string under one namespaced key: there are no partial
writes, so there is nothing to query.
"""

from abc import ABC, abstractmethod
from typing import Optional


class DocumentStorageInterface(ABC):
    """
    Abstract interface for whole-document storage.

    Implementations hold at most one serialized document under their key.
    """

    @property
    @abstractmethod
    def key(self) -> str:
        """The namespaced key the document is stored under."""
        pass

    @abstractmethod
    def read(self) -> Optional[str]:
        """
        Read the stored document text.

        Returns:
            The serialized document, or None if nothing is stored

        Raises:
            StorageReadError: If the backend cannot be read
        """
        pass

    @abstractmethod
    def write(self, payload: str) -> None:
        """
        Replace the stored document with payload.

        Raises:
            StorageQuotaExceededError: If payload is larger than the backend allows
            StorageWriteError: If the write fails for any other reason
        """
        pass

    @abstractmethod
    def clear(self) -> None:
        """
        Remove the stored document. Clearing an empty store is not an error.

        Raises:
            StorageWriteError: If the document exists but cannot be removed
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StorageReadError(StorageError):
    """Stored data exists but could not be read."""
    pass


class StorageWriteError(StorageError):
    """Could not write to the storage backend."""
    pass


class StorageQuotaExceededError(StorageWriteError):
    """The serialized document is larger than the backend accepts."""

    def __init__(self, size_bytes: int, limit_bytes: int):
        self.size_bytes = size_bytes
        self.limit_bytes = limit_bytes
        super().__init__(
            f"Storage quota exceeded: document is {size_bytes} bytes, "
            f"limit is {limit_bytes} bytes"
        )
