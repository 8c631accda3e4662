"""Services package."""

from budget_ledger.services.storage import (
    DocumentStorageInterface,
    InMemoryStorage,
    JsonFileStorage,
    StorageError,
    StorageQuotaExceededError,
    StorageReadError,
    StorageWriteError,
)

__all__ = [
    "DocumentStorageInterface",
    "InMemoryStorage",
    "JsonFileStorage",
    "StorageError",
    "StorageQuotaExceededError",
    "StorageReadError",
    "StorageWriteError",
]
