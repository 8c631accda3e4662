"""
Storage Services Package

Provides the abstract document storage interface and concrete backends.
The JSON file backend is the default; the in-memory backend serves tests.
"""

from budget_ledger.services.storage.interface import (
    DocumentStorageInterface,
    StorageError,
    StorageQuotaExceededError,
    StorageReadError,
    StorageWriteError,
)
from budget_ledger.services.storage.json_file import JsonFileStorage
from budget_ledger.services.storage.memory import InMemoryStorage

__all__ = [
    # Interfaces
    "DocumentStorageInterface",
    # Exceptions
    "StorageError",
    "StorageQuotaExceededError",
    "StorageReadError",
    "StorageWriteError",
    # Implementations
    "InMemoryStorage",
    "JsonFileStorage",
]
