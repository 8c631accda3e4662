"""Snapshot import/export package."""

from budget_ledger.transfer.snapshot import (
    BACKUP_FILENAME_TEMPLATE,
    ImportMode,
    SnapshotTransfer,
    backup_filename,
)

__all__ = [
    "BACKUP_FILENAME_TEMPLATE",
    "ImportMode",
    "SnapshotTransfer",
    "backup_filename",
]
