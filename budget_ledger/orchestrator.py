"""
Main Orchestrator for Budget Ledger

This module ties together all the components:
1. Storage backend → Store (load/save/reset)
2. Store → Ledger operations (the only writers)
3. Store → Aggregation engine (read-only views)
4. Store → Snapshot transfer (backup and restore)

DESIGN DECISION: The orchestrator owns the one document and the one
event bus. Nothing in the core holds a module-level document; the
presentation layer talks to a BudgetApp and subscribes to its events.

Every component shares the same audit logger and clock.
"""

from datetime import date
from typing import Optional

from budget_ledger.audit import AuditLogger, configure_logging
from budget_ledger.config import Settings, get_settings
from budget_ledger.ledger import EventBus, LedgerOperations
from budget_ledger.models.document import Clock, Entry, utc_now
from budget_ledger.models.months import current_month_key
from budget_ledger.models.results import (
    LoadResult,
    MonthlySavings,
    MonthlyTotal,
    MonthTotals,
    OperationResult,
)
from budget_ledger.queries import AggregationEngine
from budget_ledger.services.storage import DocumentStorageInterface, JsonFileStorage
from budget_ledger.store import DocumentStore
from budget_ledger.transfer import SnapshotTransfer
from budget_ledger.validation import EntryValidator


class BudgetApp:
    """
    Facade over the budget core.

    Usage:
        app = create_app_components()
        load = app.load()
        if load.warning:
            show(load.warning)
        app.ledger.add_entry({...})
        totals = app.aggregations.totals_for_month("2024-03")
    """

    def __init__(
        self,
        store: DocumentStore,
        ledger: LedgerOperations,
        transfer: SnapshotTransfer,
        events: EventBus,
        audit_logger: AuditLogger,
        settings: Settings,
    ):
        self.store = store
        self.ledger = ledger
        self.transfer = transfer
        self.events = events
        self.audit = audit_logger
        self.settings = settings

    @property
    def aggregations(self) -> AggregationEngine:
        """An engine over the current document. Cheap to build; do not cache."""
        return AggregationEngine(self.store.document)

    def load(self) -> LoadResult:
        return self.store.load()

    def reset_all(self) -> OperationResult:
        """Clear everything persisted and start again from a default document."""
        result = self.store.reset()
        if result:
            self.store.load()
        return result

    # -------------------------------------------------------------------------
    # Dashboard shortcuts using the configured defaults
    # -------------------------------------------------------------------------

    def current_month_totals(self, today: Optional[date] = None) -> MonthTotals:
        return self.aggregations.totals_for_month(current_month_key(today))

    def recent_transactions(self) -> list[Entry]:
        return self.aggregations.recent_transactions(
            self.settings.app.recent_transactions_limit
        )

    def expense_chart(self, today: Optional[date] = None) -> list[MonthlyTotal]:
        return self.aggregations.expense_series_for_window(
            current_month_key(today),
            self.settings.app.expense_window_months,
        )

    def savings_chart(self, today: Optional[date] = None) -> list[MonthlySavings]:
        return self.aggregations.savings_by_month(
            self.settings.app.savings_history_months,
            today=today,
        )


def create_app_components(
    storage: Optional[DocumentStorageInterface] = None,
    clock: Clock = utc_now,
    settings: Optional[Settings] = None,
) -> BudgetApp:
    """
    Factory function to create all application components.

    Args:
        storage: Storage backend. Defaults to the JSON file backend
                 configured by BUDGET_STORAGE_* settings.
        clock: Source of timestamps for every component.
        settings: Settings to use instead of get_settings().

    Returns:
        A BudgetApp whose document is loaded on first use.
    """
    settings = settings or get_settings()
    app_settings = settings.app

    configure_logging(app_settings.log_level)

    audit_logger = AuditLogger()
    events = EventBus()

    store = DocumentStore(
        storage or JsonFileStorage(),
        audit_logger=audit_logger,
        clock=clock,
        currency_locale=app_settings.currency_locale,
    )
    ledger = LedgerOperations(
        store,
        events=events,
        audit_logger=audit_logger,
        clock=clock,
        entry_validator=EntryValidator(app_settings.enforce_known_categories),
    )
    transfer = SnapshotTransfer(store, events=events, audit_logger=audit_logger)

    return BudgetApp(
        store=store,
        ledger=ledger,
        transfer=transfer,
        events=events,
        audit_logger=audit_logger,
        settings=settings,
    )
