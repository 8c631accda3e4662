"""
Data Models Package

This package contains all Pydantic models used in Budget Ledger.
The persisted document and every derived view conform to these schemas.
"""

from budget_ledger.models.document import (
    DEFAULT_EXPENSE_CATEGORIES,
    LOAN_PAYMENT_CATEGORY,
    SAVINGS_CATEGORY,
    SCHEMA_VERSION,
    SYSTEM_CATEGORIES,
    BudgetDocument,
    Clock,
    DocumentMeta,
    DocumentSettings,
    Entry,
    EntryDraft,
    EntryType,
    EntryUpdate,
    Goal,
    GoalDraft,
    GoalUpdate,
    Loan,
    LoanDraft,
    LoanUpdate,
    is_default_category,
    utc_now,
)
from budget_ledger.models.results import (
    CategoryBreakdown,
    CategoryTotals,
    ExpenseSavingsPoint,
    GoalProgress,
    LedgerError,
    LoadResult,
    LoadStatus,
    LoanSummary,
    LoanTotals,
    MonthlySavings,
    MonthlyTotal,
    MonthTotals,
    OperationResult,
)
from budget_ledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Document models
    "DEFAULT_EXPENSE_CATEGORIES",
    "LOAN_PAYMENT_CATEGORY",
    "SAVINGS_CATEGORY",
    "SCHEMA_VERSION",
    "SYSTEM_CATEGORIES",
    "BudgetDocument",
    "Clock",
    "DocumentMeta",
    "DocumentSettings",
    "Entry",
    "EntryDraft",
    "EntryType",
    "EntryUpdate",
    "Goal",
    "GoalDraft",
    "GoalUpdate",
    "Loan",
    "LoanDraft",
    "LoanUpdate",
    "is_default_category",
    "utc_now",
    # Result models
    "CategoryBreakdown",
    "CategoryTotals",
    "ExpenseSavingsPoint",
    "GoalProgress",
    "LedgerError",
    "LoadResult",
    "LoadStatus",
    "LoanSummary",
    "LoanTotals",
    "MonthlySavings",
    "MonthlyTotal",
    "MonthTotals",
    "OperationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
