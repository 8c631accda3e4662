"""
Result Models

Every ledger operation reports an explicit outcome instead of raising
into the caller, and every aggregation returns a typed view. These are
what the presentation layer renders.
"""

from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from budget_ledger.models.document import BudgetDocument, Money


class LedgerError(str, Enum):
    """Why an operation did not succeed. None of these are fatal."""
    NOT_FOUND = "not_found"
    PERSISTENCE_FAILED = "persistence_failed"
    VALIDATION_FAILED = "validation_failed"
    PROTECTED_CATEGORY = "protected_category"
    PAYMENT_EXCEEDS_BALANCE = "payment_exceeds_balance"


class OperationResult(BaseModel):
    """
    Outcome of a write.

    Truthy iff the operation succeeded, so callers can write
    `if ledger.add_entry(...):`.
    """

    success: bool
    error: Optional[LedgerError] = None
    message: str = ""
    entity_id: Optional[str] = None
    changed: bool = Field(
        default=True,
        description="False when the call succeeded without modifying anything"
    )
    details: dict[str, Any] = Field(default_factory=dict)

    def __bool__(self) -> bool:
        return self.success

    @classmethod
    def ok(
        cls,
        message: str = "",
        entity_id: Optional[str] = None,
        changed: bool = True,
        details: Optional[dict[str, Any]] = None,
    ) -> "OperationResult":
        return cls(
            success=True,
            message=message,
            entity_id=entity_id,
            changed=changed,
            details=details or {},
        )

    @classmethod
    def fail(
        cls,
        error: LedgerError,
        message: str,
        entity_id: Optional[str] = None,
        changed: bool = False,
    ) -> "OperationResult":
        return cls(
            success=False,
            error=error,
            message=message,
            entity_id=entity_id,
            changed=changed,
        )


class LoadStatus(str, Enum):
    LOADED = "loaded"
    CREATED = "created"            # nothing stored yet, default written
    RECOVERED = "recovered"        # stored data was corrupt, default written
    UNAVAILABLE = "unavailable"    # storage unreadable, default kept in memory only


class LoadResult(BaseModel):
    """What Store.load found. A warning is meant to be shown to the user."""

    document: BudgetDocument
    status: LoadStatus
    warning: Optional[str] = None
    persisted: bool = True


# =============================================================================
# AGGREGATION VIEWS
# =============================================================================

class MonthTotals(BaseModel):
    income: Money = Decimal("0")
    expense: Money = Decimal("0")
    remaining: Money = Decimal("0")


class MonthlyTotal(BaseModel):
    month_key: str
    total: Money


class MonthlySavings(BaseModel):
    month_key: str
    savings: Money
    label: str


class ExpenseSavingsPoint(BaseModel):
    month_key: str
    expense: Money
    savings: Money


class CategoryTotals(BaseModel):
    category: str
    income: Money = Decimal("0")
    expense: Money = Decimal("0")


class CategoryBreakdown(BaseModel):
    """Per-category summary table for one month."""

    month_key: str
    rows: list[CategoryTotals] = Field(default_factory=list)
    total_income: Money = Decimal("0")
    total_expense: Money = Decimal("0")
    balance: Money = Decimal("0")

    @property
    def is_empty(self) -> bool:
        return not self.rows


class GoalProgress(BaseModel):
    goal_id: str
    saved: Money
    remaining: Money
    progress: Decimal = Field(ge=0, le=100)


class LoanSummary(BaseModel):
    loan_id: str
    paid: Money
    remaining: Money
    progress: Decimal
    is_overdue: bool


class LoanTotals(BaseModel):
    principal: Money = Decimal("0")
    paid: Money = Decimal("0")
    remaining: Money = Decimal("0")
    loan_count: int = 0
