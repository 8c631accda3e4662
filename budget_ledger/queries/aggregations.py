"""
Aggregation Engine

DESIGN DECISION: Aggregation is read-only and DETERMINISTIC.
Every method is a function of the document snapshot and its arguments.
The only wall-clock dependencies are savings_by_month and loan_summary,
and both accept `today` so callers and tests can pin it.

GUARANTEES:
- Never mutates the document
- Missing month buckets count as zero, never as an error
- Invalid month keys and window sizes raise ValueError
"""

from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from budget_ledger.models.document import (
    SAVINGS_CATEGORY,
    BudgetDocument,
    Entry,
    EntryType,
    Goal,
    Loan,
)
from budget_ledger.models.months import (
    current_month_key,
    month_label,
    month_window,
    parse_month_key,
)
from budget_ledger.models.results import (
    CategoryBreakdown,
    CategoryTotals,
    ExpenseSavingsPoint,
    GoalProgress,
    LoanSummary,
    LoanTotals,
    MonthlySavings,
    MonthlyTotal,
    MonthTotals,
)
from budget_ledger.queries.goals import GoalMatcher, LinkedOrTitleMatcher

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def is_savings(entry: Entry) -> bool:
    return (
        entry.type == EntryType.EXPENSE
        and entry.category.lower() == SAVINGS_CATEGORY.lower()
    )


def _sum(entries: Iterable[Entry]) -> Decimal:
    return sum((entry.amount for entry in entries), ZERO)


def _clamp_percent(value: Decimal) -> Decimal:
    return max(ZERO, min(value, HUNDRED))


class AggregationEngine:
    """
    Derived views over one document snapshot.

    Build a new engine after the document is replaced; the engine
    reads whatever document it was given.
    """

    def __init__(
        self,
        document: BudgetDocument,
        goal_matcher: Optional[GoalMatcher] = None,
    ):
        self._document = document
        self._goal_matcher = goal_matcher or LinkedOrTitleMatcher()

    def _bucket(self, month_key: str) -> list[Entry]:
        parse_month_key(month_key)
        return self._document.entries.get(month_key, [])

    # -------------------------------------------------------------------------
    # Monthly totals
    # -------------------------------------------------------------------------

    def totals_for_month(self, month_key: str) -> MonthTotals:
        """Income, expense and remaining (income - expense) for one month."""
        bucket = self._bucket(month_key)
        income = _sum(e for e in bucket if e.type == EntryType.INCOME)
        expense = _sum(e for e in bucket if e.type == EntryType.EXPENSE)
        return MonthTotals(income=income, expense=expense, remaining=income - expense)

    def category_breakdown(self, month_key: str) -> CategoryBreakdown:
        """Income and expense per category for one month, sorted by category."""
        totals: dict[str, CategoryTotals] = {}
        for entry in self._bucket(month_key):
            row = totals.setdefault(entry.category, CategoryTotals(category=entry.category))
            if entry.type == EntryType.INCOME:
                row.income += entry.amount
            else:
                row.expense += entry.amount

        rows = [totals[name] for name in sorted(totals)]
        total_income = sum((row.income for row in rows), ZERO)
        total_expense = sum((row.expense for row in rows), ZERO)
        return CategoryBreakdown(
            month_key=month_key,
            rows=rows,
            total_income=total_income,
            total_expense=total_expense,
            balance=total_income - total_expense,
        )

    def recent_transactions(self, limit: int = 10) -> list[Entry]:
        """
        The newest entries across all months.

        Sorted by date, newest first; entries on the same date are
        ordered by creation time, newest first, then by stored order.
        """
        if limit < 0:
            raise ValueError(f"limit must not be negative, got {limit}")
        entries = self._document.all_entries()
        entries.sort(key=lambda e: (e.date, e.created_at), reverse=True)
        return entries[:limit]

    # -------------------------------------------------------------------------
    # Rolling windows
    # -------------------------------------------------------------------------

    def expense_series_for_window(self, end_month_key: str, months_count: int = 5) -> list[MonthlyTotal]:
        """
        Expense totals for months_count consecutive months ending at
        end_month_key (inclusive), oldest first.
        """
        series = []
        for key in month_window(end_month_key, months_count):
            bucket = self._document.entries.get(key, [])
            total = _sum(e for e in bucket if e.type == EntryType.EXPENSE)
            series.append(MonthlyTotal(month_key=key, total=total))
        return series

    def expense_savings_series(self, end_month_key: str, months_count: int = 6) -> list[ExpenseSavingsPoint]:
        """Like expense_series_for_window, with the savings share alongside."""
        series = []
        for key in month_window(end_month_key, months_count):
            bucket = self._document.entries.get(key, [])
            series.append(ExpenseSavingsPoint(
                month_key=key,
                expense=_sum(e for e in bucket if e.type == EntryType.EXPENSE),
                savings=_sum(e for e in bucket if is_savings(e)),
            ))
        return series

    # -------------------------------------------------------------------------
    # Savings
    # -------------------------------------------------------------------------

    def savings_for_month(self, month_key: str) -> Decimal:
        return _sum(e for e in self._bucket(month_key) if is_savings(e))

    def total_savings(self) -> Decimal:
        return _sum(e for e in self._document.all_entries() if is_savings(e))

    def savings_by_month(self, months_count: int = 12, today: Optional[date] = None) -> list[MonthlySavings]:
        """
        Savings per month for the months_count months ending with the
        current month, oldest first. `today` pins the current month.
        """
        return [
            MonthlySavings(
                month_key=key,
                savings=self.savings_for_month(key),
                label=month_label(key),
            )
            for key in month_window(current_month_key(today), months_count)
        ]

    # -------------------------------------------------------------------------
    # Goals
    # -------------------------------------------------------------------------

    def goal_savings(self, goal: Goal) -> Decimal:
        """Total of the savings entries that count toward goal."""
        return _sum(
            e for e in self._document.all_entries()
            if is_savings(e) and self._goal_matcher.matches(e, goal)
        )

    def goal_progress(self, goal: Goal) -> Decimal:
        """
        Percentage of the goal's target reached, clamped to [0, 100].

        A zero target counts as complete once any matching savings exist.
        """
        saved = self.goal_savings(goal)
        if goal.target_amount <= ZERO:
            return HUNDRED if saved > ZERO else ZERO
        return _clamp_percent(saved / goal.target_amount * HUNDRED)

    def goal_summary(self, goal: Goal) -> GoalProgress:
        saved = self.goal_savings(goal)
        return GoalProgress(
            goal_id=goal.id,
            saved=saved,
            remaining=max(goal.target_amount - saved, ZERO),
            progress=self.goal_progress(goal),
        )

    # -------------------------------------------------------------------------
    # Loans
    # -------------------------------------------------------------------------

    def loan_summary(self, loan: Loan, today: Optional[date] = None) -> LoanSummary:
        """Repayment state of one loan. Overdue means past due and not paid off."""
        today = today or date.today()
        remaining = loan.principal - loan.paid_amount
        return LoanSummary(
            loan_id=loan.id,
            paid=loan.paid_amount,
            remaining=remaining,
            progress=_clamp_percent(loan.paid_amount / loan.principal * HUNDRED),
            is_overdue=bool(loan.due_date and loan.due_date < today and remaining > ZERO),
        )

    def loan_totals(self) -> LoanTotals:
        loans = self._document.loans
        principal = sum((loan.principal for loan in loans), ZERO)
        paid = sum((loan.paid_amount for loan in loans), ZERO)
        return LoanTotals(
            principal=principal,
            paid=paid,
            remaining=principal - paid,
            loan_count=len(loans),
        )
