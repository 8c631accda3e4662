"""
Core Data Models for Budget Ledger

These models define the strict schemas for the persisted budget document.
They are designed to:
1. Enforce type safety at runtime
2. Provide clear validation error messages
3. Serialize to the exact JSON shape found in existing backups
4. Keep derived values (goal progress, totals) out of storage

DESIGN DECISION: Field names are snake_case in Python and camelCase on
disk (createdAt, paidAmount, ...). Both spellings are accepted on input,
so old backups and keyword construction both work.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Annotated, Callable, Optional
from uuid import uuid4

from pydantic import (
    AfterValidator,
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    field_validator,
)
from pydantic.alias_generators import to_camel

from budget_ledger.models.months import is_month_key


SCHEMA_VERSION = "1"

SAVINGS_CATEGORY = "Savings"
LOAN_PAYMENT_CATEGORY = "Loan Payment"

# Categories the ledger itself writes; always accepted on entries.
SYSTEM_CATEGORIES = (SAVINGS_CATEGORY, LOAN_PAYMENT_CATEGORY)

DEFAULT_EXPENSE_CATEGORIES = (
    "Rent / Mortgage",
    "Groceries / Food",
    "Utilities (Electricity, Water)",
    "Mobile / Internet",
    "Transport",
    "Fuel",
    "Health / Medical",
    "Insurance",
    "Entertainment",
    "Subscriptions",
    "Education",
    "Shopping",
    "Household",
    "Gifts / Donations",
    SAVINGS_CATEGORY,
    "Miscellaneous",
)

# Decimal in Python, plain JSON number on disk. JSON numbers are doubles,
# so only about 15 significant digits survive a save and reload.
Money = Annotated[
    Decimal,
    PlainSerializer(float, return_type=float, when_used="json"),
]

Clock = Callable[[], datetime]

# Entries have a field called "date"; annotate it through this name
# so the field never shadows the type.
CalendarDate = date


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def assume_utc(value: datetime) -> datetime:
    """Timestamps without a zone are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# Every stored timestamp is timezone-aware, so any two can be compared.
Timestamp = Annotated[datetime, AfterValidator(assume_utc)]


def new_id() -> str:
    return str(uuid4())


def is_default_category(name: str) -> bool:
    folded = name.strip().lower()
    return any(folded == default.lower() for default in DEFAULT_EXPENSE_CATEGORIES)


class CamelModel(BaseModel):
    """Base for every persisted model: camelCase on disk, snake_case in code."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


# =============================================================================
# ENUMS
# =============================================================================

class EntryType(str, Enum):
    """An entry is either money in or money out. Savings are expenses."""
    INCOME = "income"
    EXPENSE = "expense"


# =============================================================================
# LEDGER RECORDS
# =============================================================================

class EntryDraft(CamelModel):
    """
    An income or expense record before the ledger has accepted it.

    The ledger assigns id and timestamps when the draft is added.
    """

    type: EntryType
    amount: Money = Field(
        ...,
        gt=0,
        description="Amount, always positive; the type carries the sign"
    )
    category: str = Field(
        ...,
        min_length=1,
        max_length=100,
    )
    description: str = Field(
        default="",
        max_length=500,
    )
    date: CalendarDate
    note: Optional[str] = Field(
        default=None,
        max_length=1000,
    )
    goal_id: Optional[str] = Field(
        default=None,
        description="Goal this savings entry was made for, if any"
    )


class Entry(EntryDraft):
    """
    A single transaction stored in a month bucket.

    The bucket is chosen from the date at creation time. Editing the
    date later does not move the entry.
    """

    id: str = Field(default_factory=new_id)
    created_at: Timestamp
    updated_at: Timestamp


class EntryUpdate(CamelModel):
    """Partial update for an entry. Identity and timestamps are not editable."""

    model_config = ConfigDict(extra="forbid")

    type: Optional[EntryType] = None
    amount: Optional[Money] = Field(default=None, gt=0)
    category: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    date: Optional[CalendarDate] = None
    note: Optional[str] = Field(default=None, max_length=1000)
    goal_id: Optional[str] = None


class LoanDraft(CamelModel):
    """A loan as entered by the user."""

    name: str = Field(..., min_length=1, max_length=200)
    lender: Optional[str] = Field(default=None, max_length=200)
    principal: Money = Field(..., gt=0)
    paid_amount: Money = Field(default=Decimal("0"), ge=0)
    due_date: Optional[date] = None
    notes: Optional[str] = Field(default=None, max_length=1000)


class Loan(LoanDraft):
    """
    A tracked loan.

    paid_amount <= principal is only enforced when a payment is added;
    a direct update may set any non-negative value.
    """

    id: str = Field(default_factory=new_id)
    created_at: Optional[Timestamp] = None
    updated_at: Optional[Timestamp] = None


class LoanUpdate(CamelModel):
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    lender: Optional[str] = Field(default=None, max_length=200)
    principal: Optional[Money] = Field(default=None, gt=0)
    paid_amount: Optional[Money] = Field(default=None, ge=0)
    due_date: Optional[date] = None
    notes: Optional[str] = Field(default=None, max_length=1000)


class GoalDraft(CamelModel):
    """A savings goal as entered by the user."""

    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)
    # Zero is tolerated; progress treats it as "reached once anything is saved"
    target_amount: Money = Field(..., ge=0)
    target_date: date


class Goal(GoalDraft):
    """A savings goal. Progress is derived from savings entries, never stored."""

    id: str = Field(default_factory=new_id)
    created_at: Optional[Timestamp] = None
    updated_at: Optional[Timestamp] = None


class GoalUpdate(CamelModel):
    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)
    target_amount: Optional[Money] = Field(default=None, ge=0)
    target_date: Optional[date] = None


# =============================================================================
# DOCUMENT
# =============================================================================

class DocumentMeta(CamelModel):
    schema_version: str = Field(
        default=SCHEMA_VERSION,
        validation_alias=AliasChoices("schemaVersion", "schema_version", "version"),
    )
    last_updated: Timestamp = Field(default_factory=utc_now)


class DocumentSettings(CamelModel):
    currency_locale: str = "en-IN"
    expense_categories: list[str] = Field(
        default_factory=lambda: list(DEFAULT_EXPENSE_CATEGORIES)
    )


class BudgetDocument(CamelModel):
    """
    The single persisted aggregate root.

    Entries are bucketed by month key; loans and goals are flat lists.
    The whole document is rewritten on every mutation.
    """

    meta: DocumentMeta
    settings: DocumentSettings
    entries: dict[str, list[Entry]]
    loans: list[Loan] = Field(default_factory=list)
    goals: list[Goal] = Field(default_factory=list)

    @field_validator('entries')
    @classmethod
    def validate_bucket_keys(cls, v: dict[str, list[Entry]]) -> dict[str, list[Entry]]:
        """Bucket keys must be month keys. Entry dates are not checked against them."""
        bad = [key for key in v if not is_month_key(key)]
        if bad:
            raise ValueError(f"Invalid month bucket keys: {', '.join(sorted(bad))}")
        return v

    @classmethod
    def create_default(
        cls,
        currency_locale: str = "en-IN",
        now: Optional[datetime] = None,
    ) -> "BudgetDocument":
        """A fresh document with no records and the default categories."""
        return cls(
            meta=DocumentMeta(last_updated=now or utc_now()),
            settings=DocumentSettings(currency_locale=currency_locale),
            entries={},
            loans=[],
            goals=[],
        )

    def all_entries(self) -> list[Entry]:
        """Every entry, bucket by bucket, in stored order."""
        return [entry for bucket in self.entries.values() for entry in bucket]

    def find_entry(self, entry_id: str) -> Optional[tuple[str, int]]:
        """Locate an entry by id across all buckets as (month_key, index)."""
        for key, bucket in self.entries.items():
            for index, entry in enumerate(bucket):
                if entry.id == entry_id:
                    return key, index
        return None

    def find_loan(self, loan_id: str) -> Optional[int]:
        for index, loan in enumerate(self.loans):
            if loan.id == loan_id:
                return index
        return None

    def find_goal(self, goal_id: str) -> Optional[int]:
        for index, goal in enumerate(self.goals):
            if goal.id == goal_id:
                return index
        return None

    def to_json_dict(self) -> dict:
        """The on-disk shape: camelCase keys, JSON-native values."""
        return self.model_dump(mode="json", by_alias=True)
