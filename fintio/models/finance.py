"""
Core Data Models for the Fintio Dashboard Client

These models describe the JSON shapes the backend returns and accepts.
They are designed to:
1. Accept the backend's camelCase keys (and its Mongo-style "_id")
2. Keep unknown fields instead of dropping them
3. Serialize create/update payloads exactly as the backend expects

DESIGN DECISION: Entities are pass-through shapes. Balances and
aggregates come from the server; pages only add up rows for display.
Amounts are Decimal so those sums are exact. They are sent back to the
backend as JSON numbers.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel


# Money in the JSON wire format is a plain number
Money = Annotated[
    Decimal,
    PlainSerializer(float, return_type=float, when_used="json"),
]


def total(amounts: Iterable[Decimal]) -> Decimal:
    """Exact sum of amounts (0 for none)."""
    return sum(amounts, Decimal("0"))


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionType(str, Enum):
    """Direction of a budget transaction."""
    INCOME = "income"
    EXPENSE = "expense"


class RuleBucket(str, Enum):
    """
    Budgeting-rule bucket of an expense category.

    Drives the needs/wants/savings split of the breakdown.
    """
    NEEDS = "needs"
    WANTS = "wants"
    SAVINGS = "savings"


class AccountType(str, Enum):
    CHECKING = "checking"
    SAVINGS = "savings"
    CREDIT = "credit"
    INVESTMENT = "investment"
    OTHER = "other"


class AccountTransactionType(str, Enum):
    """Movements that change an account balance without being budget lines."""
    TRANSFER = "transfer"
    INTEREST = "interest"
    ADJUSTMENT = "adjustment"


class TransferDirection(str, Enum):
    OUT = "out"
    IN = "in"


class Frequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class BillingCycle(str, Enum):
    MONTHLY = "monthly"
    YEARLY = "yearly"


class GoalPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ContributionType(str, Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"


# =============================================================================
# BASE MODELS
# =============================================================================

class ApiModel(BaseModel):
    """
    Base for every shape exchanged with the backend.

    Python attributes are snake_case; the wire format is camelCase.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="allow",
    )

    def to_payload(self) -> dict[str, Any]:
        """Serialize for a create request (unset optionals are omitted)."""
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


class UpdateModel(ApiModel):
    """
    Base for partial updates.

    Only fields the caller actually set are sent, so an explicit None
    (e.g. clearing an end date) still reaches the server.
    """

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json", exclude_unset=True)


class Entity(ApiModel):
    """A server-owned record: has an id and belongs to one budget."""

    id: str = Field(
        ...,
        alias="_id",
        description="Server-assigned identifier"
    )
    budget_id: str = Field(
        ...,
        description="Budget this record belongs to"
    )
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# =============================================================================
# ACCOUNTS
# =============================================================================

class Account(Entity):
    name: str
    type: AccountType = AccountType.OTHER
    balance: Money = Decimal("0")
    currency: str = "USD"
    is_active: bool = True


class AccountCreate(ApiModel):
    budget_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    type: AccountType
    balance: Money
    currency: str = Field(..., min_length=1)


class AccountUpdate(UpdateModel):
    name: Optional[str] = None
    type: Optional[AccountType] = None
    balance: Optional[Money] = None
    currency: Optional[str] = None
    is_active: Optional[bool] = None


# =============================================================================
# TRANSACTIONS
# =============================================================================

class Transaction(Entity):
    """A budget line: income or expense against a category."""

    date: datetime
    type: TransactionType
    category_id: str
    category_name: str
    amount: Money
    description: Optional[str] = None
    is_recurring: bool = False
    recurring_id: Optional[str] = None
    month: Optional[int] = Field(default=None, ge=1, le=12)
    year: Optional[int] = None
    account_id: Optional[str] = None
    account_name: Optional[str] = None


class TransactionCreate(ApiModel):
    budget_id: str = Field(..., min_length=1)
    date: datetime
    type: TransactionType
    category_id: str
    category_name: str
    amount: Money = Field(..., gt=0)
    description: Optional[str] = None
    is_recurring: Optional[bool] = None
    recurring_id: Optional[str] = None
    account_id: Optional[str] = None
    account_name: Optional[str] = None


class TransactionUpdate(UpdateModel):
    date: Optional[datetime] = None
    type: Optional[TransactionType] = None
    category_id: Optional[str] = None
    category_name: Optional[str] = None
    amount: Optional[Money] = Field(default=None, gt=0)
    description: Optional[str] = None
    account_id: Optional[str] = None
    account_name: Optional[str] = None


class AccountTransaction(Entity):
    """
    A balance movement on an account.

    Transfers are stored as a linked pair sharing transfer_id, one
    leg per direction.
    """

    account_id: str
    account_name: str
    type: AccountTransactionType
    amount: Money
    date: datetime
    month: Optional[int] = Field(default=None, ge=1, le=12)
    year: Optional[int] = None
    description: Optional[str] = None
    to_account_id: Optional[str] = None
    to_account_name: Optional[str] = None
    transfer_id: Optional[str] = None
    transfer_direction: Optional[TransferDirection] = None


class AccountTransactionCreate(ApiModel):
    budget_id: str = Field(..., min_length=1)
    account_id: str
    account_name: str
    type: AccountTransactionType
    amount: Money
    date: datetime
    description: Optional[str] = None
    to_account_id: Optional[str] = None
    to_account_name: Optional[str] = None


# =============================================================================
# CATEGORIES
# =============================================================================

class IncomeCategory(Entity):
    name: str
    projected_amount: Money = Decimal("0")
    order: int = 0


class ExpenseCategory(IncomeCategory):
    category: RuleBucket


class CategoryUpdate(UpdateModel):
    name: Optional[str] = None
    projected_amount: Optional[Money] = Field(default=None, ge=0)
    # Expense categories only
    category: Optional[RuleBucket] = None


class CategoryOrder(ApiModel):
    id: str
    order: int = Field(..., ge=0)


class IncomeCategoryCreate(ApiModel):
    budget_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    projected_amount: Money = Field(..., ge=0)
    order: Optional[int] = Field(default=None, ge=0)


class ExpenseCategoryCreate(IncomeCategoryCreate):
    category: RuleBucket



# =============================================================================
# RECURRING TRANSACTIONS
# =============================================================================

class RecurringTransaction(Entity):
    type: TransactionType
    category_id: str
    category_name: str
    amount: Money
    description: Optional[str] = None
    frequency: Frequency
    start_date: datetime
    end_date: Optional[datetime] = None
    day_of_month: Optional[int] = Field(default=None, ge=1, le=31)
    is_active: bool = True
    is_subscription: bool = False


class RecurringTransactionCreate(ApiModel):
    budget_id: str = Field(..., min_length=1)
    type: TransactionType
    category_id: str
    category_name: str
    amount: Money = Field(..., gt=0)
    description: Optional[str] = None
    frequency: Frequency
    start_date: datetime
    end_date: Optional[datetime] = None
    day_of_month: Optional[int] = Field(default=None, ge=1, le=31)
    is_subscription: Optional[bool] = None


class RecurringTransactionUpdate(UpdateModel):
    amount: Optional[Money] = Field(default=None, gt=0)
    description: Optional[str] = None
    frequency: Optional[Frequency] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    day_of_month: Optional[int] = Field(default=None, ge=1, le=31)
    is_active: Optional[bool] = None


# =============================================================================
# SUBSCRIPTIONS
# =============================================================================

class Subscription(Entity):
    name: str
    amount: Money
    billing_cycle: BillingCycle
    next_billing_date: datetime
    category: str
    is_active: bool = True


class SubscriptionCreate(ApiModel):
    budget_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    amount: Money = Field(..., ge=0)
    billing_cycle: BillingCycle
    next_billing_date: datetime
    category: str


class SubscriptionUpdate(UpdateModel):
    name: Optional[str] = None
    amount: Optional[Money] = Field(default=None, ge=0)
    billing_cycle: Optional[BillingCycle] = None
    next_billing_date: Optional[datetime] = None
    category: Optional[str] = None
    is_active: Optional[bool] = None


# =============================================================================
# SAVINGS GOALS
# =============================================================================

class SavingsContribution(ApiModel):
    date: datetime
    amount: Money
    type: ContributionType
    note: Optional[str] = None


class SavingsGoal(Entity):
    name: str
    target_amount: Money
    current_amount: Money = Decimal("0")
    deadline: Optional[datetime] = None
    priority: GoalPriority
    is_completed: bool = False
    contributions: list[SavingsContribution] = Field(default_factory=list)

    @property
    def progress(self) -> float:
        """Fraction of the target reached, capped at 1.0."""
        if self.target_amount <= 0:
            return 0.0
        return float(min(self.current_amount / self.target_amount, Decimal("1")))


class SavingsGoalCreate(ApiModel):
    budget_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    target_amount: Money = Field(..., gt=0)
    current_amount: Optional[Money] = Field(default=None, ge=0)
    deadline: Optional[datetime] = None
    priority: GoalPriority


class SavingsGoalUpdate(UpdateModel):
    name: Optional[str] = None
    target_amount: Optional[Money] = Field(default=None, gt=0)
    current_amount: Optional[Money] = Field(default=None, ge=0)
    deadline: Optional[datetime] = None
    priority: Optional[GoalPriority] = None
    is_completed: Optional[bool] = None
    contributions: Optional[list[SavingsContribution]] = None


# =============================================================================
# USERS & BUDGETS
# =============================================================================

class UserSettings(ApiModel):
    """Per-user preferences chosen during setup."""

    country: str = Field(..., min_length=1)
    currency: str = Field(..., min_length=1)
    currency_symbol: str = Field(..., min_length=1)
    starting_month: int = Field(default=1, ge=1, le=12)
    year: int = Field(..., ge=2020, le=2100)
    rollover_enabled: bool = True


class User(ApiModel):
    id: str = Field(..., alias="_id")
    email: str = ""
    name: str = ""
    settings: Optional[UserSettings] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Budget(ApiModel):
    """One year's budget. Every other record hangs off a budget id."""

    id: str = Field(..., alias="_id")
    user_id: Optional[str] = None
    year: int
    name: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class BudgetCreate(ApiModel):
    year: int = Field(..., ge=2020, le=2100)
    name: str = Field(..., min_length=1)
