"""
Data Models Package

This package contains all Pydantic models used by the dashboard client.
Everything read from or written to the backend goes through these schemas.
"""

from fintio.models.finance import (
    Account,
    AccountCreate,
    AccountTransaction,
    AccountTransactionCreate,
    AccountTransactionType,
    AccountType,
    AccountUpdate,
    ApiModel,
    BillingCycle,
    Budget,
    BudgetCreate,
    CategoryOrder,
    CategoryUpdate,
    ContributionType,
    Entity,
    ExpenseCategory,
    ExpenseCategoryCreate,
    Frequency,
    GoalPriority,
    IncomeCategory,
    IncomeCategoryCreate,
    Money,
    RecurringTransaction,
    RecurringTransactionCreate,
    RecurringTransactionUpdate,
    RuleBucket,
    SavingsContribution,
    SavingsGoal,
    SavingsGoalCreate,
    SavingsGoalUpdate,
    Subscription,
    SubscriptionCreate,
    SubscriptionUpdate,
    Transaction,
    TransactionCreate,
    TransactionType,
    TransactionUpdate,
    TransferDirection,
    UpdateModel,
    User,
    UserSettings,
    total,
)
from fintio.models.responses import (
    AccountsResponse,
    AccountTransactionsResponse,
    ExpenseCategoriesResponse,
    IncomeCategoriesResponse,
    RecurringTransactionsResponse,
    SavingsGoalList,
    BudgetsResponse,
    SubscriptionList,
    TransactionsResponse,
    UserResponse,
)
from fintio.models.insights import (
    AlertLevel,
    AlertsResponse,
    BudgetAlert,
    CalendarMonth,
    GenerateResult,
    UpcomingPayment,
    UpcomingPaymentsResponse,
)
from fintio.models.breakdown import (
    Breakdown,
    BreakdownTotals,
    CategoryBreakdown,
    ExpenseCategoryBreakdown,
    ProjectedActual,
    RuleBreakdown,
)

__all__ = [
    # Entity models
    "Account",
    "AccountCreate",
    "AccountTransaction",
    "AccountTransactionCreate",
    "AccountTransactionType",
    "AccountType",
    "AccountUpdate",
    "ApiModel",
    "BillingCycle",
    "Budget",
    "BudgetCreate",
    "CategoryOrder",
    "CategoryUpdate",
    "ContributionType",
    "Entity",
    "ExpenseCategory",
    "ExpenseCategoryCreate",
    "Frequency",
    "GoalPriority",
    "IncomeCategory",
    "IncomeCategoryCreate",
    "Money",
    "RecurringTransaction",
    "RecurringTransactionCreate",
    "RecurringTransactionUpdate",
    "RuleBucket",
    "SavingsContribution",
    "SavingsGoal",
    "SavingsGoalCreate",
    "SavingsGoalUpdate",
    "Subscription",
    "SubscriptionCreate",
    "SubscriptionUpdate",
    "Transaction",
    "TransactionCreate",
    "TransactionType",
    "TransactionUpdate",
    "TransferDirection",
    "UpdateModel",
    "User",
    "UserSettings",
    "total",
    # Breakdown models
    "Breakdown",
    "BreakdownTotals",
    "CategoryBreakdown",
    "ExpenseCategoryBreakdown",
    "ProjectedActual",
    "RuleBreakdown",
    # Insight models
    "AlertLevel",
    "AlertsResponse",
    "BudgetAlert",
    "CalendarMonth",
    "GenerateResult",
    "UpcomingPayment",
    "UpcomingPaymentsResponse",
    # Response envelopes
    "AccountsResponse",
    "AccountTransactionsResponse",
    "ExpenseCategoriesResponse",
    "IncomeCategoriesResponse",
    "RecurringTransactionsResponse",
    "SavingsGoalList",
    "BudgetsResponse",
    "SubscriptionList",
    "TransactionsResponse",
    "UserResponse",
]
