"""
Response Envelopes

List endpoints wrap their rows in a named field ({"accounts": [...]}),
except subscriptions and savings goals, which return a bare array.
A missing field parses as an empty list.
"""

from typing import Optional

from pydantic import Field, TypeAdapter

from fintio.models.finance import (
    Account,
    AccountTransaction,
    ApiModel,
    Budget,
    ExpenseCategory,
    IncomeCategory,
    RecurringTransaction,
    SavingsGoal,
    Subscription,
    Transaction,
    User,
)


class AccountsResponse(ApiModel):
    accounts: list[Account] = Field(default_factory=list)


class TransactionsResponse(ApiModel):
    transactions: list[Transaction] = Field(default_factory=list)


class AccountTransactionsResponse(ApiModel):
    account_transactions: list[AccountTransaction] = Field(default_factory=list)


class IncomeCategoriesResponse(ApiModel):
    categories: list[IncomeCategory] = Field(default_factory=list)


class ExpenseCategoriesResponse(ApiModel):
    categories: list[ExpenseCategory] = Field(default_factory=list)


class RecurringTransactionsResponse(ApiModel):
    recurring_transactions: list[RecurringTransaction] = Field(default_factory=list)


class BudgetsResponse(ApiModel):
    budgets: list[Budget] = Field(default_factory=list)


class UserResponse(ApiModel):
    user: Optional[User] = None


SubscriptionList = TypeAdapter(list[Subscription])
SavingsGoalList = TypeAdapter(list[SavingsGoal])
