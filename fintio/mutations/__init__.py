"""
Write Path Package

One service per resource. Every successful write invalidates the
cached reads it affects; every failed write raises MutationError.
"""

from fintio.mutations.base import MutationError, ResourceMutations
from fintio.mutations.services import (
    TRANSACTION_VIEWS,
    AccountMutations,
    AccountTransactionMutations,
    BudgetMutations,
    CategoryMutations,
    RecurringTransactionMutations,
    SavingsGoalMutations,
    SubscriptionMutations,
    TransactionMutations,
    UserMutations,
)

__all__ = [
    # Base
    "MutationError",
    "ResourceMutations",
    # Services
    "TRANSACTION_VIEWS",
    "AccountMutations",
    "AccountTransactionMutations",
    "BudgetMutations",
    "CategoryMutations",
    "RecurringTransactionMutations",
    "SavingsGoalMutations",
    "SubscriptionMutations",
    "TransactionMutations",
    "UserMutations",
]
