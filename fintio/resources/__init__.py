"""
Read Path Package

Handles for every budget-scoped list endpoint, served through the
shared response cache.
"""

from fintio.resources.handle import ResourceHandle, ResourceSpec, ResourceState
from fintio.resources.readers import (
    BudgetResources,
    account_transactions_key,
    accounts_key,
    breakdown_key,
    budget_key,
    calendar_key,
    owner_key,
    transactions_key,
)

__all__ = [
    "BudgetResources",
    "ResourceHandle",
    "ResourceSpec",
    "ResourceState",
    "account_transactions_key",
    "accounts_key",
    "breakdown_key",
    "budget_key",
    "calendar_key",
    "owner_key",
    "transactions_key",
]
