"""
Dashboard Wiring

Builds the object graph every page shares: one API client, one
response cache, the read handles on top of both, and one mutation
service per resource.

CRITICAL: Readers and mutation services MUST share the same cache.
Otherwise a write would invalidate a cache nobody reads from.
"""

import time
from dataclasses import dataclass
from typing import Callable, Optional

import httpx

from fintio.cache import ResponseCache
from fintio.config import CacheSettings, get_settings
from fintio.mutations import (
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
from fintio.resources import BudgetResources
from fintio.services.api import BudgetApiClient, FetchStyle
from fintio.setup import BudgetSetup
from fintio.telemetry import configure_logging, get_logger


@dataclass
class Dashboard:
    """Everything a page needs to read and write budget data."""
    api: BudgetApiClient
    cache: ResponseCache
    resources: BudgetResources
    accounts: AccountMutations
    account_transactions: AccountTransactionMutations
    transactions: TransactionMutations
    categories: CategoryMutations
    recurring_transactions: RecurringTransactionMutations
    subscriptions: SubscriptionMutations
    savings_goals: SavingsGoalMutations
    budgets: BudgetMutations
    users: UserMutations

    def setup(self) -> BudgetSetup:
        """First-run flow over this dashboard's write services."""
        return BudgetSetup(self.users, self.budgets, self.categories)


def create_dashboard(
    api: Optional[BudgetApiClient] = None,
    cache: Optional[ResponseCache] = None,
    cache_settings: Optional[CacheSettings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    fetch_style: Optional[FetchStyle] = None,
    clock: Optional[Callable[[], float]] = None,
) -> Dashboard:
    """
    Factory function to create all dashboard components.

    Args:
        api: Pre-built client. Built from ApiSettings when omitted.
        cache: Pre-built cache. A new one is created when omitted.
        cache_settings: Dedupe windows. Defaults to CacheSettings.
        transport: httpx transport for the built client (tests pass
            httpx.MockTransport). Ignored when api is given.
        fetch_style: Read style for the built client. Ignored when api
            is given.
        clock: Monotonic clock for a new cache.

    Returns:
        The wired Dashboard
    """
    configure_logging()
    logger = get_logger("fintio.dashboard")

    cache_settings = cache_settings or get_settings().cache

    if api is None:
        api = BudgetApiClient(transport=transport, fetch_style=fetch_style)
    if cache is None:
        cache = ResponseCache(
            clock=clock or time.monotonic,
            max_entries=cache_settings.max_entries,
        )

    dashboard = Dashboard(
        api=api,
        cache=cache,
        resources=BudgetResources(api, cache, cache_settings),
        accounts=AccountMutations(api, cache),
        account_transactions=AccountTransactionMutations(api, cache),
        transactions=TransactionMutations(api, cache),
        categories=CategoryMutations(api, cache),
        recurring_transactions=RecurringTransactionMutations(api, cache),
        subscriptions=SubscriptionMutations(api, cache),
        savings_goals=SavingsGoalMutations(api, cache),
        budgets=BudgetMutations(api, cache),
        users=UserMutations(api, cache),
    )

    logger.info(
        "dashboard_created",
        base_url=api.base_url,
        fetch_style=api.fetch_style.value,
    )
    return dashboard
