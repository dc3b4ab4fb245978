"""
Budget Resource Readers

One method per backend list endpoint. Each method only decides the
cache key and the policy; the cache and the handle do the rest.

KEY RULES:
- No budget_id, no key, no request
- Query parameters are appended in a fixed order:
  budgetId, accountId, month, year
- Transactions include month/year whenever they are not None
- Account transactions include accountId/month/year only when truthy
- Breakdown and the calendar always carry month and year
- Budgets and user settings are keyed by the signed-in user instead
"""

from typing import Optional

from fintio.cache import CacheKey, CachePolicy, Resource, ResponseCache
from fintio.config import CacheSettings, get_settings
from fintio.models.breakdown import Breakdown
from fintio.models.finance import (
    Account,
    AccountTransaction,
    Budget,
    ExpenseCategory,
    IncomeCategory,
    RecurringTransaction,
    SavingsGoal,
    Subscription,
    Transaction,
    User,
)
from fintio.models.insights import (
    AlertsResponse,
    BudgetAlert,
    CalendarMonth,
    UpcomingPayment,
    UpcomingPaymentsResponse,
)
from fintio.models.responses import (
    AccountsResponse,
    AccountTransactionsResponse,
    BudgetsResponse,
    ExpenseCategoriesResponse,
    IncomeCategoriesResponse,
    RecurringTransactionsResponse,
    SavingsGoalList,
    SubscriptionList,
    TransactionsResponse,
    UserResponse,
)
from fintio.resources.handle import ResourceHandle, ResourceSpec
from fintio.services.api import BudgetApiClient, FetchStyle


# =============================================================================
# KEY BUILDERS
# =============================================================================

def accounts_key(budget_id: Optional[str]) -> Optional[CacheKey]:
    if not budget_id:
        return None
    return CacheKey.for_list(Resource.ACCOUNTS, budget_id)


def transactions_key(
    budget_id: Optional[str],
    month: Optional[int] = None,
    year: Optional[int] = None,
) -> Optional[CacheKey]:
    if not budget_id:
        return None
    filters = []
    if month is not None:
        filters.append(("month", month))
    if year is not None:
        filters.append(("year", year))
    return CacheKey.for_list(Resource.TRANSACTIONS, budget_id, filters)


def account_transactions_key(
    budget_id: Optional[str],
    account_id: Optional[str] = None,
    month: Optional[int] = None,
    year: Optional[int] = None,
) -> Optional[CacheKey]:
    if not budget_id:
        return None
    filters = []
    if account_id:
        filters.append(("accountId", account_id))
    if month:
        filters.append(("month", month))
    if year:
        filters.append(("year", year))
    return CacheKey.for_list(Resource.ACCOUNT_TRANSACTIONS, budget_id, filters)


def breakdown_key(
    budget_id: Optional[str],
    month: int,
    year: int,
) -> Optional[CacheKey]:
    if not budget_id:
        return None
    return CacheKey.for_list(
        Resource.BREAKDOWN,
        budget_id,
        [("month", month), ("year", year)],
    )


def calendar_key(
    budget_id: Optional[str],
    month: int,
    year: int,
) -> Optional[CacheKey]:
    if not budget_id:
        return None
    return CacheKey.for_list(
        Resource.CALENDAR_TRANSACTIONS,
        budget_id,
        [("month", month), ("year", year)],
    )


def owner_key(resource: Resource, user_id: Optional[str]) -> Optional[CacheKey]:
    """Key for endpoints scoped by the signed-in user."""
    if not user_id:
        return None
    return CacheKey.for_owner(resource, user_id)


def budget_key(resource: Resource, budget_id: Optional[str]) -> Optional[CacheKey]:
    """Key for endpoints scoped by budget alone."""
    if not budget_id:
        return None
    return CacheKey.for_list(resource, budget_id)


# =============================================================================
# READERS
# =============================================================================

class BudgetResources:
    """
    Factory for read handles.

    Args:
        api: Backend client used as the cache fetcher
        cache: Shared response cache
        cache_settings: Dedupe windows. Defaults to CacheSettings.
        styles: Per-resource fetch style overrides. Resources not listed
            use the client's default style.
    """

    def __init__(
        self,
        api: BudgetApiClient,
        cache: ResponseCache,
        cache_settings: Optional[CacheSettings] = None,
        styles: Optional[dict[Resource, FetchStyle]] = None,
    ):
        self._api = api
        self._cache = cache
        self._styles = dict(styles or {})
        self._specs = self._build_specs(cache_settings or get_settings().cache)

    def spec(self, resource: Resource) -> ResourceSpec:
        return self._specs[resource]

    def accounts(self, budget_id: Optional[str]) -> ResourceHandle[list[Account]]:
        return self._handle(Resource.ACCOUNTS, accounts_key(budget_id))

    def transactions(
        self,
        budget_id: Optional[str],
        month: Optional[int] = None,
        year: Optional[int] = None,
    ) -> ResourceHandle[list[Transaction]]:
        return self._handle(
            Resource.TRANSACTIONS,
            transactions_key(budget_id, month, year),
        )

    def account_transactions(
        self,
        budget_id: Optional[str],
        account_id: Optional[str] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
    ) -> ResourceHandle[list[AccountTransaction]]:
        return self._handle(
            Resource.ACCOUNT_TRANSACTIONS,
            account_transactions_key(budget_id, account_id, month, year),
        )

    def income_categories(
        self,
        budget_id: Optional[str],
    ) -> ResourceHandle[list[IncomeCategory]]:
        return self._handle(
            Resource.INCOME_CATEGORIES,
            budget_key(Resource.INCOME_CATEGORIES, budget_id),
        )

    def expense_categories(
        self,
        budget_id: Optional[str],
    ) -> ResourceHandle[list[ExpenseCategory]]:
        return self._handle(
            Resource.EXPENSE_CATEGORIES,
            budget_key(Resource.EXPENSE_CATEGORIES, budget_id),
        )

    def recurring_transactions(
        self,
        budget_id: Optional[str],
    ) -> ResourceHandle[list[RecurringTransaction]]:
        return self._handle(
            Resource.RECURRING_TRANSACTIONS,
            budget_key(Resource.RECURRING_TRANSACTIONS, budget_id),
        )

    def subscriptions(
        self,
        budget_id: Optional[str],
    ) -> ResourceHandle[list[Subscription]]:
        return self._handle(
            Resource.SUBSCRIPTIONS,
            budget_key(Resource.SUBSCRIPTIONS, budget_id),
        )

    def savings_goals(
        self,
        budget_id: Optional[str],
    ) -> ResourceHandle[list[SavingsGoal]]:
        return self._handle(
            Resource.SAVINGS_GOALS,
            budget_key(Resource.SAVINGS_GOALS, budget_id),
        )

    def breakdown(
        self,
        budget_id: Optional[str],
        month: int,
        year: int,
    ) -> ResourceHandle[Breakdown]:
        return self._handle(Resource.BREAKDOWN, breakdown_key(budget_id, month, year))

    def calendar_transactions(
        self,
        budget_id: Optional[str],
        month: int,
        year: int,
    ) -> ResourceHandle[CalendarMonth]:
        return self._handle(
            Resource.CALENDAR_TRANSACTIONS,
            calendar_key(budget_id, month, year),
        )

    def alerts(self, budget_id: Optional[str]) -> ResourceHandle[list[BudgetAlert]]:
        return self._handle(
            Resource.DASHBOARD_ALERTS,
            budget_key(Resource.DASHBOARD_ALERTS, budget_id),
        )

    def upcoming_payments(
        self,
        budget_id: Optional[str],
    ) -> ResourceHandle[list[UpcomingPayment]]:
        return self._handle(
            Resource.UPCOMING_PAYMENTS,
            budget_key(Resource.UPCOMING_PAYMENTS, budget_id),
        )

    def budgets(self, user_id: Optional[str]) -> ResourceHandle[list[Budget]]:
        """Budgets of the signed-in user, newest year first."""
        return self._handle(Resource.BUDGETS, owner_key(Resource.BUDGETS, user_id))

    def user(self, user_id: Optional[str]) -> ResourceHandle[User]:
        """
        The signed-in user's record and settings.

        A user who has not finished setup reads as a 404 error.
        """
        return self._handle(Resource.USERS, owner_key(Resource.USERS, user_id))

    def _handle(self, resource: Resource, key: Optional[CacheKey]) -> ResourceHandle:
        return ResourceHandle(self._cache, self._api, self._specs[resource], key)

    def _build_specs(self, settings: CacheSettings) -> dict[Resource, ResourceSpec]:
        def policy(seconds: float, on_reconnect: bool = True) -> CachePolicy:
            return CachePolicy(
                dedupe_interval=seconds,
                revalidate_on_focus=False,
                revalidate_on_reconnect=on_reconnect,
            )

        def spec(resource, parse, select, default, cache_policy) -> ResourceSpec:
            return ResourceSpec(
                resource=resource,
                parse=parse,
                select=select,
                default=default,
                policy=cache_policy,
                style=self._styles.get(resource),
            )

        return {
            Resource.ACCOUNTS: spec(
                Resource.ACCOUNTS,
                AccountsResponse.model_validate,
                lambda r: r.accounts,
                list,
                policy(settings.accounts_dedupe_seconds, on_reconnect=False),
            ),
            Resource.TRANSACTIONS: spec(
                Resource.TRANSACTIONS,
                TransactionsResponse.model_validate,
                lambda r: r.transactions,
                list,
                policy(settings.transactions_dedupe_seconds),
            ),
            Resource.ACCOUNT_TRANSACTIONS: spec(
                Resource.ACCOUNT_TRANSACTIONS,
                AccountTransactionsResponse.model_validate,
                lambda r: r.account_transactions,
                list,
                policy(settings.account_transactions_dedupe_seconds, on_reconnect=False),
            ),
            Resource.INCOME_CATEGORIES: spec(
                Resource.INCOME_CATEGORIES,
                IncomeCategoriesResponse.model_validate,
                lambda r: r.categories,
                list,
                policy(settings.categories_dedupe_seconds),
            ),
            Resource.EXPENSE_CATEGORIES: spec(
                Resource.EXPENSE_CATEGORIES,
                ExpenseCategoriesResponse.model_validate,
                lambda r: r.categories,
                list,
                policy(settings.categories_dedupe_seconds),
            ),
            Resource.RECURRING_TRANSACTIONS: spec(
                Resource.RECURRING_TRANSACTIONS,
                RecurringTransactionsResponse.model_validate,
                lambda r: r.recurring_transactions,
                list,
                policy(settings.recurring_transactions_dedupe_seconds),
            ),
            Resource.SUBSCRIPTIONS: spec(
                Resource.SUBSCRIPTIONS,
                SubscriptionList.validate_python,
                lambda r: r,
                lambda: None,
                policy(settings.subscriptions_dedupe_seconds),
            ),
            Resource.SAVINGS_GOALS: spec(
                Resource.SAVINGS_GOALS,
                SavingsGoalList.validate_python,
                lambda r: r,
                lambda: None,
                policy(settings.savings_goals_dedupe_seconds),
            ),
            Resource.BREAKDOWN: spec(
                Resource.BREAKDOWN,
                Breakdown.model_validate,
                lambda r: r,
                lambda: None,
                policy(settings.breakdown_dedupe_seconds),
            ),
            Resource.CALENDAR_TRANSACTIONS: spec(
                Resource.CALENDAR_TRANSACTIONS,
                CalendarMonth.model_validate,
                lambda r: r,
                lambda: None,
                policy(settings.calendar_transactions_dedupe_seconds),
            ),
            Resource.DASHBOARD_ALERTS: spec(
                Resource.DASHBOARD_ALERTS,
                AlertsResponse.model_validate,
                lambda r: r.alerts,
                list,
                policy(settings.alerts_dedupe_seconds),
            ),
            Resource.UPCOMING_PAYMENTS: spec(
                Resource.UPCOMING_PAYMENTS,
                UpcomingPaymentsResponse.model_validate,
                lambda r: r.upcoming_payments,
                list,
                policy(settings.upcoming_payments_dedupe_seconds),
            ),
            Resource.BUDGETS: spec(
                Resource.BUDGETS,
                BudgetsResponse.model_validate,
                lambda r: r.budgets,
                list,
                policy(settings.budgets_dedupe_seconds),
            ),
            Resource.USERS: spec(
                Resource.USERS,
                UserResponse.model_validate,
                lambda r: r.user,
                lambda: None,
                policy(settings.user_dedupe_seconds),
            ),
        }
