"""
Structured Cache Keys

DESIGN DECISION: A cache key is a value object, not a URL string.
It is composed of (resource, budget_id, filters, item_id) and only
renders to a URL when a request is actually made.

Invalidation matches on the (resource, budget_id) subset of a key.
String prefix matching would let "/api/transactions" also match
"/api/transactions-archive"; structured matching cannot collide.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Sequence
from urllib.parse import urlencode


class Resource(str, Enum):
    """Every cacheable backend resource, valued by its list endpoint."""
    ACCOUNTS = "/api/accounts"
    ACCOUNT_TRANSACTIONS = "/api/account-transactions"
    TRANSACTIONS = "/api/transactions"
    INCOME_CATEGORIES = "/api/categories/income"
    EXPENSE_CATEGORIES = "/api/categories/expense"
    RECURRING_TRANSACTIONS = "/api/recurring-transactions"
    BREAKDOWN = "/api/breakdown"
    SAVINGS_GOALS = "/api/savings/goals"
    SUBSCRIPTIONS = "/api/subscriptions"
    CALENDAR_TRANSACTIONS = "/api/calendar/transactions"
    DASHBOARD_ALERTS = "/api/dashboard/alerts"
    UPCOMING_PAYMENTS = "/api/dashboard/upcoming-payments"
    # Scoped by the signed-in user, not by a budget
    BUDGETS = "/api/budgets"
    USERS = "/api/users"

    @property
    def path(self) -> str:
        return self.value

    def item_path(self, item_id: str) -> str:
        return f"{self.value}/{item_id}"


@dataclass(frozen=True)
class CacheKey:
    """
    Identifies one cacheable GET request.

    Equal keys share one cached result. filters keeps construction
    order, so the rendered URL is deterministic.

    owner is the signed-in user of a user-scoped read (budgets, user
    settings). The backend identifies the caller from its own session,
    so owner never reaches the URL; it keeps one user's cached reads
    apart from another's.
    """
    resource: Resource
    budget_id: Optional[str] = None
    filters: tuple[tuple[str, str], ...] = ()
    item_id: Optional[str] = None
    owner: Optional[str] = None

    @classmethod
    def for_list(
        cls,
        resource: Resource,
        budget_id: str,
        filters: Sequence[tuple[str, object]] = (),
    ) -> "CacheKey":
        """Key for a budget-scoped list endpoint."""
        return cls(
            resource=resource,
            budget_id=budget_id,
            filters=tuple((name, str(value)) for name, value in filters),
        )

    @classmethod
    def for_item(cls, resource: Resource, item_id: str) -> "CacheKey":
        """Key for a single record addressed by id."""
        return cls(resource=resource, item_id=item_id)

    @classmethod
    def for_owner(cls, resource: Resource, owner: str) -> "CacheKey":
        """Key for an endpoint scoped by the signed-in user."""
        return cls(resource=resource, owner=owner)

    @property
    def params(self) -> list[tuple[str, str]]:
        params = []
        if self.budget_id is not None:
            params.append(("budgetId", self.budget_id))
        params.extend(self.filters)
        return params

    @property
    def url(self) -> str:
        """Path plus query string, e.g. /api/transactions?budgetId=b1&month=3."""
        path = (
            self.resource.item_path(self.item_id)
            if self.item_id is not None
            else self.resource.path
        )
        params = self.params
        if not params:
            return path
        return f"{path}?{urlencode(params)}"

    def matches(self, resource: Resource, budget_id: Optional[str] = None) -> bool:
        """
        True if this key belongs to the resource (and budget, if given).

        Item keys carry no budget, so they only match resource-wide.
        """
        if self.resource != resource:
            return False
        if budget_id is None:
            return True
        return self.budget_id == budget_id

    def __str__(self) -> str:
        return self.url


KeyPredicate = Callable[[CacheKey], bool]


def match_resource(resource: Resource, budget_id: Optional[str] = None) -> KeyPredicate:
    """
    Predicate for every list key of a resource.

    Args:
        resource: Resource whose keys should match
        budget_id: Limit to one budget. None matches every budget.
    """
    def predicate(key: CacheKey) -> bool:
        return key.item_id is None and key.matches(resource, budget_id)
    return predicate


def match_item(resource: Resource, item_id: str) -> KeyPredicate:
    """Predicate for the single-record key of one item."""
    target = CacheKey.for_item(resource, item_id)

    def predicate(key: CacheKey) -> bool:
        return key == target
    return predicate


def match_any(*predicates: KeyPredicate) -> KeyPredicate:
    def predicate(key: CacheKey) -> bool:
        return any(p(key) for p in predicates)
    return predicate
