"""
Dashboard Insight Models

Server-computed views over a budget: the calendar grouping of a month's
transactions, budget alerts, upcoming recurring payments, and the
outcome of generating a month's recurring transactions.

CRITICAL: These are read-only aggregates. The client renders them as
sent and never derives alerts or due dates itself.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field

from fintio.models.finance import (
    ApiModel,
    Frequency,
    Money,
    Transaction,
    TransactionType,
)


class AlertLevel(str, Enum):
    """Severity of a budget alert."""
    INFO = "info"
    WARNING = "warning"
    DANGER = "danger"


class BudgetAlert(ApiModel):
    """One alert about the current month (over budget, negative cash flow...)."""

    id: str = Field(..., description="Stable id, used to dismiss the alert")
    type: AlertLevel
    title: str
    message: str
    category: Optional[str] = None


class AlertsResponse(ApiModel):
    alerts: list[BudgetAlert] = Field(default_factory=list)

    def visible(self, dismissed: set[str]) -> list[BudgetAlert]:
        """Alerts the user has not dismissed."""
        return [alert for alert in self.alerts if alert.id not in dismissed]


class UpcomingPayment(ApiModel):
    """Next occurrence of an active recurring transaction."""

    id: str = Field(..., alias="_id")
    description: str = "Untitled"
    category_name: str
    amount: Money
    type: TransactionType
    frequency: Frequency
    next_date: datetime
    days_until: int = Field(..., ge=0)

    @property
    def days_text(self) -> str:
        if self.days_until == 0:
            return "Today"
        if self.days_until == 1:
            return "Tomorrow"
        return f"In {self.days_until} days"


class UpcomingPaymentsResponse(ApiModel):
    upcoming_payments: list[UpcomingPayment] = Field(default_factory=list)

    def of_type(self, kind: TransactionType) -> list[UpcomingPayment]:
        return [p for p in self.upcoming_payments if p.type == kind]


class CalendarMonth(ApiModel):
    """A month's transactions grouped by day of month ("1".."31")."""

    transactions_by_day: dict[str, list[Transaction]] = Field(default_factory=dict)

    def days(self) -> list[int]:
        """Days that have at least one transaction, in order."""
        return sorted(int(day) for day, rows in self.transactions_by_day.items() if rows)

    def for_day(self, day: int) -> list[Transaction]:
        return list(self.transactions_by_day.get(str(day), []))


class GenerateResult(ApiModel):
    """Outcome of generating a month's recurring transactions."""

    success: bool = True
    generated: int = 0
    skipped: int = 0
    message: Optional[str] = None
