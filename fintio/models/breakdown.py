"""
Breakdown Models

The breakdown is a read-only aggregate computed entirely by the server:
projected vs. actual amounts per category, overall totals, and the
needs/wants/savings split of the budgeting rule.

CRITICAL: The client never recomputes any of these numbers.
"""

from decimal import Decimal
from typing import Optional

from pydantic import Field

from fintio.models.finance import ApiModel, Money, RuleBucket


class CategoryBreakdown(ApiModel):
    """Projected vs. actual for one category in one month."""

    id: str = Field(..., alias="_id")
    name: str
    projected: Money = Decimal("0")
    actual: Money = Decimal("0")
    difference: Money = Decimal("0")
    percentage_of_projected: float = 0.0


class ExpenseCategoryBreakdown(CategoryBreakdown):
    category: RuleBucket


class ProjectedActual(ApiModel):
    projected: Money = Decimal("0")
    actual: Money = Decimal("0")


class BreakdownTotals(ApiModel):
    income: ProjectedActual = Field(default_factory=ProjectedActual)
    expense: ProjectedActual = Field(default_factory=ProjectedActual)
    balance: ProjectedActual = Field(default_factory=ProjectedActual)


class RuleBreakdown(ApiModel):
    needs: ProjectedActual = Field(default_factory=ProjectedActual)
    wants: ProjectedActual = Field(default_factory=ProjectedActual)
    savings: ProjectedActual = Field(default_factory=ProjectedActual)

    def for_bucket(self, bucket: RuleBucket) -> ProjectedActual:
        return getattr(self, bucket.value)


class Breakdown(ApiModel):
    income_breakdown: list[CategoryBreakdown] = Field(default_factory=list)
    expense_breakdown: list[ExpenseCategoryBreakdown] = Field(default_factory=list)
    totals: BreakdownTotals = Field(default_factory=BreakdownTotals)
    rule_breakdown: RuleBreakdown = Field(default_factory=RuleBreakdown)

    def expense_rows(self, bucket: Optional[RuleBucket] = None) -> list[ExpenseCategoryBreakdown]:
        """Expense rows, optionally limited to one rule bucket."""
        if bucket is None:
            return list(self.expense_breakdown)
        return [row for row in self.expense_breakdown if row.category == bucket]
