"""
First-Run Budget Setup

This module defines the end-to-end setup flow:
settings -> budget -> income categories -> expense categories

DESIGN DECISION: Steps run strictly in order and stop at the first
failure. The backend has no cross-request transactions, so whatever a
finished step created stays created; the caller sees the MutationError
of the step that failed.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from fintio.currency import currency_for_country
from fintio.models.finance import (
    Budget,
    BudgetCreate,
    ExpenseCategoryCreate,
    IncomeCategoryCreate,
    RuleBucket,
    UserSettings,
)
from fintio.mutations import BudgetMutations, CategoryMutations, UserMutations
from fintio.telemetry import get_logger


class CategoryDraft(BaseModel):
    """A category as typed into the setup form, before it has a budget."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1)
    projected_amount: Decimal = Field(default=Decimal("0"), ge=0)


class ExpenseCategoryDraft(CategoryDraft):
    category: RuleBucket = RuleBucket.NEEDS


class SetupForm(BaseModel):
    """
    Everything the setup page collects.

    Currency and symbol are not entered; they follow the country.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    country: str = Field(default="United States", min_length=1)
    starting_month: int = Field(default=1, ge=1, le=12)
    year: int = Field(default_factory=lambda: date.today().year, ge=2020, le=2100)
    rollover_enabled: bool = True
    budget_name: Optional[str] = None
    income_categories: list[CategoryDraft] = Field(..., min_length=1)
    expense_categories: list[ExpenseCategoryDraft] = Field(..., min_length=1)

    def user_settings(self) -> UserSettings:
        currency = currency_for_country(self.country)
        return UserSettings(
            country=self.country,
            currency=currency.currency,
            currency_symbol=currency.symbol,
            starting_month=self.starting_month,
            year=self.year,
            rollover_enabled=self.rollover_enabled,
        )

    def budget(self) -> BudgetCreate:
        return BudgetCreate(
            year=self.year,
            name=self.budget_name or f"{self.year} Budget",
        )


class BudgetSetup:
    """
    Orchestrates the first-run setup.

    Flow:
    1. Save user settings (creates the user the first time)
    2. Create the budget for the chosen year
    3. Create income categories, order = position in the form
    4. Create expense categories, order = position in the form
    """

    def __init__(
        self,
        users: UserMutations,
        budgets: BudgetMutations,
        categories: CategoryMutations,
    ):
        self._users = users
        self._budgets = budgets
        self._categories = categories
        self._logger = get_logger("fintio.setup")

    async def run(self, form: SetupForm) -> Budget:
        """
        Run every step and return the created budget.

        Raises:
            MutationError: From the first step that failed
        """
        await self._users.save_settings(form.user_settings())

        budget = await self._budgets.create_budget(form.budget())

        for order, draft in enumerate(form.income_categories):
            await self._categories.create_income_category(IncomeCategoryCreate(
                budget_id=budget.id,
                name=draft.name,
                projected_amount=draft.projected_amount,
                order=order,
            ))

        for order, draft in enumerate(form.expense_categories):
            await self._categories.create_expense_category(ExpenseCategoryCreate(
                budget_id=budget.id,
                name=draft.name,
                projected_amount=draft.projected_amount,
                category=draft.category,
                order=order,
            ))

        self._logger.info(
            "setup_completed",
            budget_id=budget.id,
            year=budget.year,
            income_categories=len(form.income_categories),
            expense_categories=len(form.expense_categories),
        )
        return budget
