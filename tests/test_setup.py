"""
Tests for the first-run setup flow.

Test strategy:
1. Steps run in order and later steps use earlier results
2. The first failed step stops the flow
3. Form defaults and derived settings
"""

import json
from decimal import Decimal

import pytest
from pydantic import ValidationError

from fintio.models import RuleBucket
from fintio.mutations import (
    BudgetMutations,
    CategoryMutations,
    MutationError,
    UserMutations,
)
from fintio.setup import BudgetSetup, SetupForm


FORM = SetupForm(
    country="Germany",
    starting_month=4,
    year=2024,
    rollover_enabled=False,
    income_categories=[
        {"name": "Salary", "projected_amount": Decimal("3000")},
        {"name": "Side gig", "projected_amount": Decimal("250.50")},
    ],
    expense_categories=[
        {"name": "Rent", "projected_amount": Decimal("1200"), "category": RuleBucket.NEEDS},
        {"name": "Travel", "projected_amount": Decimal("150"), "category": RuleBucket.WANTS},
    ],
)


@pytest.fixture
def flow(api, cache) -> BudgetSetup:
    return BudgetSetup(
        UserMutations(api, cache),
        BudgetMutations(api, cache),
        CategoryMutations(api, cache),
    )


def route_success(backend, budget_id: str = "bg9") -> None:
    backend.route("POST", "/api/users", json_body={"user": {"_id": "u1"}})
    backend.route("POST", "/api/budgets", status=201, json_body={"budget": {
        "_id": budget_id, "userId": "u1", "year": 2024, "name": "2024 Budget",
    }})
    for kind in ("income", "expense"):
        backend.route("POST", f"/api/categories/{kind}", status=201, json_body={"category": {
            "_id": f"{kind}-1", "budgetId": budget_id, "name": "x",
            "projectedAmount": 0, "order": 0, "category": "needs",
        }})


def bodies_for(backend, path: str) -> list[dict]:
    return [json.loads(r.content) for r in backend.requests if r.url.path == path]


class TestSetupFlow:
    """Tests for BudgetSetup.run."""

    @pytest.mark.asyncio
    async def test_steps_run_in_order(self, flow, backend):
        """Test settings, budget, income and expense categories are posted in that order."""
        route_success(backend)

        budget = await flow.run(FORM)

        assert budget.id == "bg9"
        assert [r.url.path for r in backend.requests] == [
            "/api/users",
            "/api/budgets",
            "/api/categories/income",
            "/api/categories/income",
            "/api/categories/expense",
            "/api/categories/expense",
        ]

    @pytest.mark.asyncio
    async def test_settings_follow_the_country(self, flow, backend):
        """Test the saved settings carry the country's currency."""
        route_success(backend)

        await flow.run(FORM)

        assert bodies_for(backend, "/api/users") == [{"settings": {
            "country": "Germany",
            "currency": "EUR",
            "currencySymbol": "€",
            "startingMonth": 4,
            "year": 2024,
            "rolloverEnabled": False,
        }}]
        assert bodies_for(backend, "/api/budgets") == [{"year": 2024, "name": "2024 Budget"}]

    @pytest.mark.asyncio
    async def test_categories_use_new_budget_and_form_order(self, flow, backend):
        """Test categories belong to the created budget, ordered as entered."""
        route_success(backend, budget_id="bg42")

        await flow.run(FORM)

        assert bodies_for(backend, "/api/categories/income") == [
            {"budgetId": "bg42", "name": "Salary", "projectedAmount": 3000.0, "order": 0},
            {"budgetId": "bg42", "name": "Side gig", "projectedAmount": 250.5, "order": 1},
        ]
        expense = bodies_for(backend, "/api/categories/expense")
        assert [(b["name"], b["category"], b["order"]) for b in expense] == [
            ("Rent", "needs", 0),
            ("Travel", "wants", 1),
        ]
        assert {b["budgetId"] for b in expense} == {"bg42"}

    @pytest.mark.asyncio
    async def test_failed_budget_stops_the_flow(self, flow, backend):
        """Test a rejected budget raises and no categories are created."""
        backend.route("POST", "/api/users", json_body={"user": {"_id": "u1"}})
        backend.route("POST", "/api/budgets", status=409,
                      json_body={"error": "Budget for this year already exists"})

        with pytest.raises(MutationError) as exc_info:
            await flow.run(FORM)

        assert str(exc_info.value) == "Failed to create budget"
        assert exc_info.value.detail == "Budget for this year already exists"
        assert [r.url.path for r in backend.requests] == ["/api/users", "/api/budgets"]

    @pytest.mark.asyncio
    async def test_failed_settings_stops_before_budget(self, flow, backend):
        """Test nothing else is posted when settings cannot be saved."""
        backend.route("POST", "/api/users", status=500, json_body={"error": "db down"})

        with pytest.raises(MutationError) as exc_info:
            await flow.run(FORM)

        assert str(exc_info.value) == "Failed to save user settings"
        assert len(backend.requests) == 1


class TestSetupForm:
    """Tests for form defaults and validation."""

    def test_defaults(self):
        """Test the country defaults to the US and the budget is named after its year."""
        form = SetupForm(
            year=2025,
            income_categories=[{"name": "Salary"}],
            expense_categories=[{"name": "Rent"}],
        )

        settings = form.user_settings()
        assert (settings.country, settings.currency, settings.currency_symbol) == (
            "United States", "USD", "$",
        )
        assert settings.starting_month == 1
        assert settings.rollover_enabled is True
        assert form.budget().name == "2025 Budget"
        assert form.expense_categories[0].category == RuleBucket.NEEDS
        assert form.income_categories[0].projected_amount == Decimal("0")

    def test_custom_budget_name(self):
        """Test a typed budget name wins over the default."""
        form = SetupForm(
            year=2025,
            budget_name="  Family  ",
            income_categories=[{"name": "Salary"}],
            expense_categories=[{"name": "Rent"}],
        )

        assert form.budget().name == "Family"

    def test_unknown_country_falls_back_to_dollars(self):
        """Test a country missing from the table uses USD."""
        form = SetupForm(
            country="Atlantis",
            income_categories=[{"name": "Salary"}],
            expense_categories=[{"name": "Rent"}],
        )

        assert form.user_settings().currency == "USD"

    @pytest.mark.parametrize("field", ["income_categories", "expense_categories"])
    def test_each_kind_needs_a_category(self, field):
        """Test a form with no categories of a kind is rejected."""
        data = {
            "income_categories": [{"name": "Salary"}],
            "expense_categories": [{"name": "Rent"}],
        }
        data[field] = []

        with pytest.raises(ValidationError):
            SetupForm(**data)

    def test_blank_category_name_rejected(self):
        """Test whitespace is not a name."""
        with pytest.raises(ValidationError):
            SetupForm(
                income_categories=[{"name": "   "}],
                expense_categories=[{"name": "Rent"}],
            )

    def test_negative_projection_rejected(self):
        """Test projected amounts cannot be negative."""
        with pytest.raises(ValidationError):
            SetupForm(
                income_categories=[{"name": "Salary", "projected_amount": "-1"}],
                expense_categories=[{"name": "Rent"}],
            )
