"""
Tests for the write path.

Test strategy:
1. Failed writes raise MutationError and leave the cache untouched
2. Successful writes invalidate exactly the affected keys
3. Payloads and methods match the backend contract
"""

from datetime import datetime
from decimal import Decimal

import httpx
import pytest
from structlog.testing import capture_logs

from conftest import BASE_URL, settle
from fintio.cache import CacheKey, Resource
from fintio.models import (
    Account,
    AccountUpdate,
    BillingCycle,
    BudgetCreate,
    CategoryOrder,
    CategoryUpdate,
    ExpenseCategoryCreate,
    GenerateResult,
    GoalPriority,
    IncomeCategoryCreate,
    RecurringTransaction,
    RuleBucket,
    SavingsGoal,
    SavingsGoalCreate,
    SavingsGoalUpdate,
    SubscriptionCreate,
    SubscriptionUpdate,
    UserSettings,
)
from fintio.mutations import (
    AccountMutations,
    AccountTransactionMutations,
    BudgetMutations,
    CategoryMutations,
    MutationError,
    RecurringTransactionMutations,
    SavingsGoalMutations,
    SubscriptionMutations,
    TransactionMutations,
    UserMutations,
)
from fintio.services.api import BudgetApiClient, ResponseParseError


def goal_json(goal_id: str, budget_id: str = "b1", name: str = "Trip") -> dict:
    return {
        "_id": goal_id,
        "budgetId": budget_id,
        "name": name,
        "targetAmount": 500,
        "currentAmount": 0,
        "priority": "medium",
    }


SUBSCRIPTION_JSON = {
    "_id": "s1",
    "budgetId": "b1",
    "name": "Music",
    "amount": 9.99,
    "billingCycle": "monthly",
    "nextBillingDate": "2024-04-01T00:00:00Z",
    "category": "Entertainment",
}

NEW_GOAL = SavingsGoalCreate(
    budget_id="b1",
    name="Trip",
    target_amount=500,
    priority=GoalPriority.MEDIUM,
)


@pytest.fixture
def goals(api, cache) -> SavingsGoalMutations:
    return SavingsGoalMutations(api, cache)


@pytest.fixture
def subscriptions(api, cache) -> SubscriptionMutations:
    return SubscriptionMutations(api, cache)


async def preload(resources, backend, budgets=("b1",)):
    """Load savings goals for each budget so there is something to invalidate."""
    backend.route("GET", "/api/savings/goals", json_body=[])
    handles = [resources.savings_goals(b) for b in budgets]
    for handle in handles:
        await handle.load()
    return handles


class TestFailedWrites:
    """Tests for writes the server rejects."""

    @pytest.mark.asyncio
    async def test_create_goal_500_raises_and_keeps_cache(self, goals, resources, backend, cache):
        """Test a failed create raises and invalidates nothing."""
        (handle,) = await preload(resources, backend)
        backend.route("POST", "/api/savings/goals", status=500, json_body={"error": "db down"})

        with pytest.raises(MutationError) as exc_info:
            await goals.create_goal(NEW_GOAL)

        error = exc_info.value
        assert str(error) == "Failed to create goal"
        assert error.operation == "create"
        assert error.status_code == 500
        assert error.detail == "db down"
        assert not cache.peek(handle.key).stale
        assert cache.is_fresh(cache.peek(handle.key))

    @pytest.mark.asyncio
    async def test_transport_error_raises_mutation_error(self, cache):
        """Test a write that never got an answer raises MutationError."""
        def refuse(request):
            raise httpx.ConnectError("refused", request=request)

        api = BudgetApiClient(base_url=BASE_URL, transport=httpx.MockTransport(refuse))
        service = SubscriptionMutations(api, cache)

        with pytest.raises(MutationError) as exc_info:
            await service.delete_subscription("s1")

        assert exc_info.value.status_code is None
        assert str(exc_info.value) == "Failed to delete subscription"

    @pytest.mark.asyncio
    async def test_failed_update_keeps_item_key(self, goals, backend, cache):
        """Test a rejected update leaves the item entry fresh."""
        item = CacheKey.for_item(Resource.SAVINGS_GOALS, "g1")
        await cache.get(item, lambda key: _value(goal_json("g1")))
        backend.route("PUT", "/api/savings/goals/g1", status=404, json_body={"error": "missing"})

        with pytest.raises(MutationError):
            await goals.update_goal("g1", SavingsGoalUpdate(name="x"))

        assert not cache.peek(item).stale


async def _value(value):
    return value


class TestInvalidation:
    """Tests for what a successful write invalidates."""

    @pytest.mark.asyncio
    async def test_create_invalidates_only_its_budget(self, goals, resources, backend, cache):
        """Test a create for b1 leaves b2 fresh."""
        b1, b2 = await preload(resources, backend, ("b1", "b2"))
        backend.route("POST", "/api/savings/goals", status=201, json_body=goal_json("g1"))

        goal = await goals.create_goal(NEW_GOAL)

        assert isinstance(goal, SavingsGoal)
        assert goal.id == "g1"
        assert cache.peek(b1.key).stale
        assert not cache.peek(b2.key).stale

    @pytest.mark.asyncio
    async def test_create_then_read_sees_new_goal(self, goals, resources, backend):
        """Test the next read after a create is fetched, not cached."""
        backend.route("GET", "/api/savings/goals", json_body=[])
        backend.route("GET", "/api/savings/goals", json_body=[goal_json("g1")])
        backend.route("POST", "/api/savings/goals", status=201, json_body=goal_json("g1"))
        handle = resources.savings_goals("b1")

        assert (await handle.load()).data == []
        await goals.create_goal(NEW_GOAL)
        state = await handle.load()

        assert [g.id for g in state.data] == ["g1"]
        assert backend.urls() == ["/api/savings/goals?budgetId=b1"] * 2

    @pytest.mark.asyncio
    async def test_update_without_budget_invalidates_every_budget(self, goals, resources, backend, cache):
        """Test an update with unknown budget widens to the whole resource."""
        b1, b2 = await preload(resources, backend, ("b1", "b2"))
        item = CacheKey.for_item(Resource.SAVINGS_GOALS, "g1")
        other = CacheKey.for_item(Resource.SAVINGS_GOALS, "g2")
        await cache.get(item, lambda key: _value(goal_json("g1")))
        await cache.get(other, lambda key: _value(goal_json("g2")))
        backend.route("PUT", "/api/savings/goals/g1", json_body=goal_json("g1", name="Moved"))

        goal = await goals.update_goal("g1", SavingsGoalUpdate(name="Moved"))

        assert goal.name == "Moved"
        assert backend.bodies("PUT") == [{"name": "Moved"}]
        assert cache.peek(b1.key).stale
        assert cache.peek(b2.key).stale
        assert cache.peek(item).stale
        assert not cache.peek(other).stale

    @pytest.mark.asyncio
    async def test_update_with_budget_is_scoped(self, subscriptions, resources, backend, cache):
        """Test passing the budget keeps other budgets fresh."""
        backend.route("GET", "/api/subscriptions", json_body=[])
        b1, b2 = resources.subscriptions("b1"), resources.subscriptions("b2")
        await b1.load()
        await b2.load()
        backend.route("PUT", "/api/subscriptions/s1", json_body=SUBSCRIPTION_JSON)

        sub = await subscriptions.update_subscription(
            "s1", SubscriptionUpdate(amount=12.5), budget_id="b1"
        )

        assert sub.amount == Decimal("9.99")
        assert cache.peek(b1.key).stale
        assert not cache.peek(b2.key).stale

    @pytest.mark.asyncio
    async def test_write_leaves_other_resources_fresh(self, goals, resources, backend, cache):
        """Test a goal write does not touch subscriptions."""
        backend.route("GET", "/api/subscriptions", json_body=[])
        subs = resources.subscriptions("b1")
        await subs.load()
        backend.route("DELETE", "/api/savings/goals/g1", json_body={"success": True})

        assert await goals.delete_goal("g1", "b1") == {"success": True}
        assert not cache.peek(subs.key).stale

    @pytest.mark.asyncio
    async def test_subscribed_reader_refetches_after_write(self, subscriptions, resources, backend, cache):
        """Test a page holding the list sees the new row without reloading."""
        backend.route("GET", "/api/subscriptions", json_body=[])
        backend.route("GET", "/api/subscriptions", json_body=[SUBSCRIPTION_JSON])
        backend.route("POST", "/api/subscriptions", status=201, json_body=SUBSCRIPTION_JSON)

        async with resources.subscriptions("b1") as handle:
            await subscriptions.create_subscription(SubscriptionCreate(
                budget_id="b1",
                name="Music",
                amount=9.99,
                billing_cycle=BillingCycle.MONTHLY,
                next_billing_date=datetime(2024, 4, 1),
                category="Entertainment",
            ))
            await settle(100)
            assert [s.id for s in handle.state.data] == ["s1"]

    @pytest.mark.asyncio
    async def test_unreadable_success_body_still_invalidates(self, goals, resources, backend, cache):
        """Test a 2xx with a broken body raises but the write counts."""
        (handle,) = await preload(resources, backend)
        backend.route("POST", "/api/savings/goals", content=b"not json")

        with pytest.raises(ResponseParseError):
            await goals.create_goal(NEW_GOAL)

        assert cache.peek(handle.key).stale

    @pytest.mark.asyncio
    async def test_unreadable_success_body_is_not_logged_as_success(self, api, cache, backend):
        """Test a 2xx with a broken body logs a warning, not a success."""
        backend.route("POST", "/api/savings/goals", content=b"not json")

        with capture_logs() as logs:
            with pytest.raises(ResponseParseError):
                await SavingsGoalMutations(api, cache).create_goal(NEW_GOAL)

        events = [log["event"] for log in logs]
        assert "mutation_reply_unreadable" in events
        assert "mutation_succeeded" not in events
        unreadable = next(log for log in logs if log["event"] == "mutation_reply_unreadable")
        assert unreadable["log_level"] == "warning"
        assert unreadable["status"] == 200

    @pytest.mark.asyncio
    async def test_readable_success_body_is_logged_as_success(self, api, cache, backend):
        """Test a normal 2xx logs mutation_succeeded."""
        backend.route("POST", "/api/savings/goals", status=201, json_body=goal_json("g1"))

        with capture_logs() as logs:
            await SavingsGoalMutations(api, cache).create_goal(NEW_GOAL)

        events = [log["event"] for log in logs]
        assert "mutation_succeeded" in events
        assert "mutation_reply_unreadable" not in events

    @pytest.mark.asyncio
    async def test_empty_success_body(self, subscriptions, backend):
        """Test a bodiless 2xx reads as success."""
        backend.route("DELETE", "/api/subscriptions/s1", status=204)

        assert await subscriptions.delete_subscription("s1") == {"success": True}


class TestPayloads:
    """Tests for request shapes."""

    @pytest.mark.asyncio
    async def test_create_goal_payload(self, goals, backend):
        """Test create bodies are camelCase and omit unset fields."""
        backend.route("POST", "/api/savings/goals", status=201, json_body=goal_json("g1"))

        await goals.create_goal(NEW_GOAL)

        assert backend.bodies("POST") == [{
            "budgetId": "b1",
            "name": "Trip",
            "targetAmount": 500.0,
            "priority": "medium",
        }]

    @pytest.mark.asyncio
    async def test_update_sends_explicit_none(self, goals, backend):
        """Test an explicitly cleared field is sent as null."""
        backend.route("PUT", "/api/savings/goals/g1", json_body=goal_json("g1"))

        await goals.update_goal("g1", SavingsGoalUpdate(deadline=None))

        assert backend.bodies("PUT") == [{"deadline": None}]

    @pytest.mark.asyncio
    async def test_update_account_unwraps_envelope(self, api, cache, backend):
        """Test account writes use PATCH and the account envelope."""
        backend.route("PATCH", "/api/accounts/a1", json_body={"account": {
            "_id": "a1", "budgetId": "b1", "name": "Checking",
            "type": "checking", "balance": 10, "currency": "EUR",
        }})

        account = await AccountMutations(api, cache).update_account(
            "a1", AccountUpdate(name="Checking")
        )

        assert isinstance(account, Account)
        assert account.currency == "EUR"

    @pytest.mark.asyncio
    async def test_delete_transaction(self, api, cache, backend):
        """Test transaction deletes return the server body."""
        backend.route("DELETE", "/api/transactions/t1", json_body={"success": True})

        result = await TransactionMutations(api, cache).delete_transaction("t1", "b1")

        assert result == {"success": True}


class TestAccountTransactions:
    """Tests for transfers, interest and adjustments."""

    @pytest.mark.asyncio
    async def test_transfer_invalidates_accounts(self, api, cache, resources, backend):
        """Test balance movements also invalidate cached accounts."""
        backend.route("GET", "/api/accounts", json_body={"accounts": []})
        backend.route("GET", "/api/account-transactions", json_body={"accountTransactions": []})
        accounts = resources.accounts("b1")
        movements = resources.account_transactions("b1", "a1")
        await accounts.load()
        await movements.load()
        backend.route("POST", "/api/account-transactions", status=201,
                      json_body={"success": True, "transferId": "tr1"})

        result = await AccountTransactionMutations(api, cache).create_transfer(
            budget_id="b1",
            from_account_id="a1",
            from_account_name="Checking",
            to_account_id="a2",
            to_account_name="Savings",
            amount=100,
            date=datetime(2024, 3, 1),
        )

        assert result["transferId"] == "tr1"
        body = backend.bodies("POST")[0]
        assert body["type"] == "transfer"
        assert body["toAccountId"] == "a2"
        assert body["accountId"] == "a1"
        assert "description" not in body
        assert cache.peek(accounts.key).stale
        assert cache.peek(movements.key).stale

    @pytest.mark.asyncio
    async def test_interest_and_adjustment_types(self, api, cache, backend):
        """Test the helper sets the movement type."""
        backend.route("POST", "/api/account-transactions", status=201, json_body={"success": True})
        service = AccountTransactionMutations(api, cache)

        await service.create_interest("b1", "a1", "Savings", 4.2, datetime(2024, 3, 31))
        await service.create_adjustment("b1", "a1", "Savings", -1, datetime(2024, 3, 31), "fix")

        assert [b["type"] for b in backend.bodies("POST")] == ["interest", "adjustment"]


class TestCategories:
    """Tests for category edits."""

    @pytest.mark.asyncio
    async def test_reorder_expense_categories(self, api, cache, resources, backend):
        """Test reorder payload and scope."""
        backend.route("GET", "/api/categories/income", json_body={"categories": []})
        backend.route("GET", "/api/categories/expense", json_body={"categories": []})
        income = resources.income_categories("b1")
        expense = resources.expense_categories("b1")
        await income.load()
        await expense.load()
        backend.route("PATCH", "/api/categories/expense/reorder", json_body={"categories": []})

        await CategoryMutations(api, cache).reorder_expense_categories(
            "b1", [CategoryOrder(id="c2", order=0), CategoryOrder(id="c1", order=1)]
        )

        assert backend.bodies("PATCH") == [{
            "budgetId": "b1",
            "categories": [{"id": "c2", "order": 0}, {"id": "c1", "order": 1}],
        }]
        assert cache.peek(expense.key).stale
        assert not cache.peek(income.key).stale

    @pytest.mark.asyncio
    async def test_failed_archive_names_the_kind(self, api, cache, backend):
        """Test error messages say which category kind failed."""
        backend.route("DELETE", "/api/categories/income/c1", status=400,
                      json_body={"error": "in use"})

        with pytest.raises(MutationError) as exc_info:
            await CategoryMutations(api, cache).archive_income_category("c1")

        assert str(exc_info.value) == "Failed to archive income category"
        assert exc_info.value.detail == "in use"

    @pytest.mark.asyncio
    async def test_update_income_category(self, api, cache, backend):
        """Test category updates PATCH the record."""
        backend.route("PATCH", "/api/categories/income/c1", json_body={"category": {}})

        await CategoryMutations(api, cache).update_income_category(
            "c1", CategoryUpdate(projected_amount=300)
        )

        assert backend.bodies("PATCH") == [{"projectedAmount": 300.0}]


class TestRecurring:
    """Tests for recurring transaction helpers."""

    @pytest.mark.asyncio
    async def test_pause_sends_inactive(self, api, cache, backend):
        """Test pausing is an update with isActive false."""
        backend.route("PATCH", "/api/recurring-transactions/r1", json_body={"recurringTransaction": {
            "_id": "r1", "budgetId": "b1", "type": "expense", "categoryId": "c1",
            "categoryName": "Gym", "amount": 30, "frequency": "monthly",
            "startDate": "2024-01-01T00:00:00Z", "isActive": False,
        }})

        item = await RecurringTransactionMutations(api, cache).pause_recurring_transaction("r1")

        assert isinstance(item, RecurringTransaction)
        assert item.is_active is False
        assert backend.bodies("PATCH") == [{"isActive": False}]

    @pytest.mark.asyncio
    async def test_generate_posts_month_query(self, api, cache, backend):
        """Test generating sends budget, year and month in the query."""
        backend.route("POST", "/api/recurring-transactions/generate", json_body={
            "success": True, "generated": 2, "skipped": 1,
            "message": "Generated 2 recurring transactions",
        })

        result = await RecurringTransactionMutations(api, cache).generate_recurring_transactions(
            "b1", month=3, year=2024
        )

        assert backend.urls("POST") == [
            "/api/recurring-transactions/generate?budgetId=b1&year=2024&month=3"
        ]
        assert isinstance(result, GenerateResult)
        assert (result.generated, result.skipped) == (2, 1)

    @pytest.mark.asyncio
    async def test_generate_invalidates_transaction_views(self, api, cache, resources, backend):
        """Test generated rows refresh transactions, calendar and alerts of the budget only."""
        backend.route("GET", "/api/transactions", json_body={"transactions": []})
        backend.route("GET", "/api/calendar/transactions", json_body={"transactionsByDay": {}})
        backend.route("GET", "/api/dashboard/alerts", json_body={"alerts": []})
        backend.route("GET", "/api/recurring-transactions", json_body={"recurringTransactions": []})
        transactions = resources.transactions("b1", 3, 2024)
        calendar = resources.calendar_transactions("b1", 3, 2024)
        alerts = resources.alerts("b1")
        other_alerts = resources.alerts("b2")
        templates = resources.recurring_transactions("b1")
        for handle in (transactions, calendar, alerts, other_alerts, templates):
            await handle.load()
        backend.route("POST", "/api/recurring-transactions/generate", json_body={
            "success": True, "generated": 0, "skipped": 3,
        })

        await RecurringTransactionMutations(api, cache).generate_recurring_transactions(
            "b1", month=3, year=2024
        )

        assert cache.peek(transactions.key).stale
        assert cache.peek(calendar.key).stale
        assert cache.peek(alerts.key).stale
        assert not cache.peek(other_alerts.key).stale
        assert not cache.peek(templates.key).stale

    @pytest.mark.asyncio
    async def test_failed_generate_message(self, api, cache, backend):
        """Test a failed generate names the plural resource."""
        backend.route("POST", "/api/recurring-transactions/generate", status=500,
                      json_body={"error": "Internal server error"})

        with pytest.raises(MutationError) as exc_info:
            await RecurringTransactionMutations(api, cache).generate_recurring_transactions(
                "b1", month=3, year=2024
            )

        assert str(exc_info.value) == "Failed to generate recurring transactions"

    @pytest.mark.asyncio
    async def test_template_edit_invalidates_upcoming_payments(self, api, cache, resources, backend):
        """Test deleting a template refreshes the upcoming payments list."""
        backend.route("GET", "/api/dashboard/upcoming-payments", json_body={"upcomingPayments": []})
        upcoming = resources.upcoming_payments("b1")
        await upcoming.load()
        backend.route("DELETE", "/api/recurring-transactions/r1", json_body={"success": True})

        await RecurringTransactionMutations(api, cache).delete_recurring_transaction("r1", "b1")

        assert cache.peek(upcoming.key).stale


class TestTransactionViews:
    """Tests for server views derived from budget transactions."""

    @pytest.mark.asyncio
    async def test_transaction_write_invalidates_calendar_and_alerts(self, api, cache, resources, backend):
        """Test a transaction delete refreshes the calendar and alerts of its budget."""
        backend.route("GET", "/api/calendar/transactions", json_body={"transactionsByDay": {}})
        backend.route("GET", "/api/dashboard/alerts", json_body={"alerts": []})
        calendar = resources.calendar_transactions("b1", 3, 2024)
        alerts = resources.alerts("b1")
        other_calendar = resources.calendar_transactions("b2", 3, 2024)
        for handle in (calendar, alerts, other_calendar):
            await handle.load()
        backend.route("DELETE", "/api/transactions/t1", json_body={"success": True})

        await TransactionMutations(api, cache).delete_transaction("t1", "b1")

        assert cache.peek(calendar.key).stale
        assert cache.peek(alerts.key).stale
        assert not cache.peek(other_calendar.key).stale


class TestCategoryCreate:
    """Tests for creating categories."""

    @pytest.mark.asyncio
    async def test_create_income_category_payload(self, api, cache, backend):
        """Test amounts go out as numbers and the envelope is unwrapped."""
        backend.route("POST", "/api/categories/income", status=201, json_body={"category": {
            "_id": "c1", "budgetId": "b1", "name": "Salary",
            "projectedAmount": 3000.5, "order": 0,
        }})

        category = await CategoryMutations(api, cache).create_income_category(
            IncomeCategoryCreate(
                budget_id="b1", name="Salary", projected_amount=Decimal("3000.50"), order=0,
            )
        )

        assert backend.bodies("POST") == [{
            "budgetId": "b1", "name": "Salary", "projectedAmount": 3000.5, "order": 0,
        }]
        assert category.id == "c1"
        assert category.projected_amount == Decimal("3000.5")

    @pytest.mark.asyncio
    async def test_create_expense_category_scope(self, api, cache, resources, backend):
        """Test an expense category create leaves income categories fresh."""
        backend.route("GET", "/api/categories/income", json_body={"categories": []})
        backend.route("GET", "/api/categories/expense", json_body={"categories": []})
        income = resources.income_categories("b1")
        expense = resources.expense_categories("b1")
        await income.load()
        await expense.load()
        backend.route("POST", "/api/categories/expense", status=201, json_body={"category": {
            "_id": "c2", "budgetId": "b1", "name": "Rent",
            "projectedAmount": 1200, "order": 0, "category": "needs",
        }})

        category = await CategoryMutations(api, cache).create_expense_category(
            ExpenseCategoryCreate(
                budget_id="b1", name="Rent", projected_amount=1200,
                category=RuleBucket.NEEDS, order=0,
            )
        )

        assert backend.bodies("POST")[0]["category"] == "needs"
        assert category.category == RuleBucket.NEEDS
        assert cache.peek(expense.key).stale
        assert not cache.peek(income.key).stale

    @pytest.mark.asyncio
    async def test_failed_create_names_the_kind(self, api, cache, backend):
        """Test a failed create says which category kind failed."""
        backend.route("POST", "/api/categories/expense", status=400,
                      json_body={"error": "Name is required"})

        with pytest.raises(MutationError) as exc_info:
            await CategoryMutations(api, cache).create_expense_category(
                ExpenseCategoryCreate(
                    budget_id="b1", name="Rent", projected_amount=0, category=RuleBucket.NEEDS,
                )
            )

        assert str(exc_info.value) == "Failed to create expense category"


SETTINGS = UserSettings(
    country="Germany",
    currency="EUR",
    currency_symbol="€",
    starting_month=1,
    year=2024,
)


class TestBudgetsAndUsers:
    """Tests for writes scoped by the signed-in user."""

    @pytest.mark.asyncio
    async def test_create_budget_refreshes_budget_lists(self, api, cache, resources, backend):
        """Test a new budget invalidates the budget list of every owner."""
        backend.route("GET", "/api/budgets", json_body={"budgets": []})
        mine = resources.budgets("u1")
        await mine.load()
        backend.route("POST", "/api/budgets", status=201, json_body={"budget": {
            "_id": "bg1", "userId": "u1", "year": 2024, "name": "2024 Budget",
        }})

        budget = await BudgetMutations(api, cache).create_budget(
            BudgetCreate(year=2024, name="2024 Budget")
        )

        assert backend.bodies("POST") == [{"year": 2024, "name": "2024 Budget"}]
        assert budget.id == "bg1"
        assert cache.peek(mine.key).stale

    @pytest.mark.asyncio
    async def test_failed_budget_create(self, api, cache, backend):
        """Test a conflict surfaces the server's message."""
        backend.route("POST", "/api/budgets", status=409,
                      json_body={"error": "Budget for this year already exists"})

        with pytest.raises(MutationError) as exc_info:
            await BudgetMutations(api, cache).create_budget(BudgetCreate(year=2024, name="Mine"))

        assert str(exc_info.value) == "Failed to create budget"
        assert exc_info.value.status_code == 409
        assert exc_info.value.detail == "Budget for this year already exists"

    @pytest.mark.asyncio
    async def test_save_settings_payload(self, api, cache, backend):
        """Test settings are wrapped and sent camelCased."""
        backend.route("POST", "/api/users", json_body={"user": {
            "_id": "u1", "email": "a@example.com", "settings": SETTINGS.to_payload(),
        }})

        user = await UserMutations(api, cache).save_settings(SETTINGS, email="a@example.com")

        assert backend.bodies("POST") == [{
            "settings": {
                "country": "Germany",
                "currency": "EUR",
                "currencySymbol": "€",
                "startingMonth": 1,
                "year": 2024,
                "rolloverEnabled": True,
            },
            "email": "a@example.com",
        }]
        assert user.settings.currency_symbol == "€"

    @pytest.mark.asyncio
    async def test_save_settings_invalidates_user(self, api, cache, resources, backend):
        """Test cached user records go stale after a settings save."""
        backend.route("GET", "/api/users", json_body={"user": None})
        me = resources.user("u1")
        await me.load()
        backend.route("POST", "/api/users", json_body={"user": {"_id": "u1"}})

        await UserMutations(api, cache).save_settings(SETTINGS)

        assert cache.peek(me.key).stale

    @pytest.mark.asyncio
    async def test_failed_settings_save(self, api, cache, backend):
        """Test a failed save reads as a settings failure."""
        backend.route("POST", "/api/users", status=401, json_body={"error": "Unauthorized"})

        with pytest.raises(MutationError) as exc_info:
            await UserMutations(api, cache).save_settings(SETTINGS)

        assert str(exc_info.value) == "Failed to save user settings"
