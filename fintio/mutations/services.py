"""
Mutation Services per Resource

Each class wraps the write endpoints of one resource. The shared
ResourceMutations.send() handles errors and cache invalidation.

Update and delete by id do not know the budget, so they invalidate the
resource across all budgets unless the caller passes budget_id.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional, Sequence
from urllib.parse import urlencode

from fintio.cache import Resource
from fintio.models.finance import (
    Account,
    AccountCreate,
    AccountTransactionCreate,
    AccountTransactionType,
    AccountUpdate,
    Budget,
    BudgetCreate,
    CategoryOrder,
    CategoryUpdate,
    ExpenseCategory,
    ExpenseCategoryCreate,
    IncomeCategory,
    IncomeCategoryCreate,
    RecurringTransaction,
    RecurringTransactionCreate,
    RecurringTransactionUpdate,
    SavingsGoal,
    SavingsGoalCreate,
    SavingsGoalUpdate,
    Subscription,
    SubscriptionCreate,
    SubscriptionUpdate,
    Transaction,
    TransactionCreate,
    TransactionUpdate,
    User,
    UserSettings,
)
from fintio.models.insights import GenerateResult
from fintio.mutations.base import ResourceMutations


# Server-side views computed from a budget's transactions
TRANSACTION_VIEWS = (Resource.CALENDAR_TRANSACTIONS, Resource.DASHBOARD_ALERTS)


class SubscriptionMutations(ResourceMutations):
    """Create, update (PUT) and delete subscriptions."""

    resource = Resource.SUBSCRIPTIONS
    label = "subscription"

    async def create_subscription(self, data: SubscriptionCreate) -> Subscription:
        body = await self.send(
            "create", "POST", self.resource.path,
            payload=data.to_payload(),
            budget_id=data.budget_id,
        )
        return self.to_entity(body, Subscription)

    async def update_subscription(
        self,
        subscription_id: str,
        data: SubscriptionUpdate,
        budget_id: Optional[str] = None,
    ) -> Subscription:
        body = await self.send(
            "update", "PUT", self.resource.item_path(subscription_id),
            payload=data.to_payload(),
            budget_id=budget_id,
            item_id=subscription_id,
        )
        return self.to_entity(body, Subscription)

    async def delete_subscription(
        self,
        subscription_id: str,
        budget_id: Optional[str] = None,
    ) -> Any:
        return await self.send(
            "delete", "DELETE", self.resource.item_path(subscription_id),
            budget_id=budget_id,
        )


class SavingsGoalMutations(ResourceMutations):
    """Create, update (PUT) and delete savings goals."""

    resource = Resource.SAVINGS_GOALS
    label = "goal"

    async def create_goal(self, data: SavingsGoalCreate) -> SavingsGoal:
        body = await self.send(
            "create", "POST", self.resource.path,
            payload=data.to_payload(),
            budget_id=data.budget_id,
        )
        return self.to_entity(body, SavingsGoal)

    async def update_goal(
        self,
        goal_id: str,
        data: SavingsGoalUpdate,
        budget_id: Optional[str] = None,
    ) -> SavingsGoal:
        body = await self.send(
            "update", "PUT", self.resource.item_path(goal_id),
            payload=data.to_payload(),
            budget_id=budget_id,
            item_id=goal_id,
        )
        return self.to_entity(body, SavingsGoal)

    async def delete_goal(self, goal_id: str, budget_id: Optional[str] = None) -> Any:
        return await self.send(
            "delete", "DELETE", self.resource.item_path(goal_id),
            budget_id=budget_id,
        )


class AccountMutations(ResourceMutations):
    resource = Resource.ACCOUNTS
    label = "account"

    async def create_account(self, data: AccountCreate) -> Account:
        body = await self.send(
            "create", "POST", self.resource.path,
            payload=data.to_payload(),
            budget_id=data.budget_id,
        )
        return self.to_entity(body, Account, envelope="account")

    async def update_account(
        self,
        account_id: str,
        data: AccountUpdate,
        budget_id: Optional[str] = None,
    ) -> Account:
        body = await self.send(
            "update", "PATCH", self.resource.item_path(account_id),
            payload=data.to_payload(),
            budget_id=budget_id,
            item_id=account_id,
        )
        return self.to_entity(body, Account, envelope="account")

    async def delete_account(self, account_id: str, budget_id: Optional[str] = None) -> Any:
        await self.send(
            "delete", "DELETE", self.resource.item_path(account_id),
            budget_id=budget_id,
        )
        return {"success": True}


class TransactionMutations(ResourceMutations):
    resource = Resource.TRANSACTIONS
    label = "transaction"
    dependents = TRANSACTION_VIEWS

    async def create_transaction(self, data: TransactionCreate) -> Transaction:
        body = await self.send(
            "create", "POST", self.resource.path,
            payload=data.to_payload(),
            budget_id=data.budget_id,
        )
        return self.to_entity(body, Transaction, envelope="transaction")

    async def update_transaction(
        self,
        transaction_id: str,
        data: TransactionUpdate,
        budget_id: Optional[str] = None,
    ) -> Transaction:
        body = await self.send(
            "update", "PATCH", self.resource.item_path(transaction_id),
            payload=data.to_payload(),
            budget_id=budget_id,
            item_id=transaction_id,
        )
        return self.to_entity(body, Transaction, envelope="transaction")

    async def delete_transaction(
        self,
        transaction_id: str,
        budget_id: Optional[str] = None,
    ) -> Any:
        return await self.send(
            "delete", "DELETE", self.resource.item_path(transaction_id),
            budget_id=budget_id,
        )


class AccountTransactionMutations(ResourceMutations):
    """
    Transfers, interest and adjustments.

    These move account balances, so cached accounts are invalidated too.
    """

    resource = Resource.ACCOUNT_TRANSACTIONS
    label = "account transaction"
    dependents = (Resource.ACCOUNTS,)

    async def create_account_transaction(self, data: AccountTransactionCreate) -> Any:
        return await self.send(
            "create", "POST", self.resource.path,
            payload=data.to_payload(),
            budget_id=data.budget_id,
        )

    async def delete_account_transaction(
        self,
        transaction_id: str,
        budget_id: Optional[str] = None,
    ) -> Any:
        await self.send(
            "delete", "DELETE", self.resource.item_path(transaction_id),
            budget_id=budget_id,
        )
        return {"success": True}

    async def create_transfer(
        self,
        budget_id: str,
        from_account_id: str,
        from_account_name: str,
        to_account_id: str,
        to_account_name: str,
        amount: Decimal,
        date: datetime,
        description: Optional[str] = None,
    ) -> Any:
        return await self.create_account_transaction(AccountTransactionCreate(
            budget_id=budget_id,
            account_id=from_account_id,
            account_name=from_account_name,
            type=AccountTransactionType.TRANSFER,
            amount=amount,
            date=date,
            description=description,
            to_account_id=to_account_id,
            to_account_name=to_account_name,
        ))

    async def create_interest(
        self,
        budget_id: str,
        account_id: str,
        account_name: str,
        amount: Decimal,
        date: datetime,
        description: Optional[str] = None,
    ) -> Any:
        return await self.create_account_transaction(AccountTransactionCreate(
            budget_id=budget_id,
            account_id=account_id,
            account_name=account_name,
            type=AccountTransactionType.INTEREST,
            amount=amount,
            date=date,
            description=description,
        ))

    async def create_adjustment(
        self,
        budget_id: str,
        account_id: str,
        account_name: str,
        amount: Decimal,
        date: datetime,
        description: Optional[str] = None,
    ) -> Any:
        return await self.create_account_transaction(AccountTransactionCreate(
            budget_id=budget_id,
            account_id=account_id,
            account_name=account_name,
            type=AccountTransactionType.ADJUSTMENT,
            amount=amount,
            date=date,
            description=description,
        ))


class CategoryMutations(ResourceMutations):
    """
    Income and expense category edits.

    One service covers both kinds; each call picks its resource.
    """

    resource = Resource.INCOME_CATEGORIES
    label = "income category"
    dependents = (Resource.DASHBOARD_ALERTS,)

    async def create_income_category(self, data: IncomeCategoryCreate) -> IncomeCategory:
        body = await self._write(
            Resource.INCOME_CATEGORIES, "create", "POST",
            Resource.INCOME_CATEGORIES.path,
            payload=data.to_payload(),
            budget_id=data.budget_id,
        )
        return self.to_entity(body, IncomeCategory, envelope="category")

    async def create_expense_category(self, data: ExpenseCategoryCreate) -> ExpenseCategory:
        body = await self._write(
            Resource.EXPENSE_CATEGORIES, "create", "POST",
            Resource.EXPENSE_CATEGORIES.path,
            payload=data.to_payload(),
            budget_id=data.budget_id,
        )
        return self.to_entity(body, ExpenseCategory, envelope="category")

    async def update_income_category(self, category_id: str, data: CategoryUpdate) -> Any:
        return await self._write(
            Resource.INCOME_CATEGORIES, "update", "PATCH",
            Resource.INCOME_CATEGORIES.item_path(category_id),
            payload=data.to_payload(),
        )

    async def update_expense_category(self, category_id: str, data: CategoryUpdate) -> Any:
        return await self._write(
            Resource.EXPENSE_CATEGORIES, "update", "PATCH",
            Resource.EXPENSE_CATEGORIES.item_path(category_id),
            payload=data.to_payload(),
        )

    async def reorder_income_categories(
        self,
        budget_id: str,
        categories: Sequence[CategoryOrder],
    ) -> Any:
        return await self._write(
            Resource.INCOME_CATEGORIES, "reorder", "PATCH",
            f"{Resource.INCOME_CATEGORIES.path}/reorder",
            payload=self._reorder_payload(budget_id, categories),
            budget_id=budget_id,
        )

    async def reorder_expense_categories(
        self,
        budget_id: str,
        categories: Sequence[CategoryOrder],
    ) -> Any:
        return await self._write(
            Resource.EXPENSE_CATEGORIES, "reorder", "PATCH",
            f"{Resource.EXPENSE_CATEGORIES.path}/reorder",
            payload=self._reorder_payload(budget_id, categories),
            budget_id=budget_id,
        )

    async def archive_income_category(self, category_id: str) -> Any:
        return await self._write(
            Resource.INCOME_CATEGORIES, "archive", "DELETE",
            Resource.INCOME_CATEGORIES.item_path(category_id),
        )

    async def archive_expense_category(self, category_id: str) -> Any:
        return await self._write(
            Resource.EXPENSE_CATEGORIES, "archive", "DELETE",
            Resource.EXPENSE_CATEGORIES.item_path(category_id),
        )

    async def _write(
        self,
        resource: Resource,
        operation: str,
        method: str,
        path: str,
        payload: Optional[Any] = None,
        budget_id: Optional[str] = None,
    ) -> Any:
        kind = "income" if resource == Resource.INCOME_CATEGORIES else "expense"
        label = f"{kind} categories" if operation == "reorder" else f"{kind} category"
        return await self.send(
            operation, method, path,
            payload=payload,
            budget_id=budget_id,
            label=label,
            resource=resource,
        )

    @staticmethod
    def _reorder_payload(budget_id: str, categories: Sequence[CategoryOrder]) -> dict:
        return {
            "budgetId": budget_id,
            "categories": [c.to_payload() for c in categories],
        }


class RecurringTransactionMutations(ResourceMutations):
    """
    Recurring templates, plus generating a month's transactions from them.

    Template edits change upcoming payments; generating writes budget
    transactions, so it invalidates those instead.
    """

    resource = Resource.RECURRING_TRANSACTIONS
    label = "recurring transaction"
    dependents = (Resource.UPCOMING_PAYMENTS,)

    async def create_recurring_transaction(
        self,
        data: RecurringTransactionCreate,
    ) -> RecurringTransaction:
        body = await self.send(
            "create", "POST", self.resource.path,
            payload=data.to_payload(),
            budget_id=data.budget_id,
        )
        return self.to_entity(body, RecurringTransaction, envelope="recurringTransaction")

    async def update_recurring_transaction(
        self,
        recurring_id: str,
        data: RecurringTransactionUpdate,
        budget_id: Optional[str] = None,
    ) -> RecurringTransaction:
        body = await self.send(
            "update", "PATCH", self.resource.item_path(recurring_id),
            payload=data.to_payload(),
            budget_id=budget_id,
            item_id=recurring_id,
        )
        return self.to_entity(body, RecurringTransaction, envelope="recurringTransaction")

    async def delete_recurring_transaction(
        self,
        recurring_id: str,
        budget_id: Optional[str] = None,
    ) -> Any:
        await self.send(
            "delete", "DELETE", self.resource.item_path(recurring_id),
            budget_id=budget_id,
        )
        return {"success": True}

    async def pause_recurring_transaction(
        self,
        recurring_id: str,
        budget_id: Optional[str] = None,
    ) -> RecurringTransaction:
        return await self.update_recurring_transaction(
            recurring_id, RecurringTransactionUpdate(is_active=False), budget_id
        )

    async def resume_recurring_transaction(
        self,
        recurring_id: str,
        budget_id: Optional[str] = None,
    ) -> RecurringTransaction:
        return await self.update_recurring_transaction(
            recurring_id, RecurringTransactionUpdate(is_active=True), budget_id
        )

    async def generate_recurring_transactions(
        self,
        budget_id: str,
        month: int,
        year: int,
    ) -> GenerateResult:
        """
        Create this month's transactions from the active templates.

        The server skips templates already generated for the month, so
        calling it twice is harmless.
        """
        query = urlencode([("budgetId", budget_id), ("year", year), ("month", month)])
        body = await self.send(
            "generate", "POST", f"{self.resource.path}/generate?{query}",
            budget_id=budget_id,
            label="recurring transactions",
            resource=Resource.TRANSACTIONS,
            dependents=TRANSACTION_VIEWS,
        )
        return self.to_entity(body, GenerateResult)


class BudgetMutations(ResourceMutations):
    """Budgets belong to the signed-in user; creating one refreshes every budget list."""

    resource = Resource.BUDGETS
    label = "budget"

    async def create_budget(self, data: BudgetCreate) -> Budget:
        body = await self.send(
            "create", "POST", self.resource.path,
            payload=data.to_payload(),
        )
        return self.to_entity(body, Budget, envelope="budget")


class UserMutations(ResourceMutations):
    resource = Resource.USERS
    label = "user settings"

    async def save_settings(
        self,
        settings: UserSettings,
        email: Optional[str] = None,
        name: Optional[str] = None,
    ) -> User:
        """Create the user on first setup, or overwrite their settings."""
        payload: dict[str, Any] = {"settings": settings.to_payload()}
        if email:
            payload["email"] = email
        if name:
            payload["name"] = name
        body = await self.send("save", "POST", self.resource.path, payload=payload)
        return self.to_entity(body, User, envelope="user")

    async def update_settings(self, settings: UserSettings) -> User:
        body = await self.send(
            "update", "PATCH", self.resource.path,
            payload={"settings": settings.to_payload()},
        )
        return self.to_entity(body, User, envelope="user")
