"""
Streamlit Frontend for the Fintio Dashboard

DESIGN PRINCIPLES:
1. Every page renders inside DashboardLayout (signed-out visitors go to "/")
2. Nothing is requested until a budget is selected
3. Read failures are shown on the page, never raised
4. Write failures are shown with the server's reason
5. After a successful write the page re-reads through the cache

Navigation is routing state: the sidebar and the month picker push a
path, and the page for that path is rendered on the next run.
"""

import asyncio
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

import streamlit as st
from pydantic import ValidationError

from fintio.auth import EnvironmentSession, StreamlitSession
from fintio.currency import all_countries, currency_for_country, format_amount
from fintio.dashboard import Dashboard, create_dashboard
from fintio.models import (
    AlertLevel,
    AlertsResponse,
    BillingCycle,
    GoalPriority,
    RuleBucket,
    SavingsGoalCreate,
    SubscriptionCreate,
    TransactionCreate,
    TransactionType,
    UpcomingPaymentsResponse,
    total,
)
from fintio.mutations import MutationError
from fintio.resources import ResourceHandle, ResourceState
from fintio.services.api import ApiError
from fintio.setup import SetupForm
from fintio.ui import (
    APP_NAME,
    APP_TAGLINE,
    SIGNED_OUT_PATH,
    DashboardLayout,
    MonthSelector,
    StreamlitRouter,
    gradient_orb,
    month_from_path,
)


# Page configuration
st.set_page_config(
    page_title=APP_NAME,
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
    .absolute { position: absolute; pointer-events: none; }
    .rounded-full { border-radius: 9999px; }
    .blur-3xl { filter: blur(64px); }
    .animate-pulse { animation: pulse 2s cubic-bezier(0.4, 0, 0.6, 1) infinite; }
    @keyframes pulse { 50% { opacity: .5; } }
</style>
""", unsafe_allow_html=True)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_dashboard() -> Dashboard:
    """Get or create the dashboard components (cached across sessions)."""
    return create_dashboard()


def load(handle: ResourceHandle) -> ResourceState:
    return run_async(handle.load())


def show_state(state: ResourceState, empty_message: str) -> bool:
    """Render loading/error/empty states. Returns True when data can be shown."""
    if state.key is None:
        st.info("Select a budget in the sidebar to get started.")
        return False
    if state.is_error:
        st.error(f"Could not load data: {state.error}")
        return False
    if state.is_loading:
        st.info("Loading...")
        return False
    if not state.data:
        st.caption(empty_message)
        return False
    return True


def run_write(coro, success_message: Optional[str]) -> Optional[Any]:
    """Run a mutation and report the outcome (no message when success_message is None)."""
    try:
        result = run_async(coro)
    except MutationError as e:
        reason = f": {e.detail}" if e.detail else ""
        st.error(f"{e}{reason}")
        return None
    except ApiError as e:
        st.error(f"The server answered, but the reply could not be read: {e}")
        return None
    if success_message:
        st.success(success_message)
    return result


def main():
    """Main application entry point."""
    dashboard = get_dashboard()
    router = StreamlitRouter(rerun=st.rerun)
    session = StreamlitSession()

    # A locally pinned user signs in automatically
    pinned = EnvironmentSession().user_id()
    if pinned and not session.user_id():
        session.sign_in(pinned)

    if router.current_path == SIGNED_OUT_PATH:
        render_landing_page(session, router)
        return

    layout = DashboardLayout(session, router)
    layout.render(lambda user_id: render_dashboard(dashboard, layout, router, user_id))


def render_landing_page(session: StreamlitSession, router: StreamlitRouter):
    st.markdown(
        gradient_orb("top-0 left-0", "from-primary/20 to-accent/10"),
        unsafe_allow_html=True,
    )
    st.title(f"💰 {APP_NAME}")
    st.markdown(f"**{APP_TAGLINE}**")

    if session.user_id():
        if st.button("Go to dashboard", type="primary"):
            router.push("/dashboard")
        return

    st.info("Sign in with your identity provider to continue.")
    user_id = st.text_input("User ID (local development)")
    if st.button("Continue", type="primary", disabled=not user_id):
        session.sign_in(user_id)
        router.push("/dashboard")


def render_sidebar(
    dashboard: Dashboard,
    layout: DashboardLayout,
    router: StreamlitRouter,
    user_id: str,
) -> Optional[str]:
    """Render navigation and the budget picker. Returns the selected budget ID."""
    st.sidebar.title(f"💰 {APP_NAME}")
    st.sidebar.caption(APP_TAGLINE)
    st.sidebar.markdown("---")

    active = layout.active_item()
    for item in layout.nav_items:
        is_active = active is not None and active.href == item.href
        if item.items:
            with st.sidebar.expander(f"{item.icon} {item.title}", expanded=is_active):
                for sub in item.items:
                    if st.button(sub.title, key=f"nav-{sub.href}",
                                 disabled=router.current_path == sub.href):
                        layout.navigate(sub.href)
        elif st.sidebar.button(f"{item.icon} {item.title}", key=f"nav-{item.href}",
                               disabled=is_active):
            layout.navigate(item.href)

    st.sidebar.markdown("---")
    state = load(dashboard.resources.budgets(user_id))
    if state.is_error:
        st.sidebar.error(f"Could not load budgets: {state.error}")
        return None
    budgets = sorted(state.data, key=lambda b: b.year, reverse=True)
    if not budgets:
        st.sidebar.info("No budgets yet.")
        if st.sidebar.button("🛠️ Set up a budget", key="nav-setup-empty",
                             disabled=router.current_path == "/setup"):
            layout.navigate("/setup")
        return None

    ids = [b.id for b in budgets]
    current = st.session_state.get("budget_id")
    budget = st.sidebar.selectbox(
        "Budget",
        budgets,
        index=ids.index(current) if current in ids else 0,
        format_func=lambda b: f"{b.name} ({b.year})",
        help="Every page shows data for this budget",
    )
    st.session_state.budget_id = budget.id
    return budget.id


def render_dashboard(
    dashboard: Dashboard,
    layout: DashboardLayout,
    router: StreamlitRouter,
    user_id: str,
):
    budget_id = render_sidebar(dashboard, layout, router, user_id)
    path = router.current_path
    today = date.today()

    month = month_from_path(path) or (today.month if path == "/month" else None)
    if month is not None:
        render_month_page(dashboard, router, budget_id, month, today.year)
    elif path == "/dashboard":
        render_home_page(dashboard, budget_id, today)
    elif path == "/calendar":
        render_calendar_page(dashboard, budget_id, today)
    elif path == "/breakdown":
        render_breakdown_page(dashboard, budget_id, today)
    elif path == "/accounts":
        render_accounts_page(dashboard, budget_id)
    elif path == "/savings":
        render_savings_page(dashboard, budget_id)
    elif path == "/subscriptions":
        render_subscriptions_page(dashboard, budget_id)
    elif path == "/recurring":
        render_recurring_page(dashboard, budget_id)
    elif path == "/categories":
        render_categories_page(dashboard, budget_id)
    elif path == "/setup":
        render_setup_page(dashboard, router)
    else:
        st.warning(f"Page not found: {path}")


def render_home_page(dashboard: Dashboard, budget_id: Optional[str], today: date):
    st.title("🏠 Dashboard")

    if budget_id:
        render_alerts(dashboard, budget_id)

    accounts = load(dashboard.resources.accounts(budget_id))
    if show_state(accounts, "No accounts yet."):
        balance = total(a.balance for a in accounts.data if a.is_active)
        st.metric("Total balance", format_amount(balance, accounts.data[0].currency))

    st.subheader("This month")
    transactions = load(dashboard.resources.transactions(budget_id, today.month, today.year))
    if show_state(transactions, "No transactions this month."):
        income = total(t.amount for t in transactions.data if t.type == TransactionType.INCOME)
        expenses = total(t.amount for t in transactions.data if t.type == TransactionType.EXPENSE)
        col1, col2, col3 = st.columns(3)
        col1.metric("Income", format_amount(income))
        col2.metric("Expenses", format_amount(expenses))
        col3.metric("Net", format_amount(income - expenses))

    st.subheader("💵 Upcoming income")
    upcoming = load(dashboard.resources.upcoming_payments(budget_id))
    if show_state(upcoming, "No upcoming payments."):
        payments = UpcomingPaymentsResponse(upcoming_payments=upcoming.data).of_type(
            TransactionType.INCOME
        )
        if not payments:
            st.caption("No upcoming income.")
        for payment in payments:
            col1, col2 = st.columns([3, 1])
            col1.markdown(f"**{payment.description}** ({payment.category_name})")
            col1.caption(f"{payment.days_text}, {payment.frequency.value}")
            col2.markdown(f"**{format_amount(payment.amount)}**")


ALERT_STYLES = {
    AlertLevel.DANGER: st.error,
    AlertLevel.WARNING: st.warning,
    AlertLevel.INFO: st.info,
}


def render_alerts(dashboard: Dashboard, budget_id: str):
    """Budget alerts for the current month; dismissed ones stay hidden for the session."""
    state = load(dashboard.resources.alerts(budget_id))
    if state.is_error or not state.data:
        return
    dismissed = st.session_state.setdefault("dismissed_alerts", set())
    for alert in AlertsResponse(alerts=state.data).visible(dismissed):
        col1, col2 = st.columns([5, 1])
        with col1:
            ALERT_STYLES[alert.type](f"**{alert.title}**: {alert.message}")
        if col2.button("Dismiss", key=f"alert-{alert.id}"):
            dismissed.add(alert.id)
            st.rerun()


def render_calendar_page(dashboard: Dashboard, budget_id: Optional[str], today: date):
    st.title("📅 Calendar View")
    state = load(dashboard.resources.calendar_transactions(budget_id, today.month, today.year))
    if not show_state(state, "Nothing scheduled this month."):
        return
    calendar = state.data
    days = calendar.days()
    if not days:
        st.caption("Nothing scheduled this month.")
        return
    for day in days:
        rows = calendar.for_day(day)
        net = total(t.amount if t.type == TransactionType.INCOME else -t.amount for t in rows)
        with st.expander(f"{today.strftime('%B')} {day} ({format_amount(net)})"):
            for t in rows:
                st.write(f"{t.category_name}: {format_amount(t.amount)} ({t.type.value})")


def render_month_page(
    dashboard: Dashboard,
    router: StreamlitRouter,
    budget_id: Optional[str],
    month: int,
    year: int,
):
    selector = MonthSelector(current_month=month, year=year, router=router)
    col1, col2 = st.columns([3, 1])
    col1.title(selector.title)
    choice = col2.selectbox(
        "Month",
        selector.options,
        index=selector.index,
        format_func=lambda m: m.label,
        label_visibility="collapsed",
    )
    if choice is not None and choice.value != month:
        selector.select(choice)

    handle = dashboard.resources.transactions(budget_id, month, year)
    state = load(handle)
    if show_state(state, "No transactions this month."):
        st.dataframe(
            [
                {
                    "Date": t.date.date(),
                    "Category": t.category_name,
                    "Type": t.type.value,
                    "Amount": t.amount,
                    "Description": t.description or "",
                }
                for t in state.data
            ],
            use_container_width=True,
        )

    if budget_id:
        render_generate_recurring(dashboard, budget_id, month, year)
        render_transaction_form(dashboard, budget_id, month, year)


def render_generate_recurring(dashboard: Dashboard, budget_id: str, month: int, year: int):
    if not st.button("🔁 Generate Recurring",
                     help="Create this month's transactions from active recurring ones"):
        return
    result = run_write(
        dashboard.recurring_transactions.generate_recurring_transactions(budget_id, month, year),
        None,
    )
    if result is None:
        return
    if result.generated > 0:
        st.success(f"Generated {result.generated} recurring transactions!")
    else:
        st.info("No new recurring transactions to generate.")


def render_transaction_form(dashboard: Dashboard, budget_id: str, month: int, year: int):
    income = load(dashboard.resources.income_categories(budget_id)).data or []
    expense = load(dashboard.resources.expense_categories(budget_id)).data or []

    with st.form("add_transaction", clear_on_submit=True):
        st.subheader("➕ Add transaction")
        kind = st.radio("Type", [TransactionType.EXPENSE, TransactionType.INCOME],
                        format_func=lambda t: t.value.title(), horizontal=True)
        categories = expense if kind == TransactionType.EXPENSE else income
        category = st.selectbox("Category", categories, format_func=lambda c: c.name)
        amount = st.number_input("Amount", min_value=0.01, step=1.0)
        when = st.date_input("Date", value=date(year, month, 1))
        description = st.text_input("Description")
        submitted = st.form_submit_button("Save", type="primary")

    if submitted:
        if category is None:
            st.error("Create a category first.")
            return
        run_write(
            dashboard.transactions.create_transaction(TransactionCreate(
                budget_id=budget_id,
                date=datetime.combine(when, datetime.min.time()),
                type=kind,
                category_id=category.id,
                category_name=category.name,
                amount=amount,
                description=description or None,
            )),
            "Transaction saved.",
        )


def render_breakdown_page(dashboard: Dashboard, budget_id: Optional[str], today: date):
    st.title("📊 Breakdown")
    state = load(dashboard.resources.breakdown(budget_id, today.month, today.year))
    if not show_state(state, "No breakdown for this month."):
        return
    breakdown = state.data

    col1, col2 = st.columns(2)
    col1.metric("Projected income", format_amount(breakdown.totals.income.projected))
    col2.metric("Actual income", format_amount(breakdown.totals.income.actual))

    for bucket in RuleBucket:
        rows = breakdown.expense_rows(bucket)
        if not rows:
            continue
        st.subheader(bucket.value.title())
        st.dataframe(
            [
                {
                    "Category": r.name,
                    "Projected": r.projected,
                    "Actual": r.actual,
                    "Difference": r.difference,
                }
                for r in rows
            ],
            use_container_width=True,
        )


def render_accounts_page(dashboard: Dashboard, budget_id: Optional[str]):
    st.title("👛 Accounts")
    state = load(dashboard.resources.accounts(budget_id))
    if not show_state(state, "No accounts yet."):
        return
    accounts = state.data

    for account in accounts:
        st.markdown(
            f"**{account.name}** ({account.type.value}) "
            f"{format_amount(account.balance, account.currency)}"
        )

    if len(accounts) < 2:
        return

    with st.form("transfer", clear_on_submit=True):
        st.subheader("🔁 Transfer")
        source = st.selectbox("From", accounts, format_func=lambda a: a.name)
        target = st.selectbox("To", accounts, index=1, format_func=lambda a: a.name)
        amount = st.number_input("Amount", min_value=0.01, step=1.0)
        submitted = st.form_submit_button("Transfer", type="primary")

    if submitted:
        if source.id == target.id:
            st.error("Pick two different accounts.")
            return
        run_write(
            dashboard.account_transactions.create_transfer(
                budget_id=budget_id,
                from_account_id=source.id,
                from_account_name=source.name,
                to_account_id=target.id,
                to_account_name=target.name,
                amount=amount,
                date=datetime.now(),
            ),
            f"Moved {format_amount(amount, source.currency)} to {target.name}.",
        )


def render_savings_page(dashboard: Dashboard, budget_id: Optional[str]):
    st.title("🐷 Savings Planner")
    state = load(dashboard.resources.savings_goals(budget_id))
    if show_state(state, "No savings goals yet."):
        for goal in state.data:
            col1, col2 = st.columns([4, 1])
            col1.markdown(f"**{goal.name}** ({goal.priority.value})")
            col1.progress(
                min(goal.progress, 1.0),
                text=f"{format_amount(goal.current_amount)} of {format_amount(goal.target_amount)}",
            )
            if col2.button("Delete", key=f"goal-{goal.id}"):
                run_write(
                    dashboard.savings_goals.delete_goal(goal.id, budget_id),
                    f"Deleted {goal.name}.",
                )

    if not budget_id:
        return

    with st.form("new_goal", clear_on_submit=True):
        st.subheader("➕ New goal")
        name = st.text_input("Name")
        target = st.number_input("Target amount", min_value=0.01, step=100.0)
        priority = st.selectbox("Priority", list(GoalPriority), format_func=lambda p: p.value.title())
        deadline = st.date_input("Deadline", value=None)
        submitted = st.form_submit_button("Create goal", type="primary")

    if submitted and name:
        run_write(
            dashboard.savings_goals.create_goal(SavingsGoalCreate(
                budget_id=budget_id,
                name=name,
                target_amount=target,
                priority=priority,
                deadline=datetime.combine(deadline, datetime.min.time()) if deadline else None,
            )),
            f"Created {name}.",
        )


def render_subscriptions_page(dashboard: Dashboard, budget_id: Optional[str]):
    st.title("💳 Subscriptions")
    state = load(dashboard.resources.subscriptions(budget_id))
    if show_state(state, "No subscriptions yet."):
        for sub in state.data:
            col1, col2 = st.columns([4, 1])
            col1.markdown(
                f"**{sub.name}** {format_amount(sub.amount)} / {sub.billing_cycle.value}, "
                f"next on {sub.next_billing_date.date()}"
            )
            if col2.button("Delete", key=f"sub-{sub.id}"):
                run_write(
                    dashboard.subscriptions.delete_subscription(sub.id, budget_id),
                    f"Deleted {sub.name}.",
                )

    if not budget_id:
        return

    with st.form("new_subscription", clear_on_submit=True):
        st.subheader("➕ New subscription")
        name = st.text_input("Name")
        amount = st.number_input("Amount", min_value=0.0, step=1.0)
        cycle = st.selectbox("Billing cycle", list(BillingCycle), format_func=lambda c: c.value.title())
        next_billing = st.date_input("Next billing date")
        category = st.text_input("Category")
        submitted = st.form_submit_button("Add subscription", type="primary")

    if submitted and name:
        run_write(
            dashboard.subscriptions.create_subscription(SubscriptionCreate(
                budget_id=budget_id,
                name=name,
                amount=amount,
                billing_cycle=cycle,
                next_billing_date=datetime.combine(next_billing, datetime.min.time()),
                category=category,
            )),
            f"Added {name}.",
        )


def render_recurring_page(dashboard: Dashboard, budget_id: Optional[str]):
    st.title("🔁 Recurring Transactions")
    state = load(dashboard.resources.recurring_transactions(budget_id))
    if not show_state(state, "No recurring transactions yet."):
        return
    service = dashboard.recurring_transactions
    for item in state.data:
        col1, col2 = st.columns([4, 1])
        status = "active" if item.is_active else "paused"
        col1.markdown(
            f"**{item.category_name}** {format_amount(item.amount)} "
            f"{item.frequency.value} ({status})"
        )
        if item.is_active:
            if col2.button("Pause", key=f"rec-{item.id}"):
                run_write(service.pause_recurring_transaction(item.id, budget_id), "Paused.")
        elif col2.button("Resume", key=f"rec-{item.id}"):
            run_write(service.resume_recurring_transaction(item.id, budget_id), "Resumed.")


def render_categories_page(dashboard: Dashboard, budget_id: Optional[str]):
    st.title("⚙️ Categories")
    col1, col2 = st.columns(2)

    with col1:
        st.subheader("Income")
        state = load(dashboard.resources.income_categories(budget_id))
        if show_state(state, "No income categories."):
            for c in state.data:
                st.write(f"{c.name}: {format_amount(c.projected_amount)}")

    with col2:
        st.subheader("Expenses")
        state = load(dashboard.resources.expense_categories(budget_id))
        if show_state(state, "No expense categories."):
            for c in state.data:
                st.write(f"{c.name} ({c.category.value}): {format_amount(c.projected_amount)}")


BUCKET_LABELS = {
    RuleBucket.NEEDS.value: "Needs (50%)",
    RuleBucket.WANTS.value: "Wants (30%)",
    RuleBucket.SAVINGS.value: "Savings (20%)",
}


def filled_rows(rows: list[dict]) -> list[dict]:
    """Editor rows that have a name, with blank cells dropped so defaults apply."""
    return [
        {field: value for field, value in row.items() if value is not None}
        for row in rows
        if (row.get("name") or "").strip()
    ]


def render_setup_page(dashboard: Dashboard, router: StreamlitRouter):
    st.title("🛠️ Setup Your Budget")
    st.caption("Configure your budget settings and starting categories.")

    today = date.today()
    countries = all_countries()
    country = st.selectbox("Country", countries, index=countries.index("United States"))
    currency = currency_for_country(country)
    st.info(f"Amounts will be shown in {currency.currency} ({currency.symbol}).")
    st.caption(f"Example: {format_amount(Decimal('1234.50'), currency.currency)}")

    col1, col2 = st.columns(2)
    year = col1.number_input("Year", min_value=2020, max_value=2100, value=today.year, step=1)
    starting_month = col2.selectbox(
        "Starting month",
        list(range(1, 13)),
        format_func=lambda m: date(2000, m, 1).strftime("%B"),
    )
    rollover = st.checkbox("Roll unspent money into the next month", value=True)
    budget_name = st.text_input("Budget name", placeholder=f"{int(year)} Budget")

    st.subheader("Income categories")
    income = st.data_editor(
        [{"name": "", "projected_amount": 0.0}],
        num_rows="dynamic",
        key="setup-income",
        use_container_width=True,
        column_config={
            "name": st.column_config.TextColumn("Name"),
            "projected_amount": st.column_config.NumberColumn("Projected", min_value=0.0),
        },
    )
    st.subheader("Expense categories")
    expenses = st.data_editor(
        [{"name": "", "projected_amount": 0.0, "category": RuleBucket.NEEDS.value}],
        num_rows="dynamic",
        key="setup-expenses",
        use_container_width=True,
        column_config={
            "name": st.column_config.TextColumn("Name"),
            "projected_amount": st.column_config.NumberColumn("Projected", min_value=0.0),
            "category": st.column_config.SelectboxColumn(
                "Bucket",
                options=[bucket.value for bucket in RuleBucket],
                help=", ".join(BUCKET_LABELS.values()),
                required=True,
            ),
        },
    )

    if not st.button("Complete Setup", type="primary"):
        return
    try:
        form = SetupForm(
            country=country,
            starting_month=starting_month,
            year=int(year),
            rollover_enabled=rollover,
            budget_name=budget_name or None,
            income_categories=filled_rows(income),
            expense_categories=filled_rows(expenses),
        )
    except ValidationError as e:
        st.error(f"Add at least one named income and expense category ({e.error_count()} problem(s)).")
        return

    budget = run_write(dashboard.setup().run(form), f"Created {form.budget().name}.")
    if budget is not None:
        st.session_state.budget_id = budget.id
        router.push("/dashboard")


if __name__ == "__main__":
    main()
