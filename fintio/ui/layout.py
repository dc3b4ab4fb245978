"""
Dashboard Layout

CRITICAL: Every dashboard page renders inside DashboardLayout.
A visitor without a signed-in user is sent to "/" and the page body
is never rendered, so no budget data is requested on their behalf.

The layout also owns the sidebar navigation.
"""

from typing import Callable, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from fintio.auth import CurrentSession
from fintio.telemetry import get_logger
from fintio.ui.months import MONTHS, month_path
from fintio.ui.navigation import Router


T = TypeVar("T")

SIGNED_OUT_PATH = "/"
APP_NAME = "Fintio"
APP_TAGLINE = "Finance Management"


class NavItem(BaseModel):
    """Sidebar entry; items holds the collapsible sub-entries."""

    model_config = ConfigDict(frozen=True)

    title: str
    href: str
    icon: str = ""
    items: tuple["NavItem", ...] = Field(default_factory=tuple)

    def is_active(self, path: str) -> bool:
        """Groups are active when one of their sub-entries is."""
        if self.items:
            return any(sub.href == path for sub in self.items)
        return self.href == path


NAV_ITEMS: tuple[NavItem, ...] = (
    NavItem(title="Dashboard", href="/dashboard", icon="🏠"),
    NavItem(title="Calendar View", href="/calendar", icon="📅"),
    NavItem(
        title="Monthly View",
        href="/month",
        icon="🗓️",
        items=tuple(
            NavItem(title=m.label, href=month_path(m.value)) for m in MONTHS
        ),
    ),
    NavItem(title="Breakdown", href="/breakdown", icon="📊"),
    NavItem(title="Accounts", href="/accounts", icon="👛"),
    NavItem(title="Savings Planner", href="/savings", icon="🐷"),
    NavItem(title="Subscriptions", href="/subscriptions", icon="💳"),
    NavItem(title="Recurring Transactions", href="/recurring", icon="🔁"),
    NavItem(title="Categories", href="/categories", icon="⚙️"),
    NavItem(title="Setup", href="/setup", icon="🛠️"),
)


class DashboardLayout:
    """
    Access gate plus sidebar for the dashboard pages.

    Args:
        session: Answers who is signed in
        router: Used for the signed-out redirect and for navigation
        nav_items: Sidebar entries. Defaults to NAV_ITEMS.
    """

    def __init__(
        self,
        session: CurrentSession,
        router: Router,
        nav_items: tuple[NavItem, ...] = NAV_ITEMS,
    ):
        self._session = session
        self._router = router
        self.nav_items = nav_items
        self._logger = get_logger("fintio.ui")

    def render(self, body: Callable[[str], T]) -> Optional[T]:
        """
        Render body for the signed-in user, or redirect.

        Args:
            body: Called with the user ID when someone is signed in

        Returns:
            Whatever body returns, or None after a redirect
        """
        user_id = self._session.user_id()
        if not user_id:
            self._logger.info(
                "layout_redirect",
                from_path=self._router.current_path,
                to_path=SIGNED_OUT_PATH,
            )
            self._router.push(SIGNED_OUT_PATH)
            return None
        return body(user_id)

    def active_item(self, path: Optional[str] = None) -> Optional[NavItem]:
        """The top-level entry highlighted for path (default: current path)."""
        path = self._router.current_path if path is None else path
        for item in self.nav_items:
            if item.is_active(path):
                return item
        return None

    def navigate(self, href: str) -> None:
        self._router.push(href)
