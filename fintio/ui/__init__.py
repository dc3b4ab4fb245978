"""
Presentational Components Package

Framework-neutral view objects. The Streamlit app renders them; tests
drive them with an in-memory router and a static session.
"""

from fintio.ui.components import DEFAULT_ORB_COLOR, gradient_orb
from fintio.ui.layout import (
    APP_NAME,
    APP_TAGLINE,
    NAV_ITEMS,
    SIGNED_OUT_PATH,
    DashboardLayout,
    NavItem,
)
from fintio.ui.months import (
    MONTHS,
    MonthOption,
    MonthSelector,
    month_from_path,
    month_label,
    month_path,
)
from fintio.ui.navigation import InMemoryRouter, Router, StreamlitRouter

__all__ = [
    # Components
    "DEFAULT_ORB_COLOR",
    "gradient_orb",
    # Layout
    "APP_NAME",
    "APP_TAGLINE",
    "NAV_ITEMS",
    "SIGNED_OUT_PATH",
    "DashboardLayout",
    "NavItem",
    # Months
    "MONTHS",
    "MonthOption",
    "MonthSelector",
    "month_from_path",
    "month_label",
    "month_path",
    # Navigation
    "InMemoryRouter",
    "Router",
    "StreamlitRouter",
]
