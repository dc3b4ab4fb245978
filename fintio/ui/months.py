"""
Month Selection

The month being viewed is routing state: choosing a month navigates
to /month/{number} instead of changing anything in place.
"""

import re
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict

from fintio.telemetry import get_logger
from fintio.ui.navigation import Router


class MonthOption(BaseModel):
    model_config = ConfigDict(frozen=True)

    value: int
    label: str


MONTHS: tuple[MonthOption, ...] = tuple(
    MonthOption(value=i + 1, label=label)
    for i, label in enumerate([
        "January", "February", "March", "April", "May", "June",
        "July", "August", "September", "October", "November", "December",
    ])
)

_MONTH_PATH = re.compile(r"^/month/(\d{1,2})$")


def month_path(month: int) -> str:
    return f"/month/{month}"


def month_label(month: int) -> Optional[str]:
    for option in MONTHS:
        if option.value == month:
            return option.label
    return None


def month_from_path(path: str) -> Optional[int]:
    """Month number of a /month/{n} path, or None for any other path."""
    match = _MONTH_PATH.match(path)
    if match is None:
        return None
    month = int(match.group(1))
    return month if 1 <= month <= 12 else None


class MonthSelector:
    """
    Heading plus month picker for the monthly view.

    Usage:
        selector = MonthSelector(current_month=3, year=2024, router=router)
        selector.title              # "March 2024"
        selector.select("July")     # router -> /month/7
    """

    def __init__(self, current_month: int, year: int, router: Router):
        self.current_month = current_month
        self.year = year
        self._router = router
        self._logger = get_logger("fintio.ui")

    @property
    def title(self) -> str:
        # An out-of-range month renders without a label
        label = month_label(self.current_month)
        return f"{label} {self.year}" if label else f" {self.year}"

    @property
    def options(self) -> tuple[MonthOption, ...]:
        return MONTHS

    @property
    def index(self) -> Optional[int]:
        """Position of the current month in options, for select widgets."""
        for i, option in enumerate(MONTHS):
            if option.value == self.current_month:
                return i
        return None

    def select(self, month: Union[int, str, MonthOption]) -> str:
        """
        Navigate to a month.

        Args:
            month: Month number, its string form ("7"), its label
                ("July") or a MonthOption

        Returns:
            The path pushed onto the router

        Raises:
            ValueError: If month is not one of the twelve months
        """
        value = self._resolve(month)
        path = month_path(value)
        self._logger.info("month_selected", month=value, year=self.year, path=path)
        self._router.push(path)
        return path

    @staticmethod
    def _resolve(month: Union[int, str, MonthOption]) -> int:
        if isinstance(month, MonthOption):
            return month.value
        if isinstance(month, str):
            text = month.strip()
            if text.isdigit():
                month = int(text)
            else:
                for option in MONTHS:
                    if option.label.lower() == text.lower():
                        return option.value
                raise ValueError(f"Unknown month: {month!r}")
        if isinstance(month, int) and not isinstance(month, bool) and 1 <= month <= 12:
            return month
        raise ValueError(f"Unknown month: {month!r}")
