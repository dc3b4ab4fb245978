"""
Country and Currency Reference Data

Used by the setup page (country -> currency) and wherever an amount is
shown with a symbol. Unknown countries fall back to US dollars and
unknown currency codes fall back to "$".
"""

from decimal import Decimal
from typing import Union

from pydantic import BaseModel, ConfigDict


class CountryCurrency(BaseModel):
    """One country with its ISO currency code and display symbol."""

    model_config = ConfigDict(frozen=True)

    country: str
    currency: str
    symbol: str


DEFAULT_CURRENCY = "USD"
DEFAULT_SYMBOL = "$"


COUNTRIES_WITH_CURRENCY: tuple[CountryCurrency, ...] = tuple(
    CountryCurrency(country=country, currency=currency, symbol=symbol)
    for country, currency, symbol in [
        ("United States", "USD", "$"),
        ("Spain", "EUR", "€"),
        ("United Kingdom", "GBP", "£"),
        ("Canada", "CAD", "C$"),
        ("Australia", "AUD", "A$"),
        ("Japan", "JPY", "¥"),
        ("China", "CNY", "¥"),
        ("India", "INR", "₹"),
        ("Brazil", "BRL", "R$"),
        ("Mexico", "MXN", "$"),
        ("Argentina", "ARS", "$"),
        ("Chile", "CLP", "$"),
        ("Colombia", "COP", "$"),
        ("Peru", "PEN", "S/"),
        ("Uruguay", "UYU", "$U"),
        ("Germany", "EUR", "€"),
        ("France", "EUR", "€"),
        ("Italy", "EUR", "€"),
        ("Portugal", "EUR", "€"),
        ("Netherlands", "EUR", "€"),
        ("Belgium", "EUR", "€"),
        ("Switzerland", "CHF", "CHF"),
        ("Sweden", "SEK", "kr"),
        ("Norway", "NOK", "kr"),
        ("Denmark", "DKK", "kr"),
        ("Poland", "PLN", "zł"),
        ("Russia", "RUB", "₽"),
        ("Turkey", "TRY", "₺"),
        ("South Africa", "ZAR", "R"),
        ("South Korea", "KRW", "₩"),
        ("Singapore", "SGD", "S$"),
        ("Hong Kong", "HKD", "HK$"),
        ("New Zealand", "NZD", "NZ$"),
        ("Thailand", "THB", "฿"),
        ("Malaysia", "MYR", "RM"),
        ("Indonesia", "IDR", "Rp"),
        ("Philippines", "PHP", "₱"),
        ("Vietnam", "VND", "₫"),
        ("Egypt", "EGP", "E£"),
        ("Nigeria", "NGN", "₦"),
        ("Kenya", "KES", "KSh"),
        ("Israel", "ILS", "₪"),
        ("UAE", "AED", "د.إ"),
        ("Saudi Arabia", "SAR", "﷼"),
        ("Pakistan", "PKR", "₨"),
        ("Bangladesh", "BDT", "৳"),
        ("Czech Republic", "CZK", "Kč"),
        ("Hungary", "HUF", "Ft"),
        ("Romania", "RON", "lei"),
        ("Greece", "EUR", "€"),
    ]
)


def currency_for_country(country: str) -> CountryCurrency:
    """
    Look up a country's currency, case-insensitively.

    Unknown countries get USD with the "$" symbol, keeping the name
    the caller passed.
    """
    wanted = country.lower()
    for entry in COUNTRIES_WITH_CURRENCY:
        if entry.country.lower() == wanted:
            return entry
    return CountryCurrency(
        country=country,
        currency=DEFAULT_CURRENCY,
        symbol=DEFAULT_SYMBOL,
    )


def currency_symbol(currency: str) -> str:
    """Symbol for an ISO code; the first country listed wins."""
    for entry in COUNTRIES_WITH_CURRENCY:
        if entry.currency == currency:
            return entry.symbol
    return DEFAULT_SYMBOL


def all_countries() -> list[str]:
    return sorted(entry.country for entry in COUNTRIES_WITH_CURRENCY)


def all_currencies() -> list[str]:
    return sorted({entry.currency for entry in COUNTRIES_WITH_CURRENCY})


def format_amount(amount: Union[Decimal, float], currency: str = DEFAULT_CURRENCY) -> str:
    """Format an amount for display, e.g. format_amount(-12.5, "EUR") -> "-€12.50"."""
    sign = "-" if amount < 0 else ""
    return f"{sign}{currency_symbol(currency)}{abs(amount):,.2f}"
