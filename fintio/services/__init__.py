"""Services package."""

from fintio.services.api import (
    ApiError,
    BudgetApiClient,
    FetchStyle,
    HttpStatusError,
    ResponseParseError,
    TransportError,
)

__all__ = [
    "ApiError",
    "BudgetApiClient",
    "FetchStyle",
    "HttpStatusError",
    "ResponseParseError",
    "TransportError",
]
