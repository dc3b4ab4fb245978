"""Backend API client package."""

from fintio.services.api.client import (
    ApiError,
    BudgetApiClient,
    FetchStyle,
    HttpStatusError,
    ResponseParseError,
    TransportError,
    error_detail,
)

__all__ = [
    "ApiError",
    "BudgetApiClient",
    "FetchStyle",
    "HttpStatusError",
    "ResponseParseError",
    "TransportError",
    "error_detail",
]
