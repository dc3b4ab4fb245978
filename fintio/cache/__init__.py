"""
Response Cache Package

Structured cache keys plus the process-wide store every read goes
through and every write invalidates.
"""

from fintio.cache.keys import (
    CacheKey,
    KeyPredicate,
    Resource,
    match_any,
    match_item,
    match_resource,
)
from fintio.cache.store import (
    DEFAULT_POLICY,
    CacheEntry,
    CachePolicy,
    Fetcher,
    ResponseCache,
)

__all__ = [
    # Keys
    "CacheKey",
    "KeyPredicate",
    "Resource",
    "match_any",
    "match_item",
    "match_resource",
    # Store
    "DEFAULT_POLICY",
    "CacheEntry",
    "CachePolicy",
    "Fetcher",
    "ResponseCache",
]
