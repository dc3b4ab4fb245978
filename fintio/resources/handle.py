"""
Resource Handles

A handle is what a page holds for one read: a cache key (or None when
a scoping identifier is missing), the policy for that key, and a way to
turn cached JSON into the data the page renders.

GUARANTEES:
- A handle with no key never touches the network or the cache
- load() and revalidate() never raise fetch errors; they land in
  state.error
- close() is always safe, even with a request in flight
"""

from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

from pydantic import ValidationError

from fintio.cache import CacheKey, CachePolicy, Resource, ResponseCache
from fintio.services.api import BudgetApiClient, FetchStyle, ResponseParseError


T = TypeVar("T")


@dataclass(frozen=True)
class ResourceSpec(Generic[T]):
    """
    How one resource is read.

    parse turns the raw JSON body into a model; select picks the data a
    page renders out of that model; default is used while there is none.
    """
    resource: Resource
    parse: Callable[[Any], Any]
    select: Callable[[Any], T]
    default: Callable[[], Optional[T]]
    policy: CachePolicy
    style: Optional[FetchStyle] = None


@dataclass(frozen=True)
class ResourceState(Generic[T]):
    """Snapshot of a handle: what a page renders right now."""
    key: Optional[CacheKey]
    data: Optional[T]
    error: Optional[BaseException] = None
    is_loading: bool = False
    is_validating: bool = False

    @property
    def is_error(self) -> Optional[BaseException]:
        """The error itself (truthy) or None, like the error field."""
        return self.error


class ResourceHandle(Generic[T]):
    """
    One read of one resource.

    Usage:
        handle = resources.transactions("b1", 3, 2024)
        state = await handle.load()

    Or, to keep the key subscribed (refetched on invalidation):
        async with resources.transactions("b1", 3, 2024) as handle:
            ...
    """

    def __init__(
        self,
        cache: ResponseCache,
        api: BudgetApiClient,
        spec: ResourceSpec[T],
        key: Optional[CacheKey],
    ):
        self._cache = cache
        self._api = api
        self._spec = spec
        self._key = key
        self._subscribed = False

    @property
    def key(self) -> Optional[CacheKey]:
        return self._key

    @property
    def url(self) -> Optional[str]:
        return self._key.url if self._key is not None else None

    @property
    def policy(self) -> CachePolicy:
        return self._spec.policy

    @property
    def state(self) -> ResourceState[T]:
        """Current state, without triggering a request."""
        if self._key is None:
            return ResourceState(key=None, data=self._spec.default())

        entry = self._cache.peek(self._key)
        if entry is None:
            return ResourceState(
                key=self._key,
                data=self._spec.default(),
                is_loading=True,
            )

        data = (
            self._spec.select(entry.data)
            if entry.data is not None
            else self._spec.default()
        )
        return ResourceState(
            key=self._key,
            data=data,
            error=entry.error,
            is_loading=entry.data is None and entry.error is None,
            is_validating=entry.is_validating,
        )

    async def load(self) -> ResourceState[T]:
        """Fetch-or-serve the key, honouring the dedupe window."""
        if self._key is None:
            return self.state
        await self._cache.get(self._key, self._fetch, self._spec.policy)
        return self.state

    async def revalidate(self) -> ResourceState[T]:
        """Explicitly refetch, ignoring the dedupe window."""
        if self._key is None:
            return self.state
        await self._cache.get(self._key, self._fetch, self._spec.policy, force=True)
        return self.state

    def open(self) -> None:
        """Subscribe the key so invalidation refetches it."""
        if self._key is not None and not self._subscribed:
            self._cache.subscribe(self._key)
            self._subscribed = True

    def close(self) -> None:
        """Unsubscribe. Safe with a request in flight."""
        if self._key is not None and self._subscribed:
            self._cache.unsubscribe(self._key)
            self._subscribed = False

    async def __aenter__(self) -> "ResourceHandle[T]":
        self.open()
        await self.load()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()

    async def _fetch(self, key: CacheKey) -> Any:
        body = await self._api.fetch(key, self._spec.style)
        try:
            return self._spec.parse(body)
        except ValidationError as e:
            raise ResponseParseError(
                f"Unexpected response shape from {key.url}: {e}"
            ) from e
