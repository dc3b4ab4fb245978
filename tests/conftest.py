"""
Shared fixtures.

No test touches the network: every HTTP exchange goes through
httpx.MockTransport backed by FakeBackend.
"""

import asyncio
import json
from typing import Any, Callable, Optional

import httpx
import pytest

from fintio.cache import ResponseCache
from fintio.config import CacheSettings, get_settings
from fintio.resources import BudgetResources
from fintio.services.api import BudgetApiClient, FetchStyle


BASE_URL = "http://fintio.test"


class FakeClock:
    """Monotonic clock the test moves by hand."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


Reply = Callable[[httpx.Request], Any]


class FakeBackend:
    """
    Routes requests by (method, path) and records every request.

    Routes registered more than once for the same (method, path) are
    served in order, the last one repeating. A route is either a canned
    status and body or a callable taking the request.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self._routes: dict[tuple[str, str], list[Reply]] = {}

    def route(
        self,
        method: str,
        path: str,
        status: int = 200,
        json_body: Any = None,
        content: Optional[bytes] = None,
        reply: Optional[Reply] = None,
    ) -> None:
        if reply is None:
            def reply(request, status=status, json_body=json_body, content=content):
                if content is not None:
                    return httpx.Response(status, content=content)
                if json_body is not None:
                    return httpx.Response(status, json=json_body)
                return httpx.Response(status)
        self._routes.setdefault((method, path), []).append(reply)

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        replies = self._routes.get((request.method, request.url.path))
        if not replies:
            return httpx.Response(404, json={"error": "Not found"})
        reply = replies.pop(0) if len(replies) > 1 else replies[0]
        response = reply(request)
        if asyncio.iscoroutine(response):
            response = await response
        return response

    def urls(self, method: str = "GET") -> list[str]:
        """Path plus query of every request with the given method."""
        return [
            r.url.raw_path.decode("ascii")
            for r in self.requests
            if r.method == method
        ]

    def bodies(self, method: str) -> list[Any]:
        return [json.loads(r.content) for r in self.requests if r.method == method]


async def settle(rounds: int = 20) -> None:
    """Let background tasks on the current loop run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture(autouse=True)
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def api(backend: FakeBackend) -> BudgetApiClient:
    return BudgetApiClient(
        base_url=BASE_URL,
        transport=httpx.MockTransport(backend.handler),
        fetch_style=FetchStyle.STRICT,
    )


@pytest.fixture
def cache(clock: FakeClock) -> ResponseCache:
    return ResponseCache(clock=clock)


@pytest.fixture
def resources(api: BudgetApiClient, cache: ResponseCache) -> BudgetResources:
    return BudgetResources(api, cache, CacheSettings())
