"""Shared fixtures: a scripted fake upstream, fake clock and recording sleep."""

from unittest.mock import AsyncMock

import httpx
import pytest
from fastapi.testclient import TestClient

from app import create_app
from config import Settings
from services.cache import TTLCache
from services.fetcher import Fetcher
from services.proxy import OpenDataProxy


class FakeUpstream:
    """MockTransport handler that replays queued outcomes, then a default success.

    Queue items are either an exception instance (raised as a transport error)
    or a ``(status_code, json_payload)`` tuple.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.outcomes: list = []
        self.default = (200, {"success": True, "result": ["a", "b"]})

    def queue(self, *outcomes) -> None:
        self.outcomes.extend(outcomes)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        outcome = self.outcomes.pop(0) if self.outcomes else self.default
        if isinstance(outcome, Exception):
            raise outcome
        status, payload = outcome
        return httpx.Response(status, json=payload)

    @property
    def urls(self) -> list[httpx.URL]:
        return [r.url for r in self.requests]


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest.fixture
def sleep():
    return AsyncMock()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return TTLCache(default_ttl=900, clock=clock)


@pytest.fixture
def fetcher(settings, upstream, sleep):
    return Fetcher(settings, transport=httpx.MockTransport(upstream.handler), sleep=sleep)


@pytest.fixture
def proxy(cache, fetcher, settings):
    return OpenDataProxy(cache, fetcher, settings)


@pytest.fixture
def app(settings, cache, fetcher):
    return create_app(settings=settings, cache=cache, fetcher=fetcher)


@pytest.fixture
def client(app):
    return TestClient(app, raise_server_exceptions=False)
