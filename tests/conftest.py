from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from timeserver.rate_limit import RateConfig, RateLimiter


class ManualClock:
    """Clock that only moves when advanced by hand."""

    def __init__(self) -> None:
        self.now = 0.0

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def __call__(self) -> float:
        return self.now


def pinned_client(asgi_app, host: str, port: int = 50000):
    """Wrap ``asgi_app`` so every HTTP request appears to come from ``host``."""

    async def wrapped(scope, receive, send):
        if scope["type"] == "http":
            scope = dict(scope, client=(host, port))
        await asgi_app(scope, receive, send)

    return wrapped


@pytest.fixture()
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture()
def limiter(clock: ManualClock) -> RateLimiter:
    return RateLimiter(RateConfig(requests_per_window=2, window_length_seconds=10), clock)


@pytest.fixture()
def client_for():
    """Return a factory for test clients whose requests come from a fixed address."""

    from main import app

    def factory(host: str) -> TestClient:
        return TestClient(pinned_client(app, host))

    return factory
