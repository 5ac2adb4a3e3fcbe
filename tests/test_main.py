from __future__ import annotations

from fastapi.testclient import TestClient
import pytest

from main import app, build_rate_limiter, get_rate_limiter
from timeserver.config import Settings
from timeserver.rate_limit import RateConfig, RateLimiter


@pytest.fixture()
def api_limiter(clock):
    fake = RateLimiter(RateConfig(requests_per_window=2, window_length_seconds=10), clock)
    app.dependency_overrides[get_rate_limiter] = lambda: fake
    try:
        yield fake
    finally:
        app.dependency_overrides.pop(get_rate_limiter, None)


@pytest.fixture()
def api_client(api_limiter, client_for):
    return client_for("127.0.0.1")


def test_index_serves_time_page(api_client):
    response = api_client.get("/")

    assert response.status_code == 200
    assert "text/html" in response.headers["content-type"]
    assert "font-size: 48px" in response.text
    assert response.headers["X-Request-ID"]


def test_request_over_limit_gets_429_with_retry_after(api_client, clock):
    api_client.get("/")
    clock.advance(3)
    api_client.get("/")

    response = api_client.get("/")

    assert response.status_code == 429
    assert response.headers["Retry-After"] == "7"
    assert "Rate limit exceeded. Try again in 7 seconds." in response.text


def test_limit_resets_in_next_window(api_client, clock):
    for _ in range(3):
        api_client.get("/")

    clock.advance(10)

    assert api_client.get("/").status_code == 200


def test_clients_are_limited_separately(api_limiter, client_for):
    first = client_for("10.0.0.1")
    second = client_for("10.0.0.2")

    for _ in range(2):
        assert first.get("/").status_code == 200
    assert first.get("/").status_code == 429
    assert second.get("/").status_code == 200
    assert api_limiter.active_client_count() == 2


def test_unidentifiable_client_gets_503(api_limiter):
    client = TestClient(app)  # default client host is "testclient"

    response = client.get("/")

    assert response.status_code == 503
    assert response.content == b""
    assert api_limiter.active_client_count() == 0


def test_request_id_is_echoed(api_client):
    response = api_client.get("/", headers={"X-Request-ID": "abc123"})

    assert response.headers["X-Request-ID"] == "abc123"


def test_build_rate_limiter_registers_tracked_clients():
    settings = Settings(
        rate_limit_requests=1,
        rate_limit_period_seconds=60,
        tracked_clients=("10.0.0.1", "not-an-address"),
    )

    limiter = build_rate_limiter(settings)

    tracked = 0x0A000001
    untracked = 0x0A000002
    assert limiter.record_and_check(tracked) == 0
    assert limiter.record_and_check(tracked) > 0
    assert limiter.record_and_check(untracked) == 0
    assert limiter.record_and_check(untracked) == 0
