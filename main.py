"""FastAPI application that serves the current time behind a per-client rate limit."""
from __future__ import annotations

import logging
import uuid
from pathlib import Path

from fastapi import Depends, FastAPI, Request, status
from fastapi.responses import HTMLResponse, Response
from fastapi.templating import Jinja2Templates

from timeserver.config import Settings, get_settings
from timeserver.logging_config import configure_logging
from timeserver.rate_limit import RateLimiter
from timeserver.utils import derive_client_identity, sortable_timestamp

settings = get_settings()
configure_logging(settings.log_level)
LOGGER = logging.getLogger(__name__)


class RateLimitExceeded(Exception):
    """Raised when a client has used up its requests for the current window."""

    def __init__(self, wait_seconds: int, client_ip: str) -> None:
        super().__init__(f"Rate limit exceeded. Try again in {wait_seconds} seconds.")
        self.wait_seconds = wait_seconds
        self.client_ip = client_ip


class ClientIdentityUnavailable(Exception):
    """Raised when no rate-limiting identity can be derived from the client address."""

    def __init__(self, client_ip: str) -> None:
        super().__init__(f"Cannot limit rate for {client_ip}")
        self.client_ip = client_ip


def build_rate_limiter(app_settings: Settings) -> RateLimiter:
    """Create the limiter and register any configured tracked clients."""

    limiter = RateLimiter(app_settings.rate_config)
    for address in app_settings.tracked_clients:
        client_id = derive_client_identity(address)
        if client_id == 0:
            LOGGER.warning(
                "ignoring tracked client without IPv4 address", extra={"client_ip": address}
            )
            continue
        limiter.register_tracked_client(client_id)
    return limiter


rate_limiter = build_rate_limiter(settings)

app = FastAPI(title="Rate-limited Time Server")
templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))


@app.middleware("http")
async def tag_requests(request: Request, call_next):  # type: ignore[override]
    client_ip = request.client.host if request.client else "unknown"
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    request.state.request_id = request_id
    try:
        response = await call_next(request)
    except Exception as exc:  # noqa: BLE001
        LOGGER.exception(
            "Unhandled exception", extra={"client_ip": client_ip, "request_id": request_id}
        )
        raise exc
    response.headers["X-Request-ID"] = request_id
    return response


def get_rate_limiter() -> RateLimiter:
    """Provide the process-wide rate limiter."""

    return rate_limiter


def enforce_rate_limit(
    request: Request, limiter: RateLimiter = Depends(get_rate_limiter)
) -> None:
    """Reject the request when its client cannot be identified or is over the limit."""

    client_ip = request.client.host if request.client else "unknown"
    client_id = derive_client_identity(client_ip)
    if client_id == 0:
        raise ClientIdentityUnavailable(client_ip)

    wait_seconds = limiter.record_and_check(client_id)
    if wait_seconds > 0:
        raise RateLimitExceeded(wait_seconds, client_ip)


@app.exception_handler(ClientIdentityUnavailable)
async def client_identity_unavailable(
    request: Request, exc: ClientIdentityUnavailable
) -> Response:
    LOGGER.info(str(exc), extra={"client_ip": exc.client_ip})
    return Response(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, media_type="text/html")


@app.exception_handler(RateLimitExceeded)
async def rate_limit_exceeded(request: Request, exc: RateLimitExceeded) -> HTMLResponse:
    LOGGER.info(
        "Request ignored",
        extra={"client_ip": exc.client_ip, "wait_seconds": exc.wait_seconds},
    )
    return templates.TemplateResponse(
        request,
        "rate_limited.html",
        {"reason": str(exc)},
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        headers={"Retry-After": str(exc.wait_seconds)},
    )


@app.get("/", response_class=HTMLResponse, dependencies=[Depends(enforce_rate_limit)])
def index(request: Request) -> HTMLResponse:
    """Serve the current date and time."""

    client_ip = request.client.host if request.client else "unknown"
    LOGGER.info("Request served", extra={"client_ip": client_ip})
    return templates.TemplateResponse(
        request,
        "time.html",
        {"now": sortable_timestamp(None, settings.timezone)},
    )


if __name__ == "__main__":
    import uvicorn

    rate = settings.rate_config
    LOGGER.info(
        "Time server starting. Port=%s RequestsPerPeriodLimit=%s/%s",
        settings.port,
        rate.requests_per_window,
        rate.window_length_seconds,
    )
    uvicorn.run(app, host=settings.host, port=settings.port)
