"""Middleware registration."""

from fastapi import FastAPI

from ucp.config import Settings
from ucp.middleware.cors import setup_cors
from ucp.middleware.error_handler import setup_error_handlers
from ucp.middleware.logging import setup_logging
from ucp.middleware.rate_limit import RateLimitMiddleware
from ucp.middleware.request_id import RequestIdMiddleware


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """
    Request path, outermost first: CORS, request id, rate limit, routes.

    Starlette wraps in reverse order of ``add_middleware``. CORS sits outside
    the limiter so a 429 still carries the CORS headers the panel needs to
    read it, and the request id is bound before the limiter logs anything.
    """
    setup_logging(settings)
    setup_error_handlers(app)
    app.add_middleware(
        RateLimitMiddleware,
        requests_per_window=settings.rate_limit_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )
    app.add_middleware(RequestIdMiddleware)
    setup_cors(app, settings)
