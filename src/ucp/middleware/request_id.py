"""Request ID middleware: generates or propagates X-Request-Id."""

import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from ucp.middleware.rate_limit import client_ip


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Bind the request id and the player's address to the structlog context."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get("X-Request-Id") or str(uuid.uuid4())
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            path=request.url.path,
            client_ip=client_ip(request),
        )
        response = await call_next(request)
        response.headers["X-Request-Id"] = request_id
        return response
