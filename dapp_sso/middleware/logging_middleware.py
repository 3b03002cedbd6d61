"""
HTTP request logging middleware.

One ``sso_request`` line per request. The request id is bound into
structlog's context for logs emitted while the request is handled. Once a
bearer token has been accepted the line also carries the caller's wallet and
session id.
"""

import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = structlog.stdlib.get_logger("dapp_sso.http")

REQUEST_ID_HEADER = "x-request-id"


def _caller_fields(request: Request) -> dict:
    """Wallet and session set by ``require_wallet``, when the route used it."""
    fields = {}
    wallet = getattr(request.state, "wallet", None)
    if wallet is not None:
        fields["wallet"] = wallet
        fields["session_id"] = getattr(request.state, "session_id", None)
    return fields


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log each API call with caller identity, status and timing."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:12]

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        started = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            if status_code >= 500:
                log = logger.error
            elif status_code >= 400:
                log = logger.warning
            else:
                log = logger.info

            log(
                "sso_request",
                method=request.method,
                path=request.url.path,
                status=status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 1),
                **_caller_fields(request),
            )
