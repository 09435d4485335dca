"""Correlation context middleware for request tracing.

Propagates correlation IDs and the caller's identities to logging.
"""

from __future__ import annotations

import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from blobworks.observability.logging import LogContext
from blobworks.tenancy.context import NODE_IDENTITY_HEADER, USER_IDENTITY_HEADER


class CorrelationMiddleware(BaseHTTPMiddleware):
    """Middleware for propagating correlation context.

    Extracts or generates correlation IDs and propagates them to:
    - Request state (for use in handlers)
    - Context variables (for logging)
    - Response headers (for client correlation)

    Headers:
    - x-request-id: Unique ID for this request
    - x-correlation-id: ID for tracking across services (passed through)
    - x-user-identity / x-node-identity: caller identities, logged only
    """

    def __init__(self, app: ASGIApp) -> None:
        super().__init__(app)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = (
            request.headers.get("x-request-id")
            or request.headers.get("x-amzn-requestid")  # AWS ALB
            or str(uuid.uuid4())
        )
        correlation_id = request.headers.get("x-correlation-id") or request_id

        request.state.request_id = request_id
        request.state.correlation_id = correlation_id

        with LogContext(
            request_id=request_id,
            correlation_id=correlation_id,
            user_identity=request.headers.get(USER_IDENTITY_HEADER),
            node_identity=request.headers.get(NODE_IDENTITY_HEADER),
        ):
            response = await call_next(request)

        response.headers["x-request-id"] = request_id
        response.headers["x-correlation-id"] = correlation_id
        return response
