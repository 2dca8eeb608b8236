"""ASGI middleware turning unhandled exceptions into the standard error envelope."""

from __future__ import annotations

import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from mockforge.core.errors import InternalError

logger = logging.getLogger(__name__)


class InternalErrorMiddleware(BaseHTTPMiddleware):
    """Answers any exception that escaped the route handlers with a generic 500."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        try:
            return await call_next(request)
        except Exception:
            logger.exception("Unhandled error on %s %s", request.method, request.url.path)
            error = InternalError()
            return JSONResponse(error.to_body(), status_code=error.status)
