"""Request logging middleware for the HTTP service."""
from __future__ import annotations

import logging
import time
import uuid
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from .monitoring import observe_request

logger = logging.getLogger("vietqr.http")

REQUEST_ID_HEADER = "x-request-id"


def _route_path(request: Request) -> str:
    route = request.scope.get("route")
    return route.path if route else request.url.path


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Tag each request with an id and log its route, status and latency.

    Request bodies are never logged; they carry account details.
    """

    async def dispatch(self, request: Request, call_next: Callable[[Request], Response]) -> Response:  # type: ignore[override]
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id
        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            duration_ms = (time.perf_counter() - start) * 1000
            route_path = _route_path(request)
            logger.exception(
                "request failed",
                extra={
                    "request_id": request_id,
                    "method": request.method,
                    "path": route_path,
                    "duration_ms": round(duration_ms, 2),
                },
            )
            observe_request(request.method, route_path, 500, duration_ms)
            raise

        duration_ms = (time.perf_counter() - start) * 1000
        route_path = _route_path(request)
        if response.status_code >= 500:
            level = logging.ERROR
        elif response.status_code >= 400:
            level = logging.WARNING
        else:
            level = logging.INFO
        logger.log(
            level,
            "request completed",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": route_path,
                "status_code": response.status_code,
                "duration_ms": round(duration_ms, 2),
            },
        )
        observe_request(request.method, route_path, response.status_code, duration_ms)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
