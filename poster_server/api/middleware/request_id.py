from __future__ import annotations

"""
poster_server/api/middleware/request_id.py

Middleware:
- Inyecta/propaga X-Request-ID
- Una línea de log por request (método, path, imdb, status, duración)
- Contador http_requests_total
"""

import time
import uuid
from collections.abc import Awaitable, Callable

from fastapi import Request, Response

from poster_server.api.logging_config import configure_logging
from poster_server.api.services import metrics
from poster_server.api.settings import Settings

CallNext = Callable[[Request], Awaitable[Response]]
Middleware = Callable[[Request, CallNext], Awaitable[Response]]

REQUEST_ID_HEADER = "X-Request-ID"


def _incoming_request_id(request: Request) -> str:
    raw = (request.headers.get("x-request-id") or "").strip()
    # Cap: no reflejamos cabeceras arbitrariamente largas
    return raw[:128] if raw else uuid.uuid4().hex


def build_request_id_middleware(settings: Settings) -> Middleware:
    logger = configure_logging(settings)

    async def middleware(request: Request, call_next: CallNext) -> Response:
        start = time.monotonic()
        req_id = _incoming_request_id(request)
        request.state.request_id = req_id

        metrics.inc("http_requests_total", 1)

        status_code = 500
        try:
            response = await call_next(request)
            status_code = int(getattr(response, "status_code", 500))
            response.headers[REQUEST_ID_HEADER] = req_id
            return response
        finally:
            logger.info(
                "request",
                extra={
                    "request_id": req_id,
                    "method": request.method,
                    "path": request.url.path,
                    "imdb": request.query_params.get("imdb"),
                    "status": status_code,
                    "duration_ms": int((time.monotonic() - start) * 1000),
                },
            )

    return middleware
