"""Structured logging for the gateway: structlog on top of stdlib logging.

Records from structlog and from plain stdlib loggers (uvicorn) share one
handler on the root logger, so both come out in the same format.
"""

from __future__ import annotations

import logging
import sys
import time
import uuid
from functools import partial

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = structlog.get_logger()

SERVICE_NAME = "comms-gateway"

# Re-routed to the root handler; the gateway logs requests itself.
_UVICORN_LOGGERS = ("uvicorn", "uvicorn.error")


def _add_service(
    service: str,
    _logger: logging.Logger,
    _method: str,
    event_dict: structlog.types.EventDict,
) -> structlog.types.EventDict:
    event_dict.setdefault("service", service)
    return event_dict


def _pre_chain(service: str) -> list[structlog.types.Processor]:
    """Processors applied to every record, structlog-native or foreign."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        partial(_add_service, service),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]


def setup_logging(*, json: bool = True, level: str = "INFO", service: str = SERVICE_NAME) -> None:
    """Configure structlog and the root logger for the gateway process.

    *json* selects JSON lines (production) over the console renderer.
    *level* is a log level name in any case.  Every line carries
    ``service``, plus ``request_id``/``method``/``path`` while a request
    is in flight (see :class:`RequestContextMiddleware`).
    """
    pre_chain = _pre_chain(service)
    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer() if json else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            *pre_chain,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level.upper())

    for name in _UVICORN_LOGGERS:
        uv_logger = logging.getLogger(name)
        uv_logger.handlers.clear()
        uv_logger.propagate = True
    logging.getLogger("uvicorn.access").disabled = True


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Bind ``request_id``, ``method`` and ``path`` into structlog contextvars.

    Every log line emitted while the request is in flight carries these
    keys.  An incoming ``X-Request-ID`` header is reused when present and
    echoed back on the response.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
        response.headers["X-Request-ID"] = request_id
        logger.info("request_completed", status_code=response.status_code, duration_ms=elapsed_ms)
        structlog.contextvars.clear_contextvars()
        return response
