"""
Logging bootstrap shared by the advisor services.

`setup_logging` installs JSON logging (service name and request id on every record)
and an HTTP middleware that binds the inbound `x-request-id`, or a fresh one, for
the duration of the request and echoes it back on the response.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar, Token
from uuid import uuid4

from fastapi import FastAPI, Request
from pythonjsonlogger import jsonlogger

CORRELATION_ID_HEADER = "x-request-id"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s %(service_name)s %(request_id)s"

RequestContextToken = Token

_logging_configured = False
_request_id: ContextVar[str | None] = ContextVar("request_id", default=None)


def setup_logging(app: FastAPI, service_name: str, level: str = "INFO") -> None:
    """
    Configure JSON logging and request-id propagation for `app`.

    Logging handlers are installed once per process; the middleware is added to
    every app passed in.
    """

    _configure_logging(service_name, level)

    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next):
        request_id = ensure_request_id(request)
        token = bind_request_context(request_id)
        try:
            response = await call_next(request)
        finally:
            reset_request_context(token)
        response.headers.setdefault(CORRELATION_ID_HEADER, request_id)
        return response


def ensure_request_id(request: Request) -> str:
    """Reuse the caller's request id when present, otherwise mint a UUID4."""

    request_id = request.headers.get(CORRELATION_ID_HEADER) or str(uuid4())
    request.state.request_id = request_id
    return request_id


def bind_request_context(request_id: str | None) -> RequestContextToken:
    return _request_id.set(request_id)


def reset_request_context(token: RequestContextToken | None) -> None:
    if token is not None:
        _request_id.reset(token)


def current_request_id() -> str | None:
    return _request_id.get()


def _configure_logging(service_name: str, level: str) -> None:
    global _logging_configured
    if _logging_configured:
        return

    handler = logging.StreamHandler()
    handler.setFormatter(jsonlogger.JsonFormatter(LOG_FORMAT))
    handler.addFilter(_RequestContextLogFilter(service_name))

    logging.basicConfig(level=level, handlers=[handler], force=True)
    _logging_configured = True


class _RequestContextLogFilter(logging.Filter):
    """Stamps the service name and current request id onto each record."""

    def __init__(self, service_name: str) -> None:
        super().__init__()
        self._service_name = service_name

    def filter(self, record: logging.LogRecord) -> bool:
        record.service_name = self._service_name
        record.request_id = _request_id.get()
        return True
