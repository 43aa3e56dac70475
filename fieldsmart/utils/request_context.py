"""Request-scoped context (correlation id, tenant) for log records."""

import logging
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

_request_id: ContextVar[str | None] = ContextVar("request_id", default=None)
_tenant_id: ContextVar[str | None] = ContextVar("tenant_id", default=None)


def get_request_id() -> str | None:
    return _request_id.get()


def get_tenant_id() -> str | None:
    return _tenant_id.get()


def bind_tenant(tenant_id: str | None) -> None:
    _tenant_id.set(tenant_id)


class RequestContextFilter(logging.Filter):
    """Add request id and tenant to log records."""

    def filter(self, record):
        record.request_id = _request_id.get() or "-"
        record.tenant = _tenant_id.get() or "no-tenant"
        return True


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Assign a correlation id per request and echo it back in the response."""

    def __init__(self, app, header_name: str = "X-Request-Id"):
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(self.header_name) or uuid.uuid4().hex
        request_token = _request_id.set(request_id)
        tenant_token = _tenant_id.set(None)
        try:
            response = await call_next(request)
        finally:
            _tenant_id.reset(tenant_token)
            _request_id.reset(request_token)
        response.headers[self.header_name] = request_id
        return response
