from __future__ import annotations

import re
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from ..observability.context import request_id_var

_SAFE_REQUEST_ID = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")


def resolve_request_id(inbound: str | None) -> str:
    """Reuse a well-formed inbound id, otherwise mint a UUID4."""
    rid = str(inbound or "").strip()
    if rid and _SAFE_REQUEST_ID.match(rid):
        return rid
    return str(uuid.uuid4())


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Binds a request id for the lifetime of the request: request.state.request_id,
    the logging contextvar, and the X-Request-Id response header.
    """

    header_name = "X-Request-Id"

    async def dispatch(self, request: Request, call_next):
        request_id = resolve_request_id(request.headers.get("x-request-id"))

        request.state.request_id = request_id
        token = request_id_var.set(request_id)
        try:
            response = await call_next(request)
            response.headers[self.header_name] = request_id
            return response
        finally:
            request_id_var.reset(token)
