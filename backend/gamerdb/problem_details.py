from __future__ import annotations

from typing import Any

from fastapi import Request
from fastapi.responses import ORJSONResponse

PROBLEM_JSON = "application/problem+json"


def _default_title(status_code: int) -> str:
    if status_code == 400:
        return "Bad Request"
    if status_code == 404:
        return "Not Found"
    if status_code == 405:
        return "Method Not Allowed"
    if status_code == 409:
        return "Conflict"
    if status_code == 422:
        return "Unprocessable Entity"
    if status_code == 503:
        return "Service Unavailable"
    if status_code >= 500:
        return "Internal Server Error"
    return "Error"


def _request_id(request: Request) -> str | None:
    rid = getattr(getattr(request, "state", None), "request_id", None)
    if rid:
        return str(rid)
    hdr = request.headers.get("x-request-id")
    return str(hdr) if hdr else None


def problem_payload(
    *,
    status_code: int,
    title: str | None = None,
    detail: str | None = None,
    type: str = "about:blank",
    instance: str | None = None,
    request_id: str | None = None,
    errors: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "type": type or "about:blank",
        "title": title or _default_title(int(status_code)),
        "status": int(status_code),
    }

    if detail:
        payload["detail"] = str(detail)

    if instance:
        payload["instance"] = instance

    if request_id:
        payload["requestId"] = request_id

    if errors:
        payload["errors"] = errors

    return payload


def safe_detail(status_code: int, detail: str | None) -> str | None:
    # Server errors never carry internal details back to the client.
    if int(status_code) >= 500:
        return None
    return detail


def problem_response(
    *,
    request: Request,
    status_code: int,
    title: str | None = None,
    detail: str | None = None,
    type: str = "about:blank",
    errors: list[dict[str, Any]] | None = None,
) -> ORJSONResponse:
    return ORJSONResponse(
        status_code=int(status_code),
        content=problem_payload(
            status_code=int(status_code),
            title=title,
            detail=safe_detail(status_code, detail),
            type=type,
            instance=str(getattr(request.url, "path", "") or "") or None,
            request_id=_request_id(request),
            errors=errors,
        ),
        media_type=PROBLEM_JSON,
    )
