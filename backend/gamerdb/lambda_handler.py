"""
API Gateway (proxy integration) entry point.

    POST /gamers        -> create a gamer profile (201)
    GET  /gamers/{id}   -> fetch a gamer profile (200 / 404)

Anything else is a 400. Store failures are logged here and rendered as a
generic 500; the client never sees internal error detail.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any

import orjson

from .db.dynamodb.errors import DdbError
from .domain.gamer import InvalidGamerInput
from .observability.context import request_id_var
from .observability.logging import configure_logging, get_logger
from .problem_details import PROBLEM_JSON, problem_payload
from .repositories.gamers_repo import GamerRepository, build_gamer_repository
from .settings import get_settings

JSON = "application/json"


def _method(event: dict[str, Any]) -> str:
    # REST API (v1) payloads carry httpMethod; HTTP API (v2) nests it.
    m = event.get("httpMethod")
    if not m:
        m = (((event.get("requestContext") or {}).get("http") or {}).get("method"))
    return str(m or "").strip().upper()


def _response(status_code: int, body: Any, *, content_type: str = JSON, request_id: str | None = None) -> dict[str, Any]:
    headers = {"Content-Type": content_type}
    if request_id:
        headers["X-Request-Id"] = request_id
    return {
        "statusCode": int(status_code),
        "headers": headers,
        "body": orjson.dumps(body).decode("utf-8"),
    }


class RequestRouter:
    """Maps an API Gateway event onto a GamerRepository operation."""

    def __init__(self, *, repository: GamerRepository):
        self._repo = repository
        self._log = get_logger("gamers")

    def dispatch(self, event: dict[str, Any], *, request_id: str | None = None) -> dict[str, Any]:
        method = _method(event)
        if method == "POST":
            return self.create_gamer(event, request_id=request_id)
        if method == "GET":
            return self.get_gamer(event, request_id=request_id)
        return self._problem(400, "Invalid HTTP method", event=event, request_id=request_id)

    def create_gamer(self, event: dict[str, Any], *, request_id: str | None = None) -> dict[str, Any]:
        try:
            record = self._repo.create(event.get("body"))
        except InvalidGamerInput as e:
            return self._problem(400, str(e), event=event, request_id=request_id, errors=e.errors)
        except DdbError as e:
            self._log.error(
                "gamer_store_failed",
                operation=e.operation,
                table=e.table_name,
                kind=e.kind.value if e.kind else None,
                code=e.code,
                error=str(e),
            )
            return self._problem(500, "Failed to create gamer", event=event, request_id=request_id)

        self._log.info("gamer_created", gamer_id=record.id, created_at=record.created_at)
        return _response(201, record.to_api(), request_id=request_id)

    def get_gamer(self, event: dict[str, Any], *, request_id: str | None = None) -> dict[str, Any]:
        gamer_id = str((event.get("pathParameters") or {}).get("id") or "").strip()
        if not gamer_id:
            return self._problem(400, "Missing gamer id", event=event, request_id=request_id)

        try:
            record = self._repo.get(gamer_id)
        except DdbError as e:
            self._log.error(
                "gamer_store_failed",
                operation=e.operation,
                table=e.table_name,
                kind=e.kind.value if e.kind else None,
                code=e.code,
                gamer_id=gamer_id,
                error=str(e),
            )
            return self._problem(500, "Failed to get gamer details", event=event, request_id=request_id)

        if record is None:
            return self._problem(404, "Gamer not found", event=event, request_id=request_id)
        return _response(200, record.to_api(), request_id=request_id)

    def _problem(
        self,
        status_code: int,
        detail: str,
        *,
        event: dict[str, Any],
        request_id: str | None,
        errors: list[dict[str, Any]] | None = None,
    ) -> dict[str, Any]:
        # 5xx detail stays generic ("Failed to ..."), never the store's message.
        body = problem_payload(
            status_code=status_code,
            detail=detail,
            instance=str(event.get("path") or event.get("rawPath") or "") or None,
            request_id=request_id,
            errors=errors,
        )
        return _response(status_code, body, content_type=PROBLEM_JSON, request_id=request_id)


@lru_cache(maxsize=1)
def _router() -> RequestRouter:
    # Built once per execution environment and reused across warm invocations.
    settings = get_settings()
    configure_logging(level=settings.log_level)
    get_logger("startup").info("lambda_starting", settings=settings.to_log_safe_dict())
    return RequestRouter(repository=build_gamer_repository(settings))


def handler(event: dict[str, Any], context: Any = None) -> dict[str, Any]:
    request_id = str(getattr(context, "aws_request_id", "") or "") or None
    token = request_id_var.set(request_id)
    try:
        return _router().dispatch(event or {}, request_id=request_id)
    finally:
        request_id_var.reset(token)
