from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response

from .db.dynamodb.errors import DdbError
from .domain.gamer import InvalidGamerInput
from .middleware import AccessLogMiddleware, RequestContextMiddleware
from .observability.logging import configure_logging, get_logger
from .problem_details import problem_response
from .repositories.gamers_repo import GamerRepository, build_gamer_repository
from .routers.gamers import router as gamers_router
from .routers.health import router as health_router
from .settings import Settings, get_settings


def create_app(
    settings: Settings | None = None,
    repository: GamerRepository | None = None,
) -> FastAPI:
    settings = settings or get_settings()

    # Logging must be configured before the app starts handling requests.
    configure_logging(level=settings.log_level)
    log = get_logger("startup")

    app = FastAPI(
        title="Gamer Profiles API",
        version="1.0.0",
        default_response_class=ORJSONResponse,
        redirect_slashes=False,
    )
    app.state.settings = settings
    app.state.gamers = repository or build_gamer_repository(settings)

    log.info("app_starting", settings=settings.to_log_safe_dict())

    # Middlewares (order matters; last added is outermost)
    app.add_middleware(AccessLogMiddleware, exclude_paths={"/"})
    # Outermost: request context (request-id) wraps everything.
    app.add_middleware(RequestContextMiddleware)

    # Error handlers
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(InvalidGamerInput, _invalid_input_handler)  # type: ignore[arg-type]
    app.add_exception_handler(DdbError, _ddb_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _unhandled_exception_handler)

    # Routes
    app.include_router(health_router)
    app.include_router(gamers_router)

    return app


def _ddb_error_handler(request: Request, exc: DdbError) -> Response:
    # Every storage failure is a 500 to the client; the detail goes to the logs.
    get_logger("gamers").error(
        "gamer_store_failed",
        operation=exc.operation,
        table=exc.table_name,
        kind=exc.kind.value if exc.kind else None,
        code=exc.code,
        aws_request_id=exc.aws_request_id,
        error=str(exc),
        path=str(request.url.path),
    )
    return problem_response(
        request=request,
        status_code=500,
        title="Storage Error",
    )


def _invalid_input_handler(request: Request, exc: InvalidGamerInput) -> Response:
    return problem_response(
        request=request,
        status_code=400,
        detail=str(exc),
        errors=exc.errors or None,
    )


def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> Response:
    status_code = int(getattr(exc, "status_code", 500) or 500)
    detail = getattr(exc, "detail", None)
    safe_detail = str(detail) if detail is not None else None

    if status_code == 404:
        safe_detail = safe_detail or "Route not found"
    elif status_code == 405:
        # Same contract as the Lambda entry point: unsupported methods are a 400.
        status_code = 400
        safe_detail = "Invalid HTTP method"

    return problem_response(
        request=request,
        status_code=status_code,
        detail=safe_detail,
    )


def _validation_error_handler(request: Request, exc: RequestValidationError) -> Response:
    # An undecodable body is a client error like any other malformed payload.
    errors: list[dict[str, object]] = []
    for e in exc.errors():
        loc = e.get("loc") or ()
        errors.append(
            {
                "path": ".".join([str(x) for x in loc if x != "body"]),
                "message": e.get("msg", "Invalid value"),
                "type": e.get("type"),
            }
        )
    return problem_response(
        request=request,
        status_code=400,
        title="Validation Failed",
        detail="Invalid request body",
        errors=errors,
    )


def _unhandled_exception_handler(request: Request, exc: Exception) -> Response:
    # Full traceback goes to the logs; the response stays generic.
    get_logger("unhandled").exception(
        "unhandled_exception",
        http_method=str(getattr(request, "method", "") or "").upper() or None,
        path=str(getattr(getattr(request, "url", None), "path", "") or ""),
        exc_info=exc,
    )
    return problem_response(
        request=request,
        status_code=500,
        title="Internal Server Error",
    )


app = create_app()
