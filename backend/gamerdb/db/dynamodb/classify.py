from __future__ import annotations

from typing import Any, Callable, TypeVar

from botocore.exceptions import (
    ClientError,
    ConnectionError as BotoConnectionError,
    ConnectTimeoutError,
    EndpointConnectionError,
    ReadTimeoutError,
)

from .errors import ERROR_TYPES, DdbError, ErrorKind

T = TypeVar("T")


# https://docs.aws.amazon.com/amazondynamodb/latest/developerguide/Programming.Errors.html
_CODE_KINDS: dict[str, ErrorKind] = {
    "ResourceInUseException": ErrorKind.ALREADY_EXISTS,
    "TableAlreadyExistsException": ErrorKind.ALREADY_EXISTS,
    "TableInUseException": ErrorKind.ALREADY_EXISTS,
    "ResourceNotFoundException": ErrorKind.NOT_FOUND,
    "TableNotFoundException": ErrorKind.NOT_FOUND,
    "LimitExceededException": ErrorKind.LIMIT_EXCEEDED,
    "ProvisionedThroughputExceededException": ErrorKind.THROTTLED,
    "ThrottlingException": ErrorKind.THROTTLED,
    "RequestLimitExceeded": ErrorKind.THROTTLED,
    "InternalServerError": ErrorKind.INTERNAL,
    "ServiceUnavailable": ErrorKind.INTERNAL,
    "ConditionalCheckFailedException": ErrorKind.CONDITION_FAILED,
}

_CONNECTIVITY_ERRORS = (
    EndpointConnectionError,
    BotoConnectionError,
    ConnectTimeoutError,
    ReadTimeoutError,
)

# Lower-cased fragments of resolver / socket failures.
_CONNECTIVITY_MARKERS = (
    "no such host",
    "name or service not known",
    "nodename nor servname",
    "temporary failure in name resolution",
    "getaddrinfo failed",
    "could not connect to the endpoint url",
)

_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.ALREADY_EXISTS: "Table already exists",
    ErrorKind.NOT_FOUND: "Resource not found",
    ErrorKind.LIMIT_EXCEEDED: "Limit exceeded",
    ErrorKind.THROTTLED: "Provisioned throughput exceeded",
    ErrorKind.INTERNAL: "Internal server error",
    ErrorKind.CONNECTIVITY_FAILURE: (
        "Could not reach DynamoDB; check network connectivity and the endpoint configuration"
    ),
    ErrorKind.CONDITION_FAILED: "Conditional check failed",
}

# Same kind, different meaning depending on the call that raised it.
_OPERATION_MESSAGES: dict[tuple[str, ErrorKind], str] = {
    ("DeleteTable", ErrorKind.ALREADY_EXISTS): "Table is in use",
}


def error_code(exc: BaseException) -> str | None:
    if not isinstance(exc, ClientError):
        return None
    try:
        return (exc.response or {}).get("Error", {}).get("Code") or None
    except Exception:
        return None


def error_message(exc: BaseException) -> str:
    if isinstance(exc, ClientError):
        try:
            msg = (exc.response or {}).get("Error", {}).get("Message")
            if msg:
                return str(msg)
        except Exception:
            pass
    try:
        return str(exc)
    except Exception:
        return exc.__class__.__name__


def aws_request_id(exc: BaseException) -> str | None:
    if not isinstance(exc, ClientError):
        return None
    try:
        return (exc.response or {}).get("ResponseMetadata", {}).get("RequestId")
    except Exception:
        return None


def classify(exc: BaseException) -> ErrorKind:
    """Map a raw backing-store error onto an ErrorKind. Never raises."""
    if isinstance(exc, DdbError) and exc.kind is not None:
        return exc.kind

    code = error_code(exc)
    if code:
        return _CODE_KINDS.get(code, ErrorKind.UNKNOWN)

    if isinstance(exc, _CONNECTIVITY_ERRORS):
        return ErrorKind.CONNECTIVITY_FAILURE

    msg = error_message(exc).lower()
    if any(marker in msg for marker in _CONNECTIVITY_MARKERS):
        return ErrorKind.CONNECTIVITY_FAILURE

    return ErrorKind.UNKNOWN


def to_ddb_error(
    exc: Exception,
    *,
    operation: str,
    table_name: str | None = None,
    key: dict[str, Any] | None = None,
) -> DdbError:
    if isinstance(exc, DdbError):
        return exc

    kind = classify(exc)
    raw = error_message(exc)
    if kind is ErrorKind.UNKNOWN:
        # Keep whatever the store said; we have nothing better to offer.
        message = raw
    else:
        prefix = _OPERATION_MESSAGES.get((operation, kind), _MESSAGES[kind])
        message = f"{prefix}: {raw}" if raw else prefix

    return ERROR_TYPES[kind](
        message=message,
        operation=operation,
        table_name=table_name,
        key=key,
        code=error_code(exc),
        aws_request_id=aws_request_id(exc),
        cause=exc,
    )


def ddb_call(
    operation: str,
    fn: Callable[[], T],
    *,
    table_name: str | None = None,
    key: dict[str, Any] | None = None,
) -> T:
    """Run a single DynamoDB call, translating failures into DdbError.

    There is no retry here: callers own retry/backoff.
    """
    try:
        return fn()
    except DdbError:
        raise
    except Exception as e:  # noqa: BLE001
        raise to_ddb_error(e, operation=operation, table_name=table_name, key=key) from e
