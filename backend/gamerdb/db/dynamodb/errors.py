from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar


class ErrorKind(str, Enum):
    """Closed taxonomy every DynamoDB failure is classified into."""

    ALREADY_EXISTS = "already_exists"
    NOT_FOUND = "not_found"
    LIMIT_EXCEEDED = "limit_exceeded"
    THROTTLED = "throttled"
    INTERNAL = "internal"
    CONNECTIVITY_FAILURE = "connectivity_failure"
    CONDITION_FAILED = "condition_failed"
    UNKNOWN = "unknown"


@dataclass(slots=True)
class DdbError(Exception):
    """Base error for DynamoDB operations.

    Subclasses pin `kind` to the classified outcome. Callers decide what an
    outcome means for them (e.g. NOT_FOUND is an absence on a record lookup
    but a failure on table deletion).
    """

    kind: ClassVar[ErrorKind | None] = None

    message: str
    operation: str | None = None
    table_name: str | None = None
    key: dict[str, Any] | None = None
    code: str | None = None
    aws_request_id: str | None = None
    cause: Exception | None = None

    def __str__(self) -> str:
        return self.message


@dataclass(slots=True)
class DdbAlreadyExists(DdbError):
    kind: ClassVar[ErrorKind | None] = ErrorKind.ALREADY_EXISTS


@dataclass(slots=True)
class DdbNotFound(DdbError):
    kind: ClassVar[ErrorKind | None] = ErrorKind.NOT_FOUND


@dataclass(slots=True)
class DdbLimitExceeded(DdbError):
    kind: ClassVar[ErrorKind | None] = ErrorKind.LIMIT_EXCEEDED


@dataclass(slots=True)
class DdbThrottled(DdbError):
    kind: ClassVar[ErrorKind | None] = ErrorKind.THROTTLED


@dataclass(slots=True)
class DdbInternal(DdbError):
    kind: ClassVar[ErrorKind | None] = ErrorKind.INTERNAL


@dataclass(slots=True)
class DdbUnavailable(DdbError):
    kind: ClassVar[ErrorKind | None] = ErrorKind.CONNECTIVITY_FAILURE


@dataclass(slots=True)
class DdbConflict(DdbError):
    kind: ClassVar[ErrorKind | None] = ErrorKind.CONDITION_FAILED


@dataclass(slots=True)
class DdbUnknown(DdbError):
    kind: ClassVar[ErrorKind | None] = ErrorKind.UNKNOWN


# Polling outcomes; these never come out of the classifier.


@dataclass(slots=True)
class TableWaitTimeout(DdbError):
    pass


@dataclass(slots=True)
class TableWaitCancelled(DdbError):
    pass


ERROR_TYPES: dict[ErrorKind, type[DdbError]] = {
    ErrorKind.ALREADY_EXISTS: DdbAlreadyExists,
    ErrorKind.NOT_FOUND: DdbNotFound,
    ErrorKind.LIMIT_EXCEEDED: DdbLimitExceeded,
    ErrorKind.THROTTLED: DdbThrottled,
    ErrorKind.INTERNAL: DdbInternal,
    ErrorKind.CONNECTIVITY_FAILURE: DdbUnavailable,
    ErrorKind.CONDITION_FAILED: DdbConflict,
    ErrorKind.UNKNOWN: DdbUnknown,
}
