"""Error taxonomy shared by the bridge and the protocol gateway.

Every failure is raised as a ``DayOneMCPError`` subclass. Each subclass maps to
exactly one ``ErrorKind``; ``to_jsonrpc_error`` is the only place that turns a
kind into a JSON-RPC error envelope.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from mcp import types
from mcp.types import ErrorData

UNAUTHORIZED = -32001
RATE_LIMITED = -32002

RequestId = str | int | float | None


class ErrorKind(Enum):
    PARSE_ERROR = types.PARSE_ERROR
    INVALID_REQUEST = types.INVALID_REQUEST
    METHOD_NOT_FOUND = types.METHOD_NOT_FOUND
    INVALID_PARAMS = types.INVALID_PARAMS
    INTERNAL_ERROR = types.INTERNAL_ERROR
    UNAUTHORIZED = UNAUTHORIZED
    RATE_LIMITED = RATE_LIMITED

    @property
    def code(self) -> int:
        return int(self.value)


class DayOneMCPError(Exception):
    """Base exception. Only ``message`` ever reaches a caller."""

    kind = ErrorKind.INTERNAL_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(DayOneMCPError):
    """A required field is missing or has the wrong type."""

    kind = ErrorKind.INVALID_PARAMS


class AuthError(DayOneMCPError):
    kind = ErrorKind.UNAUTHORIZED


class RateLimitError(DayOneMCPError):
    kind = ErrorKind.RATE_LIMITED


class ExecutionError(DayOneMCPError):
    """The Day One CLI exited non-zero, timed out, or could not be started."""

    kind = ErrorKind.INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        *,
        stderr: str | None = None,
        returncode: int | None = None,
    ) -> None:
        super().__init__(message)
        self.stderr = stderr
        self.returncode = returncode


UpstreamExecutionError = ExecutionError


class ParseError(ExecutionError):
    """CLI output could not be decoded."""


class UnknownMethodError(DayOneMCPError):
    kind = ErrorKind.METHOD_NOT_FOUND


class UnknownToolError(DayOneMCPError):
    kind = ErrorKind.INVALID_PARAMS


class MalformedEnvelopeError(DayOneMCPError):
    kind = ErrorKind.INVALID_REQUEST


class BridgeCallError(DayOneMCPError):
    """The bridge answered with a failure or could not be reached."""

    kind = ErrorKind.INTERNAL_ERROR


def to_jsonrpc_error(
    request_id: RequestId,
    error: DayOneMCPError | ErrorKind,
    message: str | None = None,
    data: Any = None,
) -> dict[str, Any]:
    """Build a JSON-RPC 2.0 error response."""
    if isinstance(error, DayOneMCPError):
        kind = error.kind
        message = message or error.message
    else:
        kind = error
    body = ErrorData(code=kind.code, message=message or "Internal error", data=data)
    return {
        "jsonrpc": "2.0",
        "id": request_id,
        "error": body.model_dump(by_alias=True, exclude_none=True),
    }
