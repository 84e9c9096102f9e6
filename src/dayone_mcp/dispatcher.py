"""JSON-RPC 2.0 dispatch for the MCP tool protocol."""

from __future__ import annotations

import json
import logging
import math
from enum import Enum
from typing import Any, Protocol

from mcp.types import (
    Implementation,
    InitializeResult,
    ServerCapabilities,
    TextContent,
    ToolsCapability,
)

from dayone_mcp import __version__
from dayone_mcp.errors import (
    BridgeCallError,
    DayOneMCPError,
    ErrorKind,
    MalformedEnvelopeError,
    RequestId,
    UnknownMethodError,
    UnknownToolError,
    ValidationError,
    to_jsonrpc_error,
)
from dayone_mcp.models import BridgeRequest
from dayone_mcp.telemetry import generate_request_id, trace_span
from dayone_mcp.tools import build_tools, lookup_tool, missing_required

logger = logging.getLogger("dayone_mcp.dispatcher")

PROTOCOL_VERSION = "2024-11-05"
SERVER_NAME = "dayone-mcp-server"
DEFAULT_MAX_RESPONSE_BYTES = 5_000_000


class ProtocolMethod(str, Enum):
    INITIALIZE = "initialize"
    TOOLS_LIST = "tools/list"
    TOOLS_CALL = "tools/call"


class BridgeCaller(Protocol):
    async def call(self, request: BridgeRequest) -> Any: ...


def _success(request_id: RequestId, result: dict[str, Any]) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id, "result": result}


def _request_id(message: Any) -> RequestId:
    if isinstance(message, dict):
        value = message.get("id")
        if isinstance(value, bool):
            return None
        if isinstance(value, (str, int)):
            return value
        if isinstance(value, float) and math.isfinite(value):
            return value
    return None


class ProtocolDispatcher:
    """Route JSON-RPC requests to protocol handlers.

    Holds no per-call state. Every failure, expected or not, is returned as a
    JSON-RPC error envelope; nothing propagates to the transport.
    """

    def __init__(
        self,
        bridge: BridgeCaller,
        max_response_bytes: int = DEFAULT_MAX_RESPONSE_BYTES,
    ) -> None:
        self.bridge = bridge
        self.max_response_bytes = max_response_bytes
        self._tools = [
            tool.model_dump(mode="json", by_alias=True, exclude_none=True)
            for tool in build_tools()
        ]

    async def handle_request(self, message: Any) -> dict[str, Any]:
        request_id = _request_id(message)
        try:
            method, params = self._validate_envelope(message)
            if method is ProtocolMethod.INITIALIZE:
                return _success(request_id, self._initialize())
            if method is ProtocolMethod.TOOLS_LIST:
                return _success(request_id, {"tools": self._tools})
            if method is ProtocolMethod.TOOLS_CALL:
                return _success(request_id, await self._call_tool(params))
            raise UnknownMethodError(f"Method not found: {method}")
        except DayOneMCPError as exc:
            if exc.kind is ErrorKind.INTERNAL_ERROR:
                logger.error("Request %s failed: %s", request_id, exc.message)
            else:
                logger.warning("Request %s rejected: %s", request_id, exc.message)
            return to_jsonrpc_error(request_id, exc)
        except Exception as exc:
            logger.exception("Unhandled error for request %s", request_id)
            return to_jsonrpc_error(request_id, ErrorKind.INTERNAL_ERROR, str(exc) or None)

    def _validate_envelope(self, message: Any) -> tuple[ProtocolMethod, dict[str, Any]]:
        if not isinstance(message, dict) or message.get("jsonrpc") != "2.0":
            raise MalformedEnvelopeError("Invalid JSON-RPC version")
        method = message.get("method")
        if not isinstance(method, str) or not method:
            raise MalformedEnvelopeError("Missing method")
        params = message.get("params")
        if params is None:
            params = {}
        elif not isinstance(params, dict):
            raise MalformedEnvelopeError("params must be an object")
        try:
            return ProtocolMethod(method), params
        except ValueError:
            raise UnknownMethodError(f"Method not found: {method}") from None

    def _initialize(self) -> dict[str, Any]:
        result = InitializeResult(
            protocolVersion=PROTOCOL_VERSION,
            capabilities=ServerCapabilities(tools=ToolsCapability()),
            serverInfo=Implementation(name=SERVER_NAME, version=__version__),
        )
        return result.model_dump(mode="json", by_alias=True, exclude_none=True)

    async def _call_tool(self, params: dict[str, Any]) -> dict[str, Any]:
        name = params.get("name")
        if not name:
            raise ValidationError("Missing tool name")
        tool = lookup_tool(name) if isinstance(name, str) else None
        if tool is None:
            raise UnknownToolError(f"Unknown tool: {name}")

        arguments = params.get("arguments")
        if arguments is None:
            arguments = {}
        if not isinstance(arguments, dict):
            raise ValidationError("arguments must be an object")
        missing = missing_required(tool, arguments)
        if missing:
            raise ValidationError(f"Missing required parameter: {', '.join(missing)}")

        request_id = generate_request_id()
        logger.info("tools/call %s", tool.name, extra={"request_id": request_id})
        with trace_span(
            f"tools/call/{tool.name}",
            attributes={"dayone.tool": tool.name, "dayone.request_id": request_id},
        ):
            data = await self.bridge.call(BridgeRequest(action=tool.action, params=arguments))

        content = [TextContent(type="text", text=json.dumps(data, indent=2, ensure_ascii=False))]
        self._enforce_response_limit(content, tool.name)
        return {
            "content": [
                item.model_dump(mode="json", by_alias=True, exclude_none=True)
                for item in content
            ]
        }

    def _enforce_response_limit(self, content: list[TextContent], tool_name: str) -> None:
        total_bytes = sum(len(item.text.encode()) for item in content)
        if total_bytes <= self.max_response_bytes:
            return
        logger.warning(
            "Response payload exceeded limit for %s: %d bytes (max %d)",
            tool_name,
            total_bytes,
            self.max_response_bytes,
        )
        raise BridgeCallError("Response payload too large")
