"""Public MCP endpoint: auth, rate limiting, and JSON-RPC over HTTP.

Request pipeline for ``POST /``: configuration check → AuthHandler →
RateLimiter → JSON decode → ProtocolDispatcher. Each stage answers with a
JSON-RPC error envelope when it rejects a request.
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import sys
from collections.abc import AsyncIterator

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from dayone_mcp import __version__
from dayone_mcp.auth import AuthHandler
from dayone_mcp.bridge_client import BridgeClient
from dayone_mcp.config import GatewaySettings, configure_logging
from dayone_mcp.dispatcher import BridgeCaller, ProtocolDispatcher
from dayone_mcp.errors import BridgeCallError, ErrorKind, to_jsonrpc_error
from dayone_mcp.rate_limit import RateLimiter

logger = logging.getLogger("dayone_mcp.gateway")

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}

_HTTP_STATUS = {
    ErrorKind.PARSE_ERROR: 400,
    ErrorKind.INVALID_REQUEST: 400,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.RATE_LIMITED: 429,
}


def client_identifier(request: Request) -> str:
    forwarded = request.headers.get("CF-Connecting-IP")
    if forwarded:
        return forwarded.strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def _error_response(
    kind: ErrorKind,
    message: str,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=_HTTP_STATUS.get(kind, 500),
        content=to_jsonrpc_error(None, kind, message),
        headers=headers,
    )


async def _sweep(limiter: RateLimiter, interval_seconds: float) -> None:
    while True:
        await asyncio.sleep(interval_seconds)
        limiter.cleanup()
        logger.debug("Rate limiter sweep: %d identifiers tracked", len(limiter.tracked()))


def create_app(
    settings: GatewaySettings,
    bridge: BridgeCaller | None = None,
    rate_limiter: RateLimiter | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Build the gateway app.

    ``bridge`` and ``rate_limiter`` default to ones built from ``settings``.
    ``transport`` is handed to the httpx client that reaches the bridge.
    """
    limiter = rate_limiter or RateLimiter(settings.rate_limit_max, settings.rate_limit_window_ms)
    bridge_client = BridgeClient(
        settings.bridge_url,
        settings.bridge_auth_token,
        timeout=settings.bridge_timeout,
        transport=transport,
    )
    dispatcher = ProtocolDispatcher(
        bridge or bridge_client,
        max_response_bytes=settings.max_response_bytes,
    )
    auth = AuthHandler(settings.api_keys)

    @contextlib.asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        sweeper = asyncio.create_task(_sweep(limiter, limiter.window_ms / 1000))
        try:
            yield
        finally:
            sweeper.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await sweeper

    app = FastAPI(
        title="Day One MCP Gateway",
        description="Remote MCP endpoint for a Day One journal",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.rate_limiter = limiter
    app.state.dispatcher = dispatcher

    @app.options("/")
    async def preflight(request: Request) -> Response:
        headers = dict(CORS_HEADERS)
        headers["Access-Control-Allow-Origin"] = request.headers.get("Origin") or "*"
        headers["Access-Control-Max-Age"] = "86400"
        return Response(status_code=204, headers=headers)

    @app.api_route("/", methods=["GET", "PUT", "PATCH", "DELETE"])
    async def method_not_allowed() -> PlainTextResponse:
        return PlainTextResponse(
            "Method not allowed", status_code=405, headers={"Allow": "POST, OPTIONS"}
        )

    @app.post("/")
    async def mcp_endpoint(request: Request) -> JSONResponse:
        if not settings.is_complete:
            logger.error("Missing required environment variables")
            return _error_response(ErrorKind.INTERNAL_ERROR, "Server configuration error")

        auth_result = auth.verify_request(request.headers)
        if not auth_result.authorized:
            return _error_response(
                ErrorKind.UNAUTHORIZED,
                auth_result.error or "Unauthorized",
                headers={"WWW-Authenticate": 'Bearer realm="MCP Server"'},
            )

        rate_limiter: RateLimiter = request.app.state.rate_limiter
        limit = rate_limiter.check_limit(client_identifier(request))
        if limit.limited:
            return _error_response(
                ErrorKind.RATE_LIMITED,
                "Rate limit exceeded",
                headers={"Retry-After": str(rate_limiter.retry_after_seconds)},
            )

        try:
            message = json.loads(await request.body())
        except ValueError:
            return _error_response(ErrorKind.PARSE_ERROR, "Parse error")

        result = await request.app.state.dispatcher.handle_request(message)
        error = result.get("error")
        if error and error.get("code") == ErrorKind.INVALID_REQUEST.code:
            return JSONResponse(status_code=400, content=result)

        headers = dict(CORS_HEADERS)
        headers["X-Rate-Limit-Remaining"] = str(limit.remaining)
        return JSONResponse(content=result, headers=headers)

    @app.get("/health")
    async def health() -> JSONResponse:
        try:
            bridge_health = await bridge_client.health()
        except BridgeCallError as exc:
            logger.warning("Bridge health check failed: %s", exc.message)
            return JSONResponse(
                status_code=503,
                content={"status": "error", "worker": "healthy", "bridge": "unreachable"},
            )
        return JSONResponse(
            content={"status": "ok", "worker": "healthy", "bridge": bridge_health}
        )

    return app


def main() -> None:
    """Start the gateway on ``GATEWAY_HOST:GATEWAY_PORT``."""
    configure_logging()
    settings = GatewaySettings.from_env()
    if not settings.is_complete:
        message = "MCP_API_KEYS, BRIDGE_URL and BRIDGE_AUTH_TOKEN must all be set."
        logger.error(message)
        print(message, file=sys.stderr)
        sys.exit(1)
    logger.info(
        "Gateway configured with %d API key(s), bridge %s, rate limit %d per %dms",
        len(settings.api_keys),
        settings.bridge_url,
        settings.rate_limit_max,
        settings.rate_limit_window_ms,
    )

    import uvicorn

    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level="warning",
    )


if __name__ == "__main__":
    main()
