"""HTTP bridge that runs the Day One CLI for the gateway.

Endpoints:
- ``POST /bridge``: bearer-token protected, body ``{action, params}``.
- ``GET /health``: unauthenticated CLI availability probe.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import Any

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from dayone_mcp import __version__
from dayone_mcp.auth import AuthHandler
from dayone_mcp.config import BridgeSettings, configure_logging
from dayone_mcp.dayone import DayOneClient
from dayone_mcp.errors import AuthError, DayOneMCPError, ExecutionError, ValidationError
from dayone_mcp.models import Action, BridgeResponse
from dayone_mcp.runner import CommandRunner
from dayone_mcp.telemetry import generate_request_id

logger = logging.getLogger("dayone_mcp.bridge")


class BridgeRequestBody(BaseModel):
    """Request body for ``POST /bridge``."""

    action: str
    params: dict[str, Any] | None = Field(default=None)


def _failure(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=BridgeResponse(success=False, error=message).to_dict(),
    )


def _status_for(exc: DayOneMCPError) -> int:
    if isinstance(exc, AuthError):
        return 401
    if isinstance(exc, ValidationError):
        return 400
    return 500


def create_app(client: DayOneClient, auth_token: str = "") -> FastAPI:
    """Build the bridge app around ``client``.

    An empty ``auth_token`` disables authentication.
    """
    app = FastAPI(
        title="Day One Bridge",
        description="Runs the Day One CLI on behalf of the MCP gateway",
        version=__version__,
    )
    auth = AuthHandler([auth_token]) if auth_token else None

    def require_token(request: Request) -> None:
        if auth is None:
            return
        result = auth.verify_request(request.headers)
        if not result.authorized:
            raise AuthError(result.error or "Unauthorized")

    @app.exception_handler(DayOneMCPError)
    async def _handle_error(_request: Request, exc: DayOneMCPError) -> JSONResponse:
        return _failure(_status_for(exc), exc.message)

    @app.exception_handler(RequestValidationError)
    async def _handle_bad_body(_request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.warning("Rejected malformed bridge request: %s", exc.errors())
        return _failure(400, "Invalid request body")

    @app.get("/health")
    async def health() -> dict[str, Any]:
        loop = asyncio.get_running_loop()
        available = await loop.run_in_executor(None, client.check_availability)
        return {"status": "ok", "dayoneAvailable": available, "version": __version__}

    @app.post("/bridge", dependencies=[Depends(require_token)])
    async def bridge(body: BridgeRequestBody) -> JSONResponse:
        request_id = generate_request_id()
        action = Action.parse(body.action)
        params = body.params or {}
        logger.info("Bridge action %s", action.value, extra={"request_id": request_id})

        loop = asyncio.get_running_loop()
        try:
            # A disconnecting caller does not cancel the executor job; the CLI
            # runs to completion or to its timeout.
            data = await loop.run_in_executor(None, client.perform, action, params)
        except ValidationError:
            raise
        except ExecutionError as exc:
            logger.error("Bridge action %s failed: %s", action.value, exc.message)
            return _failure(500, exc.message)
        except Exception as exc:
            logger.exception("Unexpected bridge error during %s", action.value)
            return _failure(500, str(exc) or "Internal server error")
        return JSONResponse(content=BridgeResponse(success=True, data=data).to_dict())

    return app


def _warn_if_unauthenticated(settings: BridgeSettings) -> None:
    if settings.auth_token:
        return
    message = "AUTH_TOKEN is not set. The bridge will accept unauthenticated requests."
    if settings.strict:
        logger.error(message)
        print(message, file=sys.stderr)
        sys.exit(1)
    logger.warning(message)
    print(message, file=sys.stderr)


def main() -> None:
    """Start the bridge on ``BRIDGE_HOST:PORT``."""
    configure_logging()
    settings = BridgeSettings.from_env()
    _warn_if_unauthenticated(settings)

    client = DayOneClient(settings.cli_path, runner=CommandRunner(settings.cli_timeout))
    logger.info("Day One CLI path: %s", settings.cli_path)
    if client.check_availability():
        logger.info("Day One CLI is available")
    else:
        message = f"Day One CLI not found at {settings.cli_path}. Install the Day One CLI first."
        logger.error(message)
        print(message, file=sys.stderr)

    import uvicorn

    logger.info("Starting Day One bridge on %s:%s", settings.host, settings.port)
    uvicorn.run(
        create_app(client, settings.auth_token),
        host=settings.host,
        port=settings.port,
        log_level="warning",
    )


if __name__ == "__main__":
    main()
