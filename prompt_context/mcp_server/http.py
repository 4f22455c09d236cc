"""HTTP (SSE) transport for production deployments."""

import logging

from fastapi import FastAPI
from mcp.server import Server
from mcp.server.models import InitializationOptions
from mcp.server.sse import SseServerTransport
from starlette.requests import Request
from starlette.responses import Response

from prompt_context.core.matcher import PromptMatcher
from prompt_context.models.api.system import HealthResponse
from prompt_context.models.config.server import ServerSettings

logger = logging.getLogger(__name__)

SSE_PATH = "/sse"
MESSAGES_PATH = "/messages/"


def create_http_app(
    server: Server,
    options: InitializationOptions,
    matcher: PromptMatcher,
    settings: ServerSettings,
) -> FastAPI:
    """Build the FastAPI app serving MCP over SSE plus a health check."""
    sse = SseServerTransport(MESSAGES_PATH)

    app = FastAPI(
        title="Prompt Context MCP Server",
        description="OpenFGA modeling context provider over MCP/SSE",
        version=settings.server_version,
        docs_url=None,
        redoc_url=None,
    )

    async def handle_sse(request: Request) -> Response:
        logger.info(f"SSE session opened from {request.client}")
        async with sse.connect_sse(
            request.scope, request.receive, request._send
        ) as (read_stream, write_stream):
            await server.run(read_stream, write_stream, options)
        logger.info("SSE session closed")
        return Response()

    app.add_route(SSE_PATH, handle_sse, methods=["GET"])
    app.mount(MESSAGES_PATH, app=sse.handle_post_message)

    @app.get("/health", response_model=HealthResponse)
    async def health_check() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(
            version=settings.server_version,
            server_name=settings.server_name,
            rule_count=len(matcher.get_all_rules()),
            transport="sse",
        )

    return app


__all__ = ["MESSAGES_PATH", "SSE_PATH", "create_http_app"]
