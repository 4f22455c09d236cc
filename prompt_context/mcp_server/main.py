"""Main MCP server for the prompt context provider."""

import asyncio
import logging
import os
import platform
from typing import Any

import mcp.server.stdio
import mcp.types as types
from mcp.server import NotificationOptions, Server
from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.server.models import InitializationOptions
from pydantic import AnyUrl

from prompt_context.core.logging import RequestLogger, setup_logging
from prompt_context.core.matcher import PromptMatcher
from prompt_context.mcp_server.config import SERVER_INSTRUCTIONS, load_settings
from prompt_context.mcp_server.resources import MARKDOWN_MIME_TYPE, PromptResources
from prompt_context.mcp_server.tools import TOOL_DEFINITIONS, PromptContextTools
from prompt_context.models.config.server import ServerSettings

logger = logging.getLogger(__name__)


def create_server(
    matcher: PromptMatcher,
    request_logger: RequestLogger | None = None,
    name: str = "openfga-modeling-mcp-server",
) -> Server:
    """Build an MCP server whose handlers are bound to ``matcher``."""
    server = Server(name)
    tools = PromptContextTools(matcher)
    resources = PromptResources(matcher)
    requests = request_logger or RequestLogger()

    @server.list_tools()
    async def handle_list_tools() -> list[types.Tool]:
        """List available MCP tools."""
        request_id = requests.log_request("tools/list")
        requests.log_response(request_id, [tool.name for tool in TOOL_DEFINITIONS])
        return list(TOOL_DEFINITIONS)

    @server.call_tool()
    async def handle_call_tool(
        name: str, arguments: dict[str, Any] | None
    ) -> list[types.TextContent]:
        """Handle MCP tool calls.

        Errors are re-raised for the MCP server to return as an ``isError``
        tool result; the session stays up.
        """
        request_id = requests.log_request(
            "tools/call", {"name": name, "arguments": arguments}
        )
        requests.log_tool_call(name, arguments, request_id)
        try:
            result = await tools.call(name, arguments)
        except Exception as e:
            logger.error(f"Tool execution failed: {e}", exc_info=True)
            requests.log_response(request_id, error=str(e))
            raise
        requests.log_response(request_id, result)
        return result

    @server.list_resources()
    async def handle_list_resources() -> list[types.Resource]:
        """List prompt documents as resources."""
        request_id = requests.log_request("resources/list")
        result = resources.list_resources()
        requests.log_response(request_id, [str(r.uri) for r in result])
        return result

    @server.read_resource()
    async def handle_read_resource(uri: AnyUrl) -> list[ReadResourceContents]:
        """Read a prompt document."""
        uri = str(uri)
        request_id = requests.log_request("resources/read", {"uri": uri})
        requests.log_resource_access(uri, request_id)
        try:
            content = await resources.read_resource(uri)
        except Exception as e:
            requests.log_response(request_id, error=str(e))
            raise
        requests.log_response(request_id, content)
        return [ReadResourceContents(content=content, mime_type=MARKDOWN_MIME_TYPE)]

    return server


def initialization_options(
    server: Server, settings: ServerSettings
) -> InitializationOptions:
    return InitializationOptions(
        server_name=settings.server_name,
        server_version=settings.server_version,
        capabilities=server.get_capabilities(
            notification_options=NotificationOptions(),
            experimental_capabilities={},
        ),
        instructions=SERVER_INSTRUCTIONS,
    )


async def run_stdio(server: Server, options: InitializationOptions) -> None:
    """Serve MCP over stdin/stdout."""
    async with mcp.server.stdio.stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, options)


async def run_sse(
    server: Server,
    options: InitializationOptions,
    matcher: PromptMatcher,
    settings: ServerSettings,
) -> None:
    """Serve MCP over SSE with uvicorn."""
    import uvicorn

    from prompt_context.mcp_server.http import create_http_app

    app = create_http_app(server, options, matcher, settings)
    config = uvicorn.Config(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
    await uvicorn.Server(config).serve()


async def main(settings: ServerSettings | None = None, transport: str | None = None):
    """Main entry point for the MCP server."""
    settings = settings or load_settings()
    setup_logging(settings.log_level, settings.log_file)
    transport = transport or settings.transport

    requests = RequestLogger()
    requests.log_server_event(
        "Server Initializing",
        log_level=settings.log_level,
        python_version=platform.python_version(),
        platform=platform.system().lower(),
    )

    matcher = PromptMatcher.from_settings(settings)
    server = create_server(matcher, requests, name=settings.server_name)
    options = initialization_options(server, settings)

    requests.log_server_event(
        "Server Initialized Successfully",
        rules=len(matcher.get_all_rules()),
        prompts_dir=str(matcher.prompts_dir),
        strategy=matcher.strategy.value,
    )
    requests.log_server_event("Connecting to transport", type=transport)

    if transport == "sse":
        logger.info(
            f"OpenFGA Modeling MCP Server listening on "
            f"http://{settings.host}:{settings.port}/sse"
        )
        await run_sse(server, options, matcher, settings)
    elif transport == "stdio":
        requests.log_server_event(
            "Server started successfully",
            transport="stdio",
            pid=os.getpid(),
            capabilities="tools,resources",
        )
        await run_stdio(server, options)
    else:
        raise ValueError(f"Unknown transport: {transport}")

    requests.log_server_event("Server Shutting Down")


def cli_main():
    """Synchronous entry point for script generation."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("MCP server stopped by user")


if __name__ == "__main__":
    cli_main()
