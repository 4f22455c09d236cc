"""Server command for the Prompt Context CLI."""

import asyncio

import click
from pydantic import ValidationError

from prompt_context.cli.utils import echo_error
from prompt_context.core.errors import PromptContextError
from prompt_context.mcp_server.main import main as run_server
from prompt_context.models.config.server import ServerSettings


@click.command()
@click.option(
    "--transport",
    type=click.Choice(["stdio", "sse"]),
    default=None,
    help="Transport to serve on (default: from environment)",
)
@click.option("--host", default=None, help="Bind address for the sse transport")
@click.option(
    "--port",
    type=click.IntRange(1, 65535),
    default=None,
    help="Port for the sse transport",
)
@click.pass_context
def serve(ctx, transport, host, port):
    """Run the MCP server.

    Locally the server speaks MCP over stdio. With ENVIRONMENT=production
    it serves SSE over HTTP instead.

    Examples:
        prompt-context serve
        prompt-context serve --transport sse --port 9000
    """
    settings = ctx.obj["settings"]
    if host is not None or port is not None:
        overrides = {"host": host, "port": port}
        updates = {key: value for key, value in overrides.items() if value is not None}
        try:
            settings = ServerSettings.model_validate(
                {**settings.model_dump(), **updates}
            )
        except ValidationError as e:
            echo_error(f"Invalid configuration: {e}")
            ctx.exit(2)

    try:
        asyncio.run(run_server(settings, transport=transport))
    except KeyboardInterrupt:
        pass
    except PromptContextError as e:
        echo_error(e.message)
        ctx.exit(1)
