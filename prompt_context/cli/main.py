"""Main CLI entry point for Prompt Context."""

from pathlib import Path

import click
from pydantic import ValidationError

from prompt_context import __version__
from prompt_context.cli.commands.context import list_rules, match
from prompt_context.cli.commands.server import serve
from prompt_context.cli.utils import console, echo_error
from prompt_context.mcp_server.config import load_settings


@click.group(invoke_without_command=True)
@click.option("-v", "--version", is_flag=True, help="Show version information")
@click.option(
    "--prompts-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory holding prompt documents",
)
@click.option(
    "--rules-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="YAML file defining the rules",
)
@click.option(
    "--strategy",
    type=click.Choice(["linear", "automaton"]),
    default=None,
    help="Pattern matching strategy",
)
@click.pass_context
def cli(ctx, version, prompts_dir, rules_file, strategy):
    """Prompt Context - OpenFGA modeling context provider for MCP clients.

    Matches questions against keyword rules and serves the prompt document
    of the first matching rule.

    Examples:
        prompt-context -v                          # Show version
        prompt-context serve                       # Run the MCP server on stdio
        prompt-context match "what is rebac?"      # Try a query
        prompt-context list                        # Show the rules
    """
    if version:
        console.print(f"Prompt Context v{__version__}")
        ctx.exit()

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit()

    ctx.ensure_object(dict)
    try:
        ctx.obj["settings"] = load_settings(
            prompts_dir=prompts_dir,
            rules_file=rules_file,
            match_strategy=strategy,
        )
    except ValidationError as e:
        echo_error(f"Invalid configuration: {e}")
        ctx.exit(2)


cli.add_command(serve)
cli.add_command(match)
cli.add_command(list_rules)


if __name__ == "__main__":
    cli()
