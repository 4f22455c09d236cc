"""Rule inspection commands for the Prompt Context CLI."""

import asyncio

import click
from rich.markdown import Markdown
from rich.panel import Panel

from prompt_context.cli.utils import (
    build_matcher,
    console,
    echo_error,
    echo_success,
    echo_warning,
    print_table,
)
from prompt_context.core.errors import PromptContextError
from prompt_context.mcp_server.tools import format_patterns


@click.command(name="match")
@click.argument("query")
@click.option(
    "--show-content", is_flag=True, help="Print the matched prompt document"
)
@click.pass_context
def match(ctx, query, show_content):
    """Resolve QUERY against the rules.

    Examples:
        prompt-context match "How do I model RBAC in OpenFGA?"
        prompt-context match "relationship tuples" --show-content
    """
    matcher = build_matcher(ctx)

    try:
        result = asyncio.run(matcher.get_context_for_query(query))
    except PromptContextError as e:
        echo_error(e.message)
        ctx.exit(1)

    if not result.match_found:
        echo_warning(f'No specific context found for query: "{query}"')
        for rule in matcher.get_all_rules():
            console.print(f"  - {rule.description} (patterns: {format_patterns(rule)})")
        return

    echo_success(f"Matched: {result.rule.description}")
    console.print(f"File: {result.rule.document_ref}")
    if show_content:
        console.print(Panel(Markdown(result.content), title=result.rule.document_ref))


@click.command(name="list")
@click.pass_context
def list_rules(ctx):
    """List the rules in match precedence order."""
    matcher = build_matcher(ctx)
    rows = [
        {
            "order": position,
            "description": rule.description,
            "document": rule.document_ref,
            "patterns": len(rule.patterns),
        }
        for position, rule in enumerate(matcher.get_all_rules(), start=1)
    ]
    print_table(rows, title="Rules")
