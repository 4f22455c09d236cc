"""MCP tools exposing the prompt matcher."""

import logging
from typing import Any

import mcp.types as types

from prompt_context.core.errors import InvalidInputError
from prompt_context.core.matcher import PromptMatcher
from prompt_context.models.domain.rules import Rule

logger = logging.getLogger(__name__)

TOOL_DEFINITIONS = [
    types.Tool(
        name="get_context_for_query",
        description="Get relevant context prompt based on a query",
        inputSchema={
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": "The query to find context for",
                }
            },
            "required": ["query"],
        },
    ),
    types.Tool(
        name="list_available_contexts",
        description="List all available context prompts and their descriptions",
        inputSchema={"type": "object", "properties": {}},
    ),
]


def format_patterns(rule: Rule) -> str:
    return ", ".join(rule.patterns)


class PromptContextTools:
    """Collection of MCP tools backed by a ``PromptMatcher``."""

    def __init__(self, matcher: PromptMatcher):
        self.matcher = matcher

    async def call(
        self, name: str, arguments: dict[str, Any] | None
    ) -> list[types.TextContent]:
        """Route a tool call by name.

        Raises:
            InvalidInputError: For unknown tools or bad arguments
            DocumentNotFoundError: If a matched prompt file is missing
        """
        arguments = arguments or {}
        if name == "get_context_for_query":
            text = await self.get_context_for_query(arguments.get("query"))
        elif name == "list_available_contexts":
            text = await self.list_available_contexts()
        else:
            raise InvalidInputError(f"Unknown tool: {name}", tool=name)

        return [types.TextContent(type="text", text=text)]

    async def get_context_for_query(self, query: str | None) -> str:
        """Return the prompt matching a query, or the list of context types.

        Args:
            query: Free-text question

        Returns:
            Text payload naming the matched prompt followed by its content, or
            listing every rule when nothing matched
        """
        if not isinstance(query, str) or not query:
            raise InvalidInputError("Query must be a non-empty string")

        logger.debug(f'Processing query: "{query}"')
        result = await self.matcher.get_context_for_query(query)

        if not result.match_found:
            logger.info(f'No context match found for query: "{query}"')
            available = "\n".join(
                f"- {rule.description} (patterns: {format_patterns(rule)})"
                for rule in self.matcher.get_all_rules()
            )
            return (
                f'No specific context found for query: "{query}"\n\n'
                f"Available context types:\n{available}"
            )

        logger.info(
            f'Context match found for query: "{query}" '
            f"-> {result.rule.document_ref}"
        )
        return (
            f'Context found for query: "{query}"\n\n'
            f"Using prompt: {result.rule.description}\n\n"
            f"---\n\n{result.content}"
        )

    async def list_available_contexts(self) -> str:
        """List every rule with its prompt file and patterns."""
        rules = self.matcher.get_all_rules()
        logger.debug(f"Listing {len(rules)} available contexts")

        context_list = "\n".join(
            f"**{rule.description}**\n"
            f"File: {rule.document_ref}\n"
            f"Patterns: {format_patterns(rule)}\n"
            for rule in rules
        )
        return f"Available Context Prompts:\n\n{context_list}"


__all__ = ["PromptContextTools", "TOOL_DEFINITIONS", "format_patterns"]
