"""MCP resources: prompt documents addressable as ``prompt://<file>``."""

import logging
from urllib.parse import quote, unquote

import mcp.types as types

from prompt_context.core.errors import InvalidInputError, PromptContextError
from prompt_context.core.matcher import PromptMatcher

logger = logging.getLogger(__name__)

URI_SCHEME = "prompt://"
MARKDOWN_MIME_TYPE = "text/markdown"


def document_uri(document_ref: str) -> str:
    """Build the resource URI for a prompt file, percent-encoding its name."""
    return f"{URI_SCHEME}{quote(document_ref)}"


def document_ref_from_uri(uri: str) -> str:
    """Extract the prompt file name from a resource URI.

    Raises:
        InvalidInputError: If the URI does not use the prompt scheme
    """
    if not uri.startswith(URI_SCHEME):
        raise InvalidInputError(f"Unsupported URI scheme: {uri}", uri=uri)
    return unquote(uri[len(URI_SCHEME) :].rstrip("/"))


class PromptResources:
    """Lists and reads the prompt documents behind the matcher's rules."""

    def __init__(self, matcher: PromptMatcher):
        self.matcher = matcher

    def list_resources(self) -> list[types.Resource]:
        return [
            types.Resource(
                uri=document_uri(rule.document_ref),
                name=rule.document_ref,
                description=rule.description,
                mimeType=MARKDOWN_MIME_TYPE,
            )
            for rule in self.matcher.get_all_rules()
        ]

    async def read_resource(self, uri: str) -> str:
        """Return the raw markdown text of a prompt document.

        Raises:
            InvalidInputError: For non ``prompt://`` URIs
            PromptContextError: If the document cannot be loaded
        """
        document_ref = document_ref_from_uri(uri)
        try:
            return await self.matcher.load_document_content(document_ref)
        except PromptContextError as e:
            logger.warning(f"Failed to read resource {uri}: {e.message}")
            raise PromptContextError(
                f"Failed to read resource {uri}: {e.message}",
                e.kind,
                details={**e.details, "uri": uri},
            ) from e


__all__ = [
    "MARKDOWN_MIME_TYPE",
    "PromptResources",
    "URI_SCHEME",
    "document_ref_from_uri",
    "document_uri",
]
