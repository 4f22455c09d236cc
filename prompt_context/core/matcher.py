"""Query-to-context matching engine.

Maps a free-text query to at most one rule and resolves that rule's prompt
document from the prompts directory.
"""

import asyncio
import logging
import threading
from collections.abc import Iterable
from functools import lru_cache
from pathlib import Path

from prompt_context.core.errors import DocumentNotFoundError, InvalidInputError
from prompt_context.core.pattern_index import PatternIndex
from prompt_context.core.rules import RuleSet
from prompt_context.models.config.server import (
    DEFAULT_PROMPTS_DIR,
    MatchStrategy,
    ServerSettings,
)
from prompt_context.models.domain.rules import ResolvedContext, Rule

logger = logging.getLogger(__name__)


class PromptMatcher:
    """Matches queries against an ordered rule set.

    The first rule in declaration order with a pattern contained in the
    lower-cased query wins. The engine holds no mutable state apart from two
    caches: a bounded lookup cache keyed by lower-cased query, and a document
    content cache keyed by document reference. Document content is treated as
    static for the process lifetime, so neither cache is ever invalidated.
    """

    def __init__(
        self,
        rules: RuleSet | Iterable[Rule] | None = None,
        prompts_dir: Path = DEFAULT_PROMPTS_DIR,
        strategy: MatchStrategy | str = MatchStrategy.LINEAR,
        cache_documents: bool = True,
        lookup_cache_size: int = 256,
        max_cached_query_length: int = 1024,
    ):
        """Initialize the matcher.

        Args:
            rules: Rule set to match against (defaults to the built-in rules)
            prompts_dir: Directory holding prompt documents
            strategy: ``linear`` scan or ``automaton`` (Aho-Corasick) index
            cache_documents: Keep loaded documents in memory
            lookup_cache_size: Entries kept in the query lookup cache, 0 disables
            max_cached_query_length: Longer queries are scanned without caching
        """
        if rules is None:
            rules = RuleSet.default()
        elif not isinstance(rules, RuleSet):
            rules = RuleSet(rules)

        self._rules = rules
        self._prompts_dir = Path(prompts_dir)
        self._strategy = MatchStrategy(strategy)
        self._index = (
            PatternIndex(rules) if self._strategy == MatchStrategy.AUTOMATON else None
        )

        self._cache_documents = cache_documents
        self._content_cache: dict[str, str] = {}
        # Guards dict access only; never held across file I/O
        self._content_lock = threading.Lock()

        if lookup_cache_size > 0:
            self._lookup = lru_cache(maxsize=lookup_cache_size)(self._scan)
        else:
            self._lookup = self._scan
        self._max_cached_query_length = max_cached_query_length

    @classmethod
    def from_settings(cls, settings: ServerSettings) -> "PromptMatcher":
        """Build a matcher from server settings."""
        if settings.rules_file:
            rules = RuleSet.from_yaml(settings.rules_file)
        else:
            rules = RuleSet.default()
        return cls(
            rules=rules,
            prompts_dir=settings.prompts_dir,
            strategy=settings.match_strategy,
            cache_documents=settings.cache_documents,
        )

    @property
    def rules(self) -> RuleSet:
        return self._rules

    @property
    def prompts_dir(self) -> Path:
        return self._prompts_dir

    @property
    def strategy(self) -> MatchStrategy:
        return self._strategy

    def find_best_match(self, query: str | None) -> Rule | None:
        """Find the rule matching a query.

        Empty or missing queries never raise; they simply do not match.
        """
        if not query:
            logger.debug("Empty query, no match")
            return None
        if not isinstance(query, str):
            query = str(query)

        lowercase_query = query.lower()
        if len(lowercase_query) > self._max_cached_query_length:
            rule = self._scan(lowercase_query)
        else:
            rule = self._lookup(lowercase_query)
        if rule is None:
            logger.debug(f'No pattern match found for query: "{query}"')
        return rule

    def _scan(self, lowercase_query: str) -> Rule | None:
        if self._index is not None:
            rule = self._index.find(lowercase_query)
            if rule is not None:
                logger.debug(f"Pattern index match -> {rule.document_ref}")
            return rule

        for rule in self._rules:
            for pattern in rule.patterns:
                if pattern in lowercase_query:
                    logger.debug(
                        f'Pattern match found: "{pattern}" -> {rule.document_ref}'
                    )
                    return rule
        return None

    def get_all_rules(self) -> list[Rule]:
        """Return a copy of all rules in declaration order."""
        return self._rules.to_list()

    def resolve_document_path(self, document_ref: str) -> Path:
        """Resolve a document reference inside the prompts directory.

        Raises:
            InvalidInputError: If the reference is blank or escapes the directory
        """
        if not document_ref or not document_ref.strip():
            raise InvalidInputError("Document reference cannot be empty")

        root = self._prompts_dir.resolve()
        path = (root / document_ref).resolve()
        if not path.is_relative_to(root):
            raise InvalidInputError(
                f"Document reference {document_ref} is outside the prompts directory",
                document=document_ref,
            )
        return path

    async def load_document_content(self, document_ref: str) -> str:
        """Load a prompt document's full UTF-8 text.

        Args:
            document_ref: File name relative to the prompts directory

        Returns:
            Raw document content

        Raises:
            InvalidInputError: If the reference escapes the prompts directory
            DocumentNotFoundError: If the file is missing or unreadable
        """
        path = self.resolve_document_path(document_ref)

        if self._cache_documents:
            with self._content_lock:
                cached = self._content_cache.get(document_ref)
            if cached is not None:
                return cached

        logger.debug(f"Loading prompt file: {path}")
        try:
            content = await asyncio.to_thread(path.read_text, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Failed to load prompt file {document_ref}: {e}")
            raise DocumentNotFoundError(document_ref, path, e) from e

        logger.debug(
            f"Successfully loaded prompt file: {document_ref} ({len(content)} chars)"
        )

        if self._cache_documents:
            # Concurrent misses may both load; the first stored copy is kept
            with self._content_lock:
                content = self._content_cache.setdefault(document_ref, content)
        return content

    async def get_context_for_query(self, query: str | None) -> ResolvedContext:
        """Resolve a query to its rule and document content.

        A query matching no rule is a normal negative result. A matched rule
        whose document cannot be loaded raises ``DocumentNotFoundError``.
        """
        rule = self.find_best_match(query)
        if rule is None:
            return ResolvedContext(rule=None, content=None, match_found=False)

        content = await self.load_document_content(rule.document_ref)
        return ResolvedContext(rule=rule, content=content, match_found=True)


__all__ = ["PromptMatcher"]
