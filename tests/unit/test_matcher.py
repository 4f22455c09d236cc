"""Unit tests for the prompt matcher engine."""

import asyncio
from unittest.mock import patch

import pytest

from prompt_context.core.errors import (
    DocumentNotFoundError,
    ErrorKind,
    InvalidInputError,
)
from prompt_context.core.matcher import PromptMatcher
from prompt_context.core.rules import AUTHORIZATION_MODEL_RULE, RuleSet
from prompt_context.models.config.server import DEFAULT_PROMPTS_DIR, MatchStrategy
from prompt_context.models.domain.rules import ResolvedContext, Rule

STRATEGIES = [MatchStrategy.LINEAR, MatchStrategy.AUTOMATON]


@pytest.fixture
def overlapping_rules():
    """Three rules sharing triggers, ordered specific to general."""
    return RuleSet(
        [
            Rule(
                patterns=["openfga dsl", "schema"],
                document_ref="dsl.md",
                description="OpenFGA DSL",
            ),
            Rule(
                patterns=["tuple", "openfga"],
                document_ref="tuples.md",
                description="Relationship tuples",
            ),
            Rule(
                patterns=["auth", "dsl"],
                document_ref="general.md",
                description="General",
            ),
        ]
    )


@pytest.fixture
def prompts_dir(tmp_path):
    directory = tmp_path / "prompts"
    directory.mkdir()
    (directory / "dsl.md").write_text("# DSL guide\n", encoding="utf-8")
    (directory / "tuples.md").write_text("# Tuples ✓\n", encoding="utf-8")
    (directory / "general.md").write_text("# General\n", encoding="utf-8")
    return directory


class TestFindBestMatch:
    """Test query to rule matching."""

    @pytest.mark.parametrize("strategy", STRATEGIES)
    def test_openfga_authorization_model_query(self, strategy):
        """Test the documented OpenFGA question matches the default rule."""
        matcher = PromptMatcher(strategy=strategy)

        rule = matcher.find_best_match("How do I create an OpenFGA authorization model?")

        assert rule == AUTHORIZATION_MODEL_RULE
        assert rule.description == "Author authorization models with OpenFGA"

    @pytest.mark.parametrize("strategy", STRATEGIES)
    def test_unrelated_query_does_not_match(self, strategy):
        """Test a query with no pattern returns None."""
        matcher = PromptMatcher(strategy=strategy)
        assert matcher.find_best_match("What's the weather today?") is None

    @pytest.mark.parametrize("strategy", STRATEGIES)
    @pytest.mark.parametrize("query", ["", "   ", "\n\t", None])
    def test_empty_queries_do_not_match(self, strategy, query):
        """Test empty and whitespace queries never raise and never match."""
        matcher = PromptMatcher(strategy=strategy)
        assert matcher.find_best_match(query) is None

    @pytest.mark.parametrize("strategy", STRATEGIES)
    def test_case_insensitive_substring(self, strategy):
        """Test 'RBAC vs ABAC' matches through the lower-cased 'rbac' pattern."""
        matcher = PromptMatcher(strategy=strategy)
        assert matcher.find_best_match("RBAC vs ABAC") == AUTHORIZATION_MODEL_RULE

    def test_substring_inside_word_matches(self):
        """Test patterns match inside words, without tokenization."""
        matcher = PromptMatcher()
        # "auth" is contained in "author"
        assert matcher.find_best_match("Who is the author?") == AUTHORIZATION_MODEL_RULE

    def test_patterns_are_not_trimmed_or_stemmed(self):
        """Test punctuation between words prevents a phrase match."""
        rules = [Rule(patterns=["access check"], document_ref="a.md")]
        matcher = PromptMatcher(rules)

        assert matcher.find_best_match("ACCESS CHECK!") is not None
        assert matcher.find_best_match("access-check") is None

    @pytest.mark.parametrize("strategy", STRATEGIES)
    def test_first_rule_wins(self, overlapping_rules, strategy):
        """Test earlier rules shadow later ones sharing a trigger."""
        matcher = PromptMatcher(overlapping_rules, strategy=strategy)

        # "openfga dsl" hits all three rules; the first declared wins
        assert matcher.find_best_match("openfga dsl help").document_ref == "dsl.md"
        # "openfga" alone hits rules 2 (openfga) and 3 (auth is not present)
        assert matcher.find_best_match("OpenFGA basics").document_ref == "tuples.md"
        # "auth" and "tuple" hit rules 2 and 3; rule 2 is earlier
        assert matcher.find_best_match("auth tuple").document_ref == "tuples.md"
        # Only the general rule has "dsl" on its own
        assert matcher.find_best_match("a dsl question").document_ref == "general.md"

    @pytest.mark.parametrize("strategy", STRATEGIES)
    def test_rule_order_beats_position_in_query(self, overlapping_rules, strategy):
        """Test precedence follows rule order, not where a pattern occurs."""
        matcher = PromptMatcher(overlapping_rules, strategy=strategy)

        # "auth" (rule 3) appears before "schema" (rule 1) in the text
        rule = matcher.find_best_match("auth first, then schema")

        assert rule.document_ref == "dsl.md"

    def test_reordering_rules_changes_precedence(self, overlapping_rules):
        """Test precedence is defined only by declaration order."""
        reversed_rules = RuleSet(reversed(overlapping_rules.to_list()))
        matcher = PromptMatcher(reversed_rules)

        assert matcher.find_best_match("openfga dsl help").document_ref == "general.md"

    def test_deterministic(self, overlapping_rules):
        """Test repeated lookups return the same rule."""
        matcher = PromptMatcher(overlapping_rules)
        results = {matcher.find_best_match("tuple question") for _ in range(5)}
        assert len(results) == 1

    def test_lookup_cache_can_be_disabled(self, overlapping_rules):
        """Test matching without the lookup cache gives the same answers."""
        cached = PromptMatcher(overlapping_rules)
        uncached = PromptMatcher(overlapping_rules, lookup_cache_size=0)

        for query in ["openfga dsl", "tuple", "dsl", "nothing here"]:
            assert cached.find_best_match(query) == uncached.find_best_match(query)

    def test_long_queries_bypass_lookup_cache(self, overlapping_rules):
        """Test oversized queries are matched but not kept in the cache."""
        matcher = PromptMatcher(overlapping_rules, max_cached_query_length=16)

        long_query = "x" * 100 + " tuple"
        assert matcher.find_best_match(long_query).document_ref == "tuples.md"
        assert matcher._lookup.cache_info().currsize == 0

        matcher.find_best_match("tuple")
        assert matcher._lookup.cache_info().currsize == 1

    def test_accepts_plain_rule_list(self):
        """Test a plain iterable of rules is wrapped in a RuleSet."""
        rules = [Rule(patterns=["x"], document_ref="x.md")]
        matcher = PromptMatcher(rules)
        assert isinstance(matcher.rules, RuleSet)
        assert len(matcher.rules) == 1


class TestGetAllRules:
    """Test rule introspection."""

    def test_returns_rules_in_order(self, overlapping_rules):
        """Test length and order follow the configured rule set."""
        matcher = PromptMatcher(overlapping_rules)

        rules = matcher.get_all_rules()

        assert len(rules) == 3
        assert [rule.document_ref for rule in rules] == [
            "dsl.md",
            "tuples.md",
            "general.md",
        ]

    def test_returned_list_is_a_copy(self, overlapping_rules):
        """Test mutating the returned list does not affect the engine."""
        matcher = PromptMatcher(overlapping_rules)

        rules = matcher.get_all_rules()
        rules.clear()
        rules.append(Rule(patterns=["weather"], document_ref="weather.md"))

        assert len(matcher.get_all_rules()) == 3
        assert matcher.find_best_match("weather") is None

    def test_default_rule_set(self):
        """Test the default engine has the single OpenFGA rule."""
        rules = PromptMatcher().get_all_rules()
        assert rules == [AUTHORIZATION_MODEL_RULE]
        assert len(rules[0].patterns) == 31


class TestLoadDocumentContent:
    """Test prompt document loading."""

    @pytest.mark.asyncio
    async def test_loads_utf8_content(self, overlapping_rules, prompts_dir):
        """Test the full UTF-8 text is returned."""
        matcher = PromptMatcher(overlapping_rules, prompts_dir=prompts_dir)

        content = await matcher.load_document_content("tuples.md")

        assert content == "# Tuples ✓\n"

    @pytest.mark.asyncio
    async def test_missing_document_raises(self, prompts_dir):
        """Test a missing file raises DocumentNotFoundError with context."""
        matcher = PromptMatcher(prompts_dir=prompts_dir)

        with pytest.raises(DocumentNotFoundError) as exc_info:
            await matcher.load_document_content("missing.md")

        error = exc_info.value
        assert error.kind == ErrorKind.DOCUMENT_NOT_FOUND
        assert error.path == (prompts_dir / "missing.md").resolve()
        assert isinstance(error.cause, FileNotFoundError)
        assert error.__cause__ is error.cause
        assert error.details["document"] == "missing.md"

    @pytest.mark.asyncio
    async def test_directory_is_unreadable(self, prompts_dir):
        """Test a directory in place of a file is reported as not found."""
        (prompts_dir / "folder.md").mkdir()
        matcher = PromptMatcher(prompts_dir=prompts_dir)

        with pytest.raises(DocumentNotFoundError):
            await matcher.load_document_content("folder.md")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "document_ref", ["../secrets.md", "/etc/passwd", "nested/../../x.md"]
    )
    async def test_rejects_references_outside_prompts_dir(
        self, prompts_dir, document_ref
    ):
        """Test references escaping the prompts directory are refused."""
        (prompts_dir.parent / "secrets.md").write_text("secret", encoding="utf-8")
        matcher = PromptMatcher(prompts_dir=prompts_dir)

        with pytest.raises(InvalidInputError) as exc_info:
            await matcher.load_document_content(document_ref)

        assert exc_info.value.kind == ErrorKind.INVALID_INPUT

    @pytest.mark.asyncio
    async def test_rejects_empty_reference(self, prompts_dir):
        """Test blank references are invalid input."""
        matcher = PromptMatcher(prompts_dir=prompts_dir)

        with pytest.raises(InvalidInputError):
            await matcher.load_document_content("  ")

    @pytest.mark.asyncio
    async def test_content_is_cached(self, overlapping_rules, prompts_dir):
        """Test documents are read once and then served from memory."""
        matcher = PromptMatcher(overlapping_rules, prompts_dir=prompts_dir)

        first = await matcher.load_document_content("dsl.md")
        (prompts_dir / "dsl.md").unlink()
        second = await matcher.load_document_content("dsl.md")

        assert first == second == "# DSL guide\n"

    @pytest.mark.asyncio
    async def test_cache_disabled_reads_every_time(
        self, overlapping_rules, prompts_dir
    ):
        """Test disabling the cache re-reads the file."""
        matcher = PromptMatcher(
            overlapping_rules, prompts_dir=prompts_dir, cache_documents=False
        )

        await matcher.load_document_content("dsl.md")
        (prompts_dir / "dsl.md").write_text("changed", encoding="utf-8")

        assert await matcher.load_document_content("dsl.md") == "changed"

    @pytest.mark.asyncio
    async def test_concurrent_loads_agree(self, overlapping_rules, prompts_dir):
        """Test racing loads of one document all return the same text."""
        matcher = PromptMatcher(overlapping_rules, prompts_dir=prompts_dir)

        results = await asyncio.gather(
            *[matcher.load_document_content("general.md") for _ in range(10)]
        )

        assert set(results) == {"# General\n"}


class TestGetContextForQuery:
    """Test query resolution end to end."""

    @pytest.mark.asyncio
    async def test_documented_openfga_scenario(self):
        """Test the bundled document is returned for an OpenFGA question."""
        matcher = PromptMatcher()
        expected = (DEFAULT_PROMPTS_DIR / "authorization-model.md").read_text(
            encoding="utf-8"
        )

        result = await matcher.get_context_for_query(
            "How do I create an OpenFGA authorization model?"
        )

        assert isinstance(result, ResolvedContext)
        assert result.match_found is True
        assert result.rule.description == "Author authorization models with OpenFGA"
        assert result.content == expected

    @pytest.mark.asyncio
    @pytest.mark.parametrize("query", ["What's the weather today?", ""])
    async def test_no_match_is_not_an_error(self, query):
        """Test no match yields an empty negative result."""
        matcher = PromptMatcher()

        result = await matcher.get_context_for_query(query)

        assert result.match_found is False
        assert result.rule is None
        assert result.content is None

    @pytest.mark.asyncio
    async def test_idempotent(self, overlapping_rules, prompts_dir):
        """Test repeated calls give identical rule and content."""
        matcher = PromptMatcher(overlapping_rules, prompts_dir=prompts_dir)

        first = await matcher.get_context_for_query("tuple")
        second = await matcher.get_context_for_query("tuple")

        assert first.rule == second.rule
        assert first.content == second.content

    @pytest.mark.asyncio
    async def test_deleted_document_surfaces_error(
        self, overlapping_rules, prompts_dir
    ):
        """Test a matched rule with a deleted file raises, not an empty match."""
        matcher = PromptMatcher(overlapping_rules, prompts_dir=prompts_dir)
        (prompts_dir / "tuples.md").unlink()

        with pytest.raises(DocumentNotFoundError) as exc_info:
            await matcher.get_context_for_query("relationship tuple")

        assert exc_info.value.document_ref == "tuples.md"

    @pytest.mark.asyncio
    async def test_no_match_skips_document_io(self, overlapping_rules, prompts_dir):
        """Test documents are not touched when nothing matches."""
        matcher = PromptMatcher(overlapping_rules, prompts_dir=prompts_dir)

        with patch.object(matcher, "load_document_content") as load:
            result = await matcher.get_context_for_query("nothing relevant")

        load.assert_not_called()
        assert result.match_found is False
