"""Rule sets: ordered, immutable collections of prompt rules.

Rule order is match precedence. When two rules can be triggered by the same
text, the rule declared first wins, so more specific rules must come before
more general ones.
"""

import logging
from collections.abc import Iterable, Iterator
from pathlib import Path

import yaml
from pydantic import ValidationError

from prompt_context.core.errors import InvalidInputError
from prompt_context.models.domain.rules import Rule

logger = logging.getLogger(__name__)

OPENFGA_PATTERNS = (
    "authorization model",
    "auth model",
    "access control",
    "rbac",
    "abac",
    "permission",
    "role based",
    "attribute based",
    "authentication",
    "auth",
    "security model",
    "openfga",
    "openfga model",
    "openfga authorization",
    "openfga auth",
    "openfga dsl",
    "openfga schema",
    "openfga relations",
    "openfga types",
    "zanzibar",
    "relationship based access control",
    "rebac",
    "fine grained access control",
    "fga",
    "tuple",
    "relationship tuple",
    "authorization tuple",
    "user relation object",
    "permission check",
    "can user",
    "access check",
)

AUTHORIZATION_MODEL_RULE = Rule(
    patterns=OPENFGA_PATTERNS,
    document_ref="authorization-model.md",
    description="Author authorization models with OpenFGA",
)


class RuleSet:
    """Ordered, read-only sequence of rules."""

    def __init__(self, rules: Iterable[Rule] = ()):
        self._rules: tuple[Rule, ...] = tuple(rules)
        for rule in self._rules:
            if not isinstance(rule, Rule):
                raise TypeError(f"Expected Rule, got {type(rule).__name__}")

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __getitem__(self, index: int) -> Rule:
        return self._rules[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RuleSet):
            return NotImplemented
        return self._rules == other._rules

    def __hash__(self) -> int:
        return hash(self._rules)

    def __repr__(self) -> str:
        return f"RuleSet({len(self._rules)} rules)"

    def extend(self, *rules: Rule) -> "RuleSet":
        """Return a new rule set with ``rules`` appended at lowest precedence."""
        return RuleSet(self._rules + rules)

    def to_list(self) -> list[Rule]:
        """Return a fresh list of the rules in declaration order."""
        return list(self._rules)

    @classmethod
    def default(cls) -> "RuleSet":
        """The built-in rule set shipped with the server."""
        return cls([AUTHORIZATION_MODEL_RULE])

    @classmethod
    def from_yaml(cls, rules_file: Path) -> "RuleSet":
        """Load a rule set from a YAML file.

        Expected layout::

            rules:
              - description: Author authorization models with OpenFGA
                document: authorization-model.md
                patterns: [openfga, rbac]

        Raises:
            InvalidInputError: If the file cannot be read or a rule is invalid
        """
        try:
            with open(rules_file, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise InvalidInputError(
                f"Cannot load rules file {rules_file}: {e}", path=str(rules_file)
            ) from e

        entries = data.get("rules") if isinstance(data, dict) else None
        if not isinstance(entries, list) or not entries:
            raise InvalidInputError(
                f"Rules file {rules_file} must define a non-empty 'rules' list",
                path=str(rules_file),
            )

        rules = []
        for position, entry in enumerate(entries):
            if not isinstance(entry, dict):
                raise InvalidInputError(
                    f"Rule #{position} in {rules_file} is not a mapping",
                    path=str(rules_file),
                )
            try:
                rules.append(
                    Rule(
                        patterns=entry.get("patterns") or (),
                        document_ref=entry.get("document", ""),
                        description=entry.get("description", ""),
                    )
                )
            except ValidationError as e:
                raise InvalidInputError(
                    f"Rule #{position} in {rules_file} is invalid: {e}",
                    path=str(rules_file),
                ) from e

        logger.info(f"Loaded {len(rules)} rules from {rules_file}")
        return cls(rules)


__all__ = ["AUTHORIZATION_MODEL_RULE", "OPENFGA_PATTERNS", "RuleSet"]
