"""Core matching engine for Prompt Context."""

from prompt_context.core.errors import (
    DocumentNotFoundError,
    ErrorKind,
    InvalidInputError,
    PromptContextError,
)
from prompt_context.core.matcher import PromptMatcher
from prompt_context.core.pattern_index import PatternIndex
from prompt_context.core.rules import AUTHORIZATION_MODEL_RULE, RuleSet

__all__ = [
    "AUTHORIZATION_MODEL_RULE",
    "DocumentNotFoundError",
    "ErrorKind",
    "InvalidInputError",
    "PatternIndex",
    "PromptContextError",
    "PromptMatcher",
    "RuleSet",
]
