"""Domain models for Prompt Context."""

from prompt_context.models.domain.rules import *

__all__ = ["Rule", "ResolvedContext"]
