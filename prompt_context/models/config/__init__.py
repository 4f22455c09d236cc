"""Configuration models for Prompt Context."""

from prompt_context.models.config.server import *

__all__ = ["DEFAULT_PROMPTS_DIR", "Environment", "MatchStrategy", "ServerSettings"]
