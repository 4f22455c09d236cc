"""Centralized model definitions for Prompt Context.

This package contains all Pydantic models organized by domain:
- api/: HTTP transport responses
- domain/: rules and match results
- config/: server settings
"""

# Export all models for convenient importing
from prompt_context.models.api.system import *
from prompt_context.models.config.server import *
from prompt_context.models.domain.rules import *

__all__ = [
    # API models
    "HealthResponse",
    # Domain models
    "Rule",
    "ResolvedContext",
    # Config models
    "DEFAULT_PROMPTS_DIR",
    "Environment",
    "MatchStrategy",
    "ServerSettings",
]
