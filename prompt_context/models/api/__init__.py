"""API models for Prompt Context."""

from prompt_context.models.api.system import *

__all__ = ["HealthResponse"]
