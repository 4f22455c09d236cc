"""Configuration for the MCP server."""

from prompt_context.models.config.server import ServerSettings

SERVER_INSTRUCTIONS = (
    "OpenFGA expert modeling context provider. Use this server for any "
    "OpenFGA, authorization model, Zanzibar, ReBAC, or access control question "
    "before answering it."
)


def load_settings(**overrides) -> ServerSettings:
    """Load settings from the environment, applying explicit overrides."""
    overrides = {key: value for key, value in overrides.items() if value is not None}
    return ServerSettings(**overrides)


__all__ = ["SERVER_INSTRUCTIONS", "load_settings"]
