"""
Prompt Context: MCP context provider for OpenFGA authorization modeling.

Matches natural-language queries against keyword rules and serves the
pre-authored guidance document tied to the matching rule.
"""

__version__ = "1.0.0"
