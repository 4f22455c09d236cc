"""Command line interface for Prompt Context."""
