"""MCP server for the prompt context provider.

This module exposes the prompt matcher over the Model Context Protocol:
two tools (query lookup, context listing) and the prompt documents as
``prompt://`` resources.
"""
