"""MCP server exposing the Intuition knowledge graph as LLM tools."""

from .version import __version__

__all__ = ["__version__"]
