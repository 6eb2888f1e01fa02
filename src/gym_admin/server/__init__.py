"""HTTP server: SQL proxy, dashboard routes and MCP tools."""

from .main import main

__all__ = ["main"]
