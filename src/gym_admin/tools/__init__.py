"""MCP tool definitions."""

from .admin_tools import register_admin_tools

__all__ = ["register_admin_tools"]
