"""Math preview MCP tools."""
from . import preview

__all__ = ["preview"]
