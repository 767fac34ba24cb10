"""
Tool Handler System

Each tool is a handler class taking a parameter dict and returning a
ToolResult. The registry maps tool names to handler instances.
"""

from lineforge.core.handlers.base import BaseToolHandler, ToolParameter, ToolResult
from lineforge.core.handlers.registry import ToolRegistry, build_default_registry

__all__ = [
    "BaseToolHandler",
    "ToolParameter",
    "ToolResult",
    "ToolRegistry",
    "build_default_registry",
]
