"""
Tool Registry

Central registry for all tool handlers, keyed by tool name.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

from lineforge.core.editing_engine import EditEngine
from lineforge.core.handlers.base import BaseToolHandler, ToolResult
from lineforge.core.handlers.config_handlers import CONFIG_HANDLERS
from lineforge.core.handlers.text_handlers import TEXT_HANDLERS
from lineforge.services.config_service import ConfigService

logger = logging.getLogger(__name__)


class ToolRegistry:
    """
    Maps tool names to handler instances.

    Handlers are kept in registration order, which is also the order
    ``describe()`` lists them in.
    """

    def __init__(self):
        self._handlers: Dict[str, BaseToolHandler] = {}

    def register(self, handler: BaseToolHandler, name: Optional[str] = None) -> None:
        """
        Register a handler.

        Args:
            handler: Handler instance to register
            name: Tool name (default: the handler's ``name`` attribute)
        """
        name = name or handler.name
        if not name:
            raise ValueError(f"{handler.__class__.__name__} has no tool name")
        if name in self._handlers:
            logger.warning(f"Replacing handler for tool {name}")
        self._handlers[name] = handler

    def get(self, name: str) -> Optional[BaseToolHandler]:
        return self._handlers.get(name)

    def names(self) -> List[str]:
        return list(self._handlers)

    def describe(self) -> List[Dict[str, Any]]:
        return [handler.describe() for handler in self._handlers.values()]

    def call(self, name: str, params: Optional[Mapping[str, Any]] = None) -> ToolResult:
        handler = self.get(name)
        if handler is None:
            return ToolResult(f"Unknown tool: {name}", is_error=True)
        logger.debug(f"Calling tool {name}")
        return handler.run(params)


def build_default_registry(engine: EditEngine, config_service: ConfigService) -> ToolRegistry:
    """Registry with every text editing and configuration tool."""
    registry = ToolRegistry()
    for handler_class in TEXT_HANDLERS:
        registry.register(handler_class(engine))
    for handler_class in CONFIG_HANDLERS:
        registry.register(handler_class(config_service))
    return registry
