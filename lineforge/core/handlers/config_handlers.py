"""
Configuration Tool Handlers
"""

from typing import Any, Dict

from lineforge.core.handlers.base import BaseToolHandler, ToolResult, param
from lineforge.services.config_service import ConfigService


class ConfigToolHandler(BaseToolHandler):

    def __init__(self, config_service: ConfigService):
        self.config_service = config_service


class GetConfigHandler(ConfigToolHandler):
    name = "get_config"
    description = "Get the current server configuration as JSON"

    def execute(self, params: Dict[str, Any]) -> str:
        return self.config_service.to_json()


class SetConfigValueHandler(ConfigToolHandler):
    name = "set_config_value"
    description = "Set a single configuration value"
    parameters = (
        param("key", "string", "Configuration key to set", required=True),
        param("value", "string", "Configuration value", required=True),
    )

    def execute(self, params: Dict[str, Any]) -> str:
        key = self.get_str(params, "key")
        value = params["value"]
        if not isinstance(value, str):
            value = str(value).lower() if isinstance(value, bool) else str(value)
        self.config_service.set(key, value)
        return f"Configuration key '{key}' set to '{value}'"


class AddAllowedDirectoryHandler(ConfigToolHandler):
    name = "add_allowed_directory"
    description = "Add a directory to the allowed list"
    parameters = (param("directory", "string", "Directory path to allow", required=True),)

    def execute(self, params: Dict[str, Any]) -> str:
        directory = self.get_str(params, "directory")
        if not self.config_service.add_allowed_directory(directory):
            return f"Directory '{directory}' is already in the allowed list"
        return f"Directory '{directory}' added to allowed list"


class RemoveAllowedDirectoryHandler(ConfigToolHandler):
    name = "remove_allowed_directory"
    description = "Remove a directory from the allowed list"
    parameters = (param("directory", "string", "Directory path to remove", required=True),)

    def execute(self, params: Dict[str, Any]) -> str:
        directory = self.get_str(params, "directory")
        self.config_service.remove_allowed_directory(directory)
        return f"Directory '{directory}' removed from allowed list"


class ValidateConfigHandler(ConfigToolHandler):
    name = "validate_config"
    description = "Check the current configuration for problems"

    def execute(self, params: Dict[str, Any]) -> ToolResult:
        problems = self.config_service.validate()
        if problems:
            return ToolResult("Configuration is invalid: " + "; ".join(problems), is_error=True)
        return ToolResult("Configuration is valid")


class ResetConfigHandler(ConfigToolHandler):
    name = "reset_config"
    description = "Reset configuration to default values"

    def execute(self, params: Dict[str, Any]) -> str:
        self.config_service.reset()
        return "Configuration reset to default values"


CONFIG_HANDLERS = (
    GetConfigHandler,
    SetConfigValueHandler,
    AddAllowedDirectoryHandler,
    RemoveAllowedDirectoryHandler,
    ValidateConfigHandler,
    ResetConfigHandler,
)
