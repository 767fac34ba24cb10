"""
Service Layer

Configuration management shared by the engine, the tools and the CLI.
"""

from lineforge.services.config_service import ConfigService, ServerConfig

__all__ = [
    "ConfigService",
    "ServerConfig",
]
