"""
Configuration Service

Holds the server configuration (allow-list and limits) and persists it to a
JSON or YAML file. There is no process-wide instance: the CLI builds one
ConfigService and hands its ``config`` object to the engine and sandbox.
"""

import json
import logging
import os
import tempfile
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "LINEFORGE_CONFIG"


def default_config_path() -> Path:
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return Path.home() / ".lineforge.json"


def _default_allowed_directories() -> List[str]:
    return [str(Path.home()), tempfile.gettempdir()]


@dataclass
class ServerConfig:
    """Allow-list and size limits shared by the engine and the sandbox."""

    allowed_directories: List[str] = field(default_factory=_default_allowed_directories)
    file_read_line_limit: int = 1000
    file_write_line_limit: int = 50
    max_file_size_mb: float = 10
    preserve_line_endings: bool = True

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ServerConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning(f"Ignoring unknown config keys: {', '.join(unknown)}")
        config = cls(**{k: v for k, v in data.items() if k in known})
        if isinstance(config.allowed_directories, str):
            config.allowed_directories = [config.allowed_directories]
        config.allowed_directories = [str(d) for d in config.allowed_directories]
        return config

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("true", "1", "yes", "on"):
        return True
    if lowered in ("false", "0", "no", "off"):
        return False
    raise ValueError(f"Invalid boolean value: {value!r}")


class ConfigService:
    """
    Service class for configuration management.

    Provides:
    - Loading from and saving to ``config_path`` (JSON, or YAML for .yaml/.yml)
    - Typed get/set of individual keys
    - Allow-list maintenance
    - Validation and reset to defaults

    Every mutation is saved immediately when a path is configured.
    """

    def __init__(self, config_path: Optional[Union[str, Path]] = None, *, persist: bool = True):
        """
        Initialize config service.

        Args:
            config_path: Path to config file (default: ``~/.lineforge.json``
                or ``$LINEFORGE_CONFIG``)
            persist: When False, changes are kept in memory only
        """
        self.config_path = Path(config_path).expanduser() if config_path else default_config_path()
        self.persist = persist
        self.config = ServerConfig()

        if self.config_path.exists():
            self.load()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------
    @property
    def _is_yaml(self) -> bool:
        return self.config_path.suffix.lower() in (".yaml", ".yml")

    def load(self) -> ServerConfig:
        """
        Load configuration from file.

        Raises:
            ValueError: If the file cannot be parsed or is not a mapping
        """
        try:
            with self.config_path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f) if self._is_yaml else json.load(f)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            logger.error(f"Error parsing {self.config_path}: {e}")
            raise ValueError(f"Error parsing config file {self.config_path}: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file {self.config_path} must contain a mapping")

        try:
            loaded = ServerConfig.from_dict(data)
        except TypeError as e:
            raise ValueError(f"Invalid config file {self.config_path}: {e}") from e

        # Update in place so sandboxes holding this object see the new values.
        for f in fields(ServerConfig):
            setattr(self.config, f.name, getattr(loaded, f.name))
        logger.info(f"Configuration loaded from {self.config_path}")
        return self.config

    def save(self) -> None:
        if not self.persist:
            return
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with self.config_path.open("w", encoding="utf-8") as f:
            if self._is_yaml:
                yaml.safe_dump(self.config.to_dict(), f, sort_keys=False)
            else:
                json.dump(self.config.to_dict(), f, indent=4)
        logger.info(f"Configuration saved to {self.config_path}")

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------
    def get(self, key: Optional[str] = None) -> Any:
        """One value, or the whole configuration as a dict when ``key`` is None."""
        if key is None:
            return self.config.to_dict()
        if not hasattr(self.config, key):
            raise KeyError(f"Unknown config key: {key}")
        return getattr(self.config, key)

    def set(self, key: str, value: str) -> Any:
        """
        Set ``key`` from its string form and return the parsed value.

        Integers, floats and booleans are parsed according to the field's
        current type; ``allowed_directories`` takes a comma-separated list or
        a JSON array.
        """
        if not hasattr(self.config, key):
            raise KeyError(f"Unknown config key: {key}")

        current = getattr(self.config, key)
        if isinstance(current, bool):
            parsed: Any = _parse_bool(value)
        elif isinstance(current, int) and key != "max_file_size_mb":
            try:
                parsed = int(value)
            except ValueError:
                raise ValueError(f"Invalid integer value for {key}: {value!r}")
        elif isinstance(current, (int, float)):
            try:
                parsed = float(value)
            except ValueError:
                raise ValueError(f"Invalid number for {key}: {value!r}")
        elif isinstance(current, list):
            parsed = self._parse_list(value)
        else:
            parsed = value

        setattr(self.config, key, parsed)
        self.save()
        logger.info(f"Config {key} set to {parsed!r}")
        return parsed

    @staticmethod
    def _parse_list(value: str) -> List[str]:
        stripped = value.strip()
        if stripped.startswith("["):
            items = json.loads(stripped)
            if not isinstance(items, list):
                raise ValueError("Expected a JSON array")
            return [str(item) for item in items]
        return [item.strip() for item in stripped.split(",") if item.strip()]

    # ------------------------------------------------------------------
    # Allow-list
    # ------------------------------------------------------------------
    def add_allowed_directory(self, directory: str) -> bool:
        """Returns False if the directory was already listed."""
        normalized = str(Path(directory).expanduser().resolve())
        if normalized in self.config.allowed_directories:
            return False
        self.config.allowed_directories.append(normalized)
        self.save()
        logger.info(f"Added allowed directory: {normalized}")
        return True

    def remove_allowed_directory(self, directory: str) -> None:
        candidates = {directory, str(Path(directory).expanduser().resolve())}
        for entry in list(self.config.allowed_directories):
            if entry in candidates:
                self.config.allowed_directories.remove(entry)
                self.save()
                logger.info(f"Removed allowed directory: {entry}")
                return
        raise KeyError(f"Directory not in allowed list: {directory}")

    # ------------------------------------------------------------------
    # Validation / reset
    # ------------------------------------------------------------------
    def validate(self) -> List[str]:
        problems = []
        if not self.config.allowed_directories:
            problems.append("allowed_directories is empty; every path will be rejected")
        for directory in self.config.allowed_directories:
            if not Path(directory).expanduser().is_dir():
                problems.append(f"allowed directory does not exist: {directory}")
        if self.config.file_read_line_limit <= 0:
            problems.append("file_read_line_limit must be positive")
        if self.config.file_write_line_limit <= 0:
            problems.append("file_write_line_limit must be positive")
        if self.config.max_file_size_mb <= 0:
            problems.append("max_file_size_mb must be positive")
        return problems

    def reset(self) -> ServerConfig:
        defaults = ServerConfig()
        for f in fields(ServerConfig):
            setattr(self.config, f.name, getattr(defaults, f.name))
        self.save()
        logger.info("Configuration reset to defaults")
        return self.config

    def to_json(self) -> str:
        return json.dumps(self.config.to_dict(), indent=2)
