"""
Base Tool Handler

Every tool the server exposes is a handler: it reads its parameters from a
plain dict (as delivered by the protocol layer or the CLI), calls the engine
or the config service, and returns a ToolResult. Failures never escape as
exceptions; they become ``ToolResult(is_error=True)`` carrying the message.
"""

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from lineforge.core.errors import EditingError
from lineforge.core.operations import coerce_bool, coerce_int

logger = logging.getLogger(__name__)


@dataclass
class ToolResult:
    """
    Outcome of one tool call.

    Attributes:
        text: Success message, preview text, or error description
        is_error: True when the call failed
    """
    text: str
    is_error: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {"text": self.text, "is_error": self.is_error}


@dataclass
class ToolParameter:
    name: str
    kind: str  # "string" | "number" | "boolean" | "json"
    description: str
    required: bool = False


class BaseToolHandler(ABC):
    """
    Base class for all tool handlers.

    Subclasses set ``name``, ``description`` and ``parameters`` and implement
    ``execute``, which returns the result text or raises.
    """

    name: str = ""
    description: str = ""
    parameters: Tuple[ToolParameter, ...] = ()

    def run(self, params: Optional[Mapping[str, Any]] = None) -> ToolResult:
        params = dict(params or {})
        try:
            for parameter in self.parameters:
                if parameter.required and params.get(parameter.name) is None:
                    raise ValueError(f"Missing required parameter: {parameter.name}")
            result = self.execute(params)
            return result if isinstance(result, ToolResult) else ToolResult(result)
        except EditingError as e:
            logger.warning(f"{self.name} failed: {e}")
            return ToolResult(str(e), is_error=True)
        except json.JSONDecodeError as e:
            return ToolResult(f"Invalid JSON for {self.name}: {e}", is_error=True)
        except KeyError as e:
            return ToolResult(str(e.args[0]) if e.args else str(e), is_error=True)
        except OSError as e:
            logger.error(f"{self.name} failed: {e}")
            return ToolResult(f"{self.name} failed: {e}", is_error=True)
        except (ValueError, TypeError) as e:
            return ToolResult(f"Invalid parameters for {self.name}: {e}", is_error=True)

    @abstractmethod
    def execute(self, params: Dict[str, Any]) -> Union[str, ToolResult]:
        pass

    def describe(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "parameters": [
                {
                    "name": p.name,
                    "type": p.kind,
                    "description": p.description,
                    "required": p.required,
                }
                for p in self.parameters
            ],
        }

    # ------------------------------------------------------------------
    # Parameter access
    # ------------------------------------------------------------------
    @staticmethod
    def get_str(params: Mapping[str, Any], name: str, default: Optional[str] = None) -> Optional[str]:
        value = params.get(name)
        if value is None:
            return default
        if not isinstance(value, str):
            raise TypeError(f"{name} must be a string")
        return value

    @staticmethod
    def get_int(params: Mapping[str, Any], name: str, default: int) -> int:
        value = params.get(name)
        return default if value is None else coerce_int(value, name)

    @staticmethod
    def get_bool(params: Mapping[str, Any], name: str, default: bool) -> bool:
        value = params.get(name)
        return default if value is None else coerce_bool(value, name)

    @staticmethod
    def get_json_list(params: Mapping[str, Any], name: str) -> List[Any]:
        """A list given directly or as a JSON-encoded string."""
        value = params.get(name)
        if isinstance(value, str):
            value = json.loads(value)
        if not isinstance(value, list):
            raise ValueError(f"{name} must be a JSON array")
        return value


def param(name: str, kind: str, description: str, required: bool = False) -> ToolParameter:
    return ToolParameter(name, kind, description, required)
