"""
Typed request objects for the editing engine.

The ``from_dict`` constructors accept the loose shapes tool callers send
(JSON numbers as floats, a few key aliases) and turn them into plain
dataclasses. Range checks are *not* done here; that is the validator's job,
so a request with ``start_line: 0`` parses fine and is rejected later with
the operation index attached.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Sequence


def coerce_int(raw: Any, field_name: str) -> int:
    if isinstance(raw, bool):
        raise ValueError(f"Invalid {field_name}: {raw!r} is not an integer")
    if isinstance(raw, float):
        if not raw.is_integer():
            raise ValueError(f"Invalid {field_name}: {raw!r} is not an integer")
        return int(raw)
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid {field_name}: {raw!r} is not an integer")


def coerce_bool(raw: Any, field_name: str) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str) and raw.strip().lower() in ("true", "false", "1", "0", "yes", "no"):
        return raw.strip().lower() in ("true", "1", "yes")
    if isinstance(raw, (int, float)) and raw in (0, 1):
        return bool(raw)
    raise ValueError(f"Invalid {field_name}: {raw!r} is not a boolean")


def _pick(data: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def _require(data: Mapping[str, Any], *keys: str) -> Any:
    value = _pick(data, *keys)
    if value is None:
        raise ValueError(f"Missing required field: {keys[0]}")
    return value


@dataclass
class EditOperation:
    """Replace lines ``start_line..end_line`` (inclusive) with ``replacement_text``."""

    start_line: int
    end_line: int
    replacement_text: str
    description: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EditOperation":
        if not isinstance(data, Mapping):
            raise ValueError(f"Edit operation must be an object, got {type(data).__name__}")
        replacement = _pick(data, "replacement_text", "replacement", "text", default="")
        if not isinstance(replacement, str):
            raise ValueError("replacement must be a string")
        description = _pick(data, "description")
        return cls(
            start_line=coerce_int(_require(data, "start_line", "start"), "start_line"),
            end_line=coerce_int(_require(data, "end_line", "end"), "end_line"),
            replacement_text=replacement,
            description=str(description) if description else None,
        )


@dataclass
class TextInsertion:
    """Insert ``content`` before or after an existing line; never removes lines."""

    line: int
    content: str
    before: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TextInsertion":
        if not isinstance(data, Mapping):
            raise ValueError(f"Insertion must be an object, got {type(data).__name__}")
        content = _pick(data, "content", "text", default="")
        if not isinstance(content, str):
            raise ValueError("insertion content must be a string")

        # "position": "before" | "after" is accepted alongside the boolean.
        position = _pick(data, "position")
        if position is not None:
            position = str(position).strip().lower()
            if position not in ("before", "after"):
                raise ValueError(f"Invalid position: {position!r} (expected 'before' or 'after')")
            before = position == "before"
        else:
            before = coerce_bool(_pick(data, "before", default=False), "before")

        return cls(
            line=coerce_int(_require(data, "line", "line_number"), "line"),
            content=content,
            before=before,
        )


@dataclass
class FileEditRequest:
    path: str
    operations: List[EditOperation] = field(default_factory=list)
    create_backup: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FileEditRequest":
        if not isinstance(data, Mapping):
            raise ValueError(f"File edit request must be an object, got {type(data).__name__}")
        path = _require(data, "path")
        raw_ops = _pick(data, "operations", default=[])
        if not isinstance(raw_ops, Sequence) or isinstance(raw_ops, (str, bytes)):
            raise ValueError(f"operations for {path} must be a list")
        return cls(
            path=str(path),
            operations=[EditOperation.from_dict(op) for op in raw_ops],
            create_backup=coerce_bool(_pick(data, "create_backup", default=False), "create_backup"),
        )


@dataclass
class BatchEditRequest:
    """
    Edits for several files.

    ``continue_on_error`` only matters when ``atomic`` is False.
    """

    files: List[FileEditRequest] = field(default_factory=list)
    atomic: bool = True
    dry_run: bool = False
    continue_on_error: bool = False
    validate_all: bool = True

    @classmethod
    def from_files(cls, files: Sequence[Mapping[str, Any]], **flags: Any) -> "BatchEditRequest":
        return cls(files=[FileEditRequest.from_dict(f) for f in files], **flags)
