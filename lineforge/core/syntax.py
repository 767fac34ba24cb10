"""
Lightweight syntax checks run before an edited file is written.
"""

from __future__ import annotations

import ast
import json
from pathlib import Path
from typing import Union

import yaml

from lineforge.core.errors import SyntaxValidationError

TEXT_EXTENSIONS = frozenset({
    ".txt", ".md", ".json", ".xml", ".yaml", ".yml",
    ".go", ".py", ".js", ".ts", ".java", ".c", ".cpp",
    ".h", ".hpp", ".cs", ".php", ".rb", ".rs", ".kt",
    ".html", ".css", ".scss", ".sass", ".less",
    ".sql", ".sh", ".bat", ".ps1", ".dockerfile",
    ".cfg", ".conf", ".ini", ".toml", ".properties",
})


def is_text_file(path: Union[str, Path]) -> bool:
    return Path(path).suffix.lower() in TEXT_EXTENSIONS


def validate_syntax(path: Union[str, Path], content: str) -> None:
    """Raise SyntaxValidationError if ``content`` is not valid for ``path``'s type."""
    if not content:
        raise SyntaxValidationError("Syntax validation failed: content is empty", path=str(path))
    if not is_text_file(path):
        raise SyntaxValidationError(
            f"Syntax validation failed: {Path(path).name} is not a recognized text file type",
            path=str(path),
        )

    suffix = Path(path).suffix.lower()
    try:
        if suffix == ".json":
            json.loads(content)
        elif suffix in (".yaml", ".yml"):
            yaml.safe_load(content)
        elif suffix == ".py":
            ast.parse(content, filename=str(path))
    except (ValueError, SyntaxError, yaml.YAMLError) as e:
        raise SyntaxValidationError(f"Syntax validation failed for {path}: {e}", path=str(path)) from e
