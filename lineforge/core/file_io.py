"""
File read/write helpers shared by the engine and the staged transaction.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from lineforge.core.errors import FileUnreadableError, WriteFailedError

logger = logging.getLogger(__name__)


@dataclass
class LoadedFile:
    path: Path
    raw: bytes
    text: str
    encoding: str


def read_text_file(path: Path, max_size_mb: Optional[float] = None) -> LoadedFile:
    """Read a file as text, UTF-8 first and Latin-1 as a fallback."""
    try:
        if not path.is_file():
            raise FileUnreadableError(f"Failed to read file {path}: not a regular file", path=str(path))
        if max_size_mb is not None:
            size_mb = path.stat().st_size / (1024 * 1024)
            if size_mb > max_size_mb:
                raise FileUnreadableError(
                    f"Failed to read file {path}: file too large ({size_mb:.2f}MB > {max_size_mb}MB)",
                    path=str(path),
                )
        raw = path.read_bytes()
    except OSError as e:
        raise FileUnreadableError(f"Failed to read file {path}: {e}", path=str(path)) from e

    try:
        return LoadedFile(path, raw, raw.decode("utf-8"), "utf-8")
    except UnicodeDecodeError:
        return LoadedFile(path, raw, raw.decode("latin-1"), "latin-1")


def write_bytes_safe(path: Path, data: bytes) -> None:
    """
    Write via a temp file in the same directory, then rename over the target.

    The target is either fully replaced or left as it was.
    """
    temp_path = path.with_name(f".{path.name}.lineforge.tmp")
    try:
        try:
            mode = path.stat().st_mode & 0o777
        except FileNotFoundError:
            mode = None
        temp_path.write_bytes(data)
        if mode is not None:
            os.chmod(temp_path, mode)
        os.replace(temp_path, path)
    except OSError as e:
        logger.error(f"Write failed for {path}: {e}")
        try:
            temp_path.unlink()
        except OSError:
            pass
        raise WriteFailedError(f"Failed to write file {path}: {e}", path=str(path)) from e


def write_text_safe(path: Path, text: str, encoding: str = "utf-8") -> None:
    try:
        data = text.encode(encoding)
    except UnicodeEncodeError as e:
        raise WriteFailedError(f"Failed to write file {path}: cannot encode as {encoding} ({e})", path=str(path)) from e
    write_bytes_safe(path, data)
