"""
All-or-nothing commit of several file writes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from lineforge.core.errors import WriteFailedError
from lineforge.core.file_io import write_bytes_safe, write_text_safe

logger = logging.getLogger(__name__)


@dataclass
class StagedWrite:
    path: Path
    original: bytes
    new_text: str
    encoding: str


class StagedTransaction:
    """
    Holds the new content of every file in memory until ``commit()``.

    Each staged write remembers the file's original bytes. If a write fails
    during commit, every file already written is restored from those bytes
    before the error is re-raised.
    """

    def __init__(self):
        self.staged: List[StagedWrite] = []
        self.written: List[StagedWrite] = []
        self.committed = False
        self.failed: Optional[StagedWrite] = None
        self.rollback_failures: List[str] = []

    def stage(self, path: Path, original: bytes, new_text: str, encoding: str = "utf-8") -> None:
        # A path staged twice keeps its first original and its latest content.
        for entry in self.staged:
            if entry.path == path:
                entry.new_text = new_text
                return
        self.staged.append(StagedWrite(path, original, new_text, encoding))

    def commit(self) -> List[Path]:
        if self.committed:
            raise RuntimeError("Transaction already committed")

        for entry in self.staged:
            try:
                write_text_safe(entry.path, entry.new_text, entry.encoding)
            except WriteFailedError:
                self.failed = entry
                self.rollback()
                raise
            self.written.append(entry)
            logger.info(f"Committed {entry.path}")

        self.committed = True
        return [entry.path for entry in self.written]

    def rollback(self) -> bool:
        if self.committed:
            logger.warning("Cannot rollback committed transaction")
            return False

        logger.error(f"Rolling back {len(self.written)} written file(s)...")
        while self.written:
            entry = self.written.pop()
            try:
                write_bytes_safe(entry.path, entry.original)
                logger.info(f"Rollback: restored {entry.path}")
            except WriteFailedError as e:
                logger.error(f"Rollback error for {entry.path}: {e}")
                self.rollback_failures.append(str(entry.path))
        return not self.rollback_failures
