"""
Timestamped sibling backups taken before a file is first written.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Callable, Dict, Optional, Union

from lineforge.core.errors import BackupFailedError

logger = logging.getLogger(__name__)


class BackupManager:
    """
    Copies a file's bytes to ``<path>.backup.<unix_timestamp>``.

    Backups are never deleted here; cleaning them up is the operator's job.
    An existing backup with the same name (two backups of one file within the
    same second) is left untouched and its path is returned. Anything other
    than a regular file at that name fails the backup.
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        self._clock = clock or time.time

    def backup_path_for(self, path: Union[str, Path]) -> Path:
        return Path(f"{path}.backup.{int(self._clock())}")

    def backup(self, path: Union[str, Path]) -> Path:
        source = Path(path)
        try:
            content = source.read_bytes()
        except OSError as e:
            raise BackupFailedError(
                f"Failed to create backup for {path}: cannot read original file ({e})",
                path=str(path),
            ) from e

        backup_path = self.backup_path_for(source)
        try:
            with backup_path.open("xb") as f:
                f.write(content)
        except FileExistsError as e:
            if not backup_path.is_file():
                raise BackupFailedError(
                    f"Failed to create backup for {path}: {backup_path} exists and is not a file",
                    path=str(path),
                ) from e
            logger.warning(f"Backup {backup_path} already exists, keeping the earlier copy")
            return backup_path
        except OSError as e:
            raise BackupFailedError(
                f"Failed to create backup for {path}: {e}", path=str(path)
            ) from e

        logger.info(f"Backup created: {backup_path}")
        return backup_path


class RequestBackups:
    """
    Per-request view of a BackupManager: each path is backed up at most once.
    """

    def __init__(self, manager: BackupManager):
        self.manager = manager
        self.created: Dict[Path, Path] = {}

    def ensure(self, path: Path) -> Path:
        if path not in self.created:
            self.created[path] = self.manager.backup(path)
        return self.created[path]
