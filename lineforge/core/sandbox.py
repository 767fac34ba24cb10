"""
Allow-list enforcement for every path the engine touches.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Sequence, Union

from lineforge.core.errors import PathNotAllowedError
from lineforge.utils.path_utils import canonicalize, is_within

logger = logging.getLogger(__name__)


class PathSandbox:
    """
    Decides whether a path lies inside one of the configured roots.

    The sandbox keeps a reference to the configuration object rather than a
    copy of its list, so ``add_allowed_directory`` on a live config is seen by
    the next check.
    """

    def __init__(self, config=None, *, roots: Optional[Sequence[Union[str, Path]]] = None,
                 base_dir: Optional[Path] = None):
        if config is None and roots is None:
            raise ValueError("PathSandbox needs a config or an explicit list of roots")
        self._config = config
        self._roots = list(roots) if roots is not None else None
        self.base_dir = base_dir

    @property
    def roots(self) -> List[str]:
        if self._roots is not None:
            return [str(r) for r in self._roots]
        return list(self._config.allowed_directories)

    def _canonical_roots(self) -> List[Path]:
        canonical = []
        for root in self.roots:
            try:
                canonical.append(canonicalize(root, self.base_dir))
            except (OSError, RuntimeError, ValueError) as e:
                logger.warning(f"Ignoring allowed directory {root!r}: {e}")
        return canonical

    def resolve(self, path: Union[str, Path]) -> Path:
        """Canonical form of ``path``; raises PathNotAllowedError if it cannot be resolved."""
        try:
            return canonicalize(path, self.base_dir)
        except (OSError, RuntimeError, ValueError) as e:
            raise PathNotAllowedError(str(path), f"cannot resolve path ({e})") from e

    def is_allowed(self, path: Union[str, Path]) -> bool:
        if not str(path).strip():
            return False
        try:
            target = canonicalize(path, self.base_dir)
        except (OSError, RuntimeError, ValueError):
            return False
        return any(is_within(target, root) for root in self._canonical_roots())

    def check(self, path: Union[str, Path]) -> Path:
        """Return the canonical path, or raise PathNotAllowedError."""
        if not str(path).strip():
            raise PathNotAllowedError(str(path), "empty path")
        target = self.resolve(path)
        if not any(is_within(target, root) for root in self._canonical_roots()):
            logger.warning(f"Sandbox violation: {path} resolves to {target}")
            raise PathNotAllowedError(str(path))
        return target
