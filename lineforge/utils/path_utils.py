import os
from pathlib import Path
from typing import Optional, Union


def resolve_base_dir(
    cli_arg: Optional[str] = None,
    config_val: Optional[str] = None,
    cwd: Optional[Union[str, Path]] = None
) -> Path:
    """
    Resolves the absolute directory relative paths are interpreted against.

    Priority:
    1. CLI argument (--dir)
    2. Config value
    3. Current working directory (cwd)

    Returns:
        Path: Absolute, resolved path.
    """
    path_str = cli_arg or config_val

    if path_str:
        target = Path(path_str).expanduser().resolve()
    else:
        target = Path(cwd or os.getcwd()).resolve()

    return target


def canonicalize(path: Union[str, Path], base_dir: Optional[Path] = None) -> Path:
    """
    Absolute, symlink-free form of ``path``.

    Relative paths are taken against ``base_dir`` (or the cwd). Raises
    OSError / RuntimeError / ValueError when the path cannot be resolved
    (symlink loops, embedded NUL bytes, ...).
    """
    p = Path(path).expanduser()
    if not p.is_absolute():
        p = Path(base_dir or os.getcwd()) / p
    return p.resolve()


def is_within(target: Path, root: Path) -> bool:
    """
    True if ``target`` equals ``root`` or lies below it.

    Compares path components, so ``/tmp-evil`` is not inside ``/tmp``.
    Both arguments must already be canonical.
    """
    try:
        target.relative_to(root)
    except ValueError:
        return False
    return True
