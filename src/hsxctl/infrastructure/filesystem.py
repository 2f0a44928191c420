"""Filesystem operations for the build pass.

Relative paths in HSX sources resolve against the build base directory
(the source file's directory unless configured otherwise).
"""

from __future__ import annotations

import shutil
from pathlib import Path


def resolve_path(path: str | Path, base_dir: Path | None = None) -> Path:
    """Absolute path for *path*, relative to *base_dir* (default: cwd)."""
    p = Path(path).expanduser()
    if not p.is_absolute():
        p = (base_dir or Path.cwd()) / p
    return p.resolve()


def resolve_file(path: str | Path, base_dir: Path | None = None) -> Path:
    """Resolve *path* and require that it exists.

    Raises:
        FileNotFoundError: the resolved path does not exist.
    """
    resolved = resolve_path(path, base_dir)
    if not resolved.exists():
        msg = f"File not found: {resolved}"
        raise FileNotFoundError(msg)
    return resolved


def copy_file(source: str | Path, destination: str | Path, base_dir: Path | None = None) -> Path:
    """Copy *source*'s bytes to *destination*, creating parent directories.

    Returns the resolved destination path.

    Raises:
        FileNotFoundError: *source* does not exist.
    """
    src = resolve_file(source, base_dir)
    dest = resolve_path(destination, base_dir)
    dest.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(src, dest)
    return dest


def read_source(path: str | Path) -> str:
    """Read an HSX source file as UTF-8 text."""
    return Path(path).read_text(encoding="utf-8")
