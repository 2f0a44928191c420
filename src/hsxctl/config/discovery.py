"""Config file discovery.

The nearest ``hsx.toml`` (or ``.hsx/hsx.toml``) found walking up from the
working directory wins.  ``HSX_CONFIG`` pins an explicit file and
disables the walk; ``--config`` on the CLI bypasses both.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path

CONFIG_FILENAME = "hsx.toml"
CONFIG_ENV_VAR = "HSX_CONFIG"

# Checked in order inside each directory.
CONFIG_CANDIDATES = (CONFIG_FILENAME, f".hsx/{CONFIG_FILENAME}")


class ConfigError(ValueError):
    """A config file exists but is not valid TOML."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Invalid TOML in {path}: {reason}")
        self.path = path


def _ancestors(start: Path) -> Iterator[Path]:
    current = start.resolve()
    yield current
    yield from current.parents


def find_config(start: Path | None = None) -> Path | None:
    """Locate the config file in effect for *start* (default: cwd).

    An ``HSX_CONFIG`` pointing at a missing file yields None rather than
    falling back to the walk.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        pinned = Path(env_path)
        return pinned if pinned.is_file() else None

    for directory in _ancestors(start or Path.cwd()):
        for name in CONFIG_CANDIDATES:
            candidate = directory / name
            if candidate.is_file():
                return candidate
    return None


def project_root_for(config_path: Path | None) -> Path:
    """Directory relative paths resolve from for *config_path*.

    ``.hsx/hsx.toml`` belongs to the directory containing ``.hsx``.
    """
    if config_path is None:
        return Path.cwd()
    parent = config_path.resolve().parent
    return parent.parent if parent.name == ".hsx" else parent
