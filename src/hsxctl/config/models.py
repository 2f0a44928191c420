"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, ``hsx.toml`` only contains
overrides.  A project needs no config file at all.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field

# --- hsx.toml sections ---


class BuildConfig(BaseModel):
    """[build] section."""

    model_config = {"frozen": True}

    entry: str = "Mist.hsx"
    base_dir: Path | None = None


class LoaderConfig(BaseModel):
    """[loader] section."""

    model_config = {"frozen": True}

    block_tag: str = "hsx"
    clone_tags: list[str] = Field(default_factory=lambda: ["img", "video", "canvas", "div"])
    timeout: float = 10.0


class PluginsConfig(BaseModel):
    """[plugins] section."""

    model_config = {"frozen": True}

    enabled: bool = True
    local_dir: str = ".hsx/plugins"
