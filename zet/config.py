"""Configuration for zet.

A ``ZetConfig`` value is built once by the CLI and handed to every component.
Nothing below the CLI reads the environment or the working directory.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Mapping

DEFAULT_PREFIX = "tmp"
DEBUG_DIR = Path("zettel")
# Temporary production directory until 1.0, when the trailing 2 is dropped
PRODUCTION_DIR_NAME = "zettel2"
DEFAULT_CONFIG_PATH = Path("~/.config/zet/config.toml")


@dataclass(frozen=True)
class ZetConfig:
    """Explicit configuration passed into every component."""

    zettel_dir: Path
    default_prefix: str = DEFAULT_PREFIX
    editor: str | None = None
    debug: bool = False

    @property
    def state_dir(self) -> Path:
        """Directory for zet's own bookkeeping (audit log)."""
        return self.zettel_dir / ".zet"

    def with_dir(self, zettel_dir: Path) -> "ZetConfig":
        return replace(self, zettel_dir=zettel_dir)


def _expand_home(value: str, home: Path) -> Path:
    if value == "~" or value.startswith("~/"):
        return home / value[2:]
    return Path(value)


def _is_truthy(value: str | None) -> bool:
    return value in ("1", "true")


def _load_toml(path: Path) -> dict[str, Any]:
    import tomllib

    data = tomllib.loads(path.read_text(encoding="utf-8"))
    return data if isinstance(data, dict) else {}


def load_config(
    config_path: Path | None = None,
    env: Mapping[str, str] | None = None,
    home: Path | None = None,
    cwd: Path | None = None,
) -> ZetConfig:
    """Build a ``ZetConfig`` from the environment and an optional TOML file.

    Precedence, lowest first: built-in defaults, ``ZET_DEBUG``/``EDITOR``,
    then the TOML file. An explicitly passed ``config_path`` must exist; the
    default one is optional.

    Raises:
        FileNotFoundError: if ``config_path`` was given and does not exist
        ValueError: if the TOML file holds values of the wrong type
    """
    env = os.environ if env is None else env
    home = home or Path.home()
    cwd = cwd or Path.cwd()

    debug = _is_truthy(env.get("ZET_DEBUG"))
    zettel_dir = cwd / DEBUG_DIR if debug else home / PRODUCTION_DIR_NAME
    editor = env.get("EDITOR") or None
    default_prefix = DEFAULT_PREFIX

    if config_path is None:
        candidate = _expand_home(str(DEFAULT_CONFIG_PATH), home)
        data = _load_toml(candidate) if candidate.is_file() else {}
    else:
        if not config_path.is_file():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        data = _load_toml(config_path)

    if "zettel_dir" in data and not debug:
        if not isinstance(data["zettel_dir"], str):
            raise ValueError("zettel_dir must be a string")
        zettel_dir = _expand_home(data["zettel_dir"], home)
    if "default_prefix" in data:
        if not isinstance(data["default_prefix"], str) or not data["default_prefix"].strip():
            raise ValueError("default_prefix must be a non-empty string")
        default_prefix = data["default_prefix"].strip()
    if "editor" in data:
        if not isinstance(data["editor"], str):
            raise ValueError("editor must be a string")
        editor = data["editor"] or None

    return ZetConfig(
        zettel_dir=zettel_dir,
        default_prefix=default_prefix,
        editor=editor,
        debug=debug,
    )
