#!/usr/bin/env python3
"""
Settings
========
Shipped defaults live in markovbot/configs/app.yaml inside the package.
Everything the bot writes or reads per deployment (.env, the corpus
database) lives under the bot's home directory instead:

    MARKOVBOT_HOME   if set
    the current working directory otherwise

so an installed copy never writes into site-packages.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

PACKAGE_ROOT = Path(__file__).resolve().parent
APP_CONFIG_PATH = PACKAGE_ROOT / "configs" / "app.yaml"

HOME_ENV_VAR = "MARKOVBOT_HOME"


def bot_home() -> Path:
    """Directory that relative data paths and the default .env resolve against."""
    override = os.environ.get(HOME_ENV_VAR, "").strip()
    if override:
        return Path(os.path.expanduser(override)).resolve()
    return Path.cwd()


@lru_cache(maxsize=1)
def load_app_config() -> dict:
    """Parsed app.yaml; an empty file counts as no settings."""
    if not APP_CONFIG_PATH.exists():
        raise FileNotFoundError(f"Missing app config: {APP_CONFIG_PATH}")
    return yaml.safe_load(APP_CONFIG_PATH.read_text()) or {}


def get_setting(path: str, default: Any = None) -> Any:
    """Look up 'section.key' in app.yaml."""
    node: Any = load_app_config()
    for key in path.split('.'):
        if not isinstance(node, dict) or key not in node:
            return default
        node = node[key]
    return node


def resolve_path(value, base: Path | None = None) -> Path:
    """Absolute path for `value`; relative ones are taken from bot_home()."""
    if value is None:
        raise ValueError("path value is required")
    path = Path(os.path.expanduser(str(value)))
    if path.is_absolute():
        return path
    return ((base or bot_home()) / path).resolve()


__all__ = [
    "bot_home",
    "load_app_config",
    "get_setting",
    "resolve_path",
    "APP_CONFIG_PATH",
    "HOME_ENV_VAR",
]
