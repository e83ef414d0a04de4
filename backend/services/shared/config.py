"""Configuration manager for Prompt Architect.

YAML settings with dot-notation access, plus a .env priority chain for
secrets such as the Gemini API key:
  1. User ~/.config/prompt_architect/.env  (lowest priority)
  2. Local backend/.env                     (overrides user file)
  3. Environment variables                  (highest priority)
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv

_config_instance: Optional["Config"] = None

DEFAULT_SETTINGS_PATH = Path(__file__).parent.parent.parent / "config" / "settings.yaml"


class Config:
    """Settings tree with dot-notation access and env lookup."""

    def __init__(self, config_path: str):
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        with open(path, encoding="utf-8") as f:
            self._data: dict = yaml.safe_load(f)
        if not isinstance(self._data, dict):
            raise ValueError(f"Config file must be a YAML mapping, got: {type(self._data)}")
        self._load_env()

    # ── private ──────────────────────────────────────────────────────────────

    def _load_env(self) -> None:
        """Load .env files in priority order (user → local).

        Neither file overrides variables already present in the process
        environment.
        """
        user_env = Path.home() / ".config" / "prompt_architect" / ".env"
        local_env = Path(__file__).parent.parent.parent / ".env"
        if local_env.exists():
            load_dotenv(local_env, override=False)
        if user_env.exists():
            load_dotenv(user_env, override=False)

    # ── public ───────────────────────────────────────────────────────────────

    def get(self, key: str, default: Any = None) -> Any:
        """Dot-notation access into the YAML tree.

        Example::

            config.get("gemini.text_model")          # "gemini-3-flash-preview"
            config.get("gemini.poll_interval_sec")   # 5
            config.get("missing.key", "fallback")    # "fallback"
        """
        keys = key.split(".")
        val: Any = self._data
        for k in keys:
            if isinstance(val, dict) and k in val:
                val = val[k]
            else:
                return default
        return val

    def get_path(self, key: str) -> Path:
        """Return a config value as a Path object.

        Raises KeyError if the key does not exist.
        """
        val = self.get(key)
        if val is None:
            raise KeyError(f"Config key not found: {key}")
        return Path(str(val))

    def get_env(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Return an environment variable value."""
        return os.environ.get(name, default)


# ── module-level singleton ────────────────────────────────────────────────────


def get_config(config_path: Optional[str] = None) -> Config:
    """Return the singleton Config instance.

    On first call, ``config_path`` is required.  Subsequent calls may omit it
    and will return the existing instance.

    Raises:
        RuntimeError: If called before the singleton is initialised.
    """
    global _config_instance
    if _config_instance is None:
        if config_path is None:
            raise RuntimeError(
                "Config not yet initialised; call get_config(config_path) first."
            )
        _config_instance = Config(config_path)
    return _config_instance


def reset_config() -> None:
    """Clear the singleton (mainly for testing)."""
    global _config_instance
    _config_instance = None
