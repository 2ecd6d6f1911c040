"""Configuration loading helpers for allsides-tg."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml
from dotenv import load_dotenv

from .models import AppConfig

CONFIG_EXTENSIONS = (".yaml", ".yml", ".json")
CONFIG_FILENAME = "config.yaml"
ENV_PREFIX = "ASTG_"

# Environment variable suffix -> (section, key); section None means top level.
ENV_OVERRIDES: dict[str, tuple[str | None, str]] = {
    "UPDATE_INTERVAL": (None, "update_interval"),
    "STORY_DB": (None, "story_db"),
    "EXCERPT_POLICY": (None, "excerpt_policy"),
    "ISOLATE_STORY_ERRORS": (None, "isolate_story_errors"),
    "WEBDRIVER_HOST": ("fetcher", "host"),
    "WEBDRIVER_PORT": ("fetcher", "port"),
    "TELEGRAM_SECRET": ("telegram", "secret"),
    "TELEGRAM_CHANNEL": ("telegram", "channel"),
    "TELEGRAM_ADMIN": ("telegram", "admin"),
}


def _read_file(path: Path) -> dict:
    text = path.read_text(encoding="utf-8")
    if path.suffix in (".yaml", ".yml"):
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file must contain a mapping: {path}")
    return data


def apply_env_overrides(payload: dict, environ: Mapping[str, str]) -> dict:
    """Overlay ``ASTG_*`` variables onto a raw configuration mapping."""

    merged: dict[str, Any] = {
        key: dict(value) if isinstance(value, dict) else value for key, value in payload.items()
    }
    for suffix, (section, key) in ENV_OVERRIDES.items():
        value = environ.get(f"{ENV_PREFIX}{suffix}")
        if value is None or value == "":
            continue
        if section is None:
            merged[key] = value
        else:
            merged.setdefault(section, {})[key] = value
    return merged


@dataclass(slots=True)
class ConfigLocator:
    """Resolve important paths from the project home."""

    project_root: Path | None = None
    data_dir: Path | None = None
    logs_dir: Path | None = None

    def __post_init__(self) -> None:
        env_root = os.environ.get("ASTG_HOME")
        if env_root:
            root = Path(env_root).expanduser().resolve()
        else:
            root = (self.project_root or Path(__file__).resolve().parents[2]).resolve()
        self.project_root = root
        self.data_dir = (root / "data").resolve()
        self.logs_dir = (root / "logs").resolve()
        self.ensure_directories()

    def ensure_directories(self) -> None:
        for directory in (self.data_dir, self.logs_dir):
            directory.mkdir(parents=True, exist_ok=True)

    def config_path(self) -> Path:
        return self.data_dir / CONFIG_FILENAME

    def dotenv_path(self) -> Path:
        return self.project_root / ".env"


class ConfigRepository:
    """Load, merge and validate the application configuration."""

    def __init__(self, locator: ConfigLocator | None = None) -> None:
        self.locator = locator or ConfigLocator()
        self._cache: AppConfig | None = None

    def load(self, path: Path | None = None) -> AppConfig:
        if self._cache is not None and path is None:
            return self._cache
        load_dotenv(self.locator.dotenv_path(), override=False)
        config_path = path or self.locator.config_path()
        if path is not None and not path.exists():
            raise FileNotFoundError(f"Configuration not found: {path}")
        if config_path.suffix not in CONFIG_EXTENSIONS:
            raise ValueError(f"Unsupported configuration format: {config_path.suffix}")
        payload = _read_file(config_path) if config_path.exists() else {}
        config = AppConfig.model_validate(apply_env_overrides(payload, os.environ))
        if path is None:
            self._cache = config
        return config

    def story_db_path(self, config: AppConfig) -> Path:
        return config.resolved_story_db(self.locator.data_dir)


__all__ = [
    "CONFIG_EXTENSIONS",
    "ConfigLocator",
    "ConfigRepository",
    "ENV_OVERRIDES",
    "apply_env_overrides",
]
