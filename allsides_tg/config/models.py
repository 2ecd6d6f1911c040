"""Pydantic models describing the allsides-tg runtime configuration."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

MAIN_PAGE_URL = "https://www.allsides.com/unbiased-balanced-news"
SITE_ORIGIN = "https://www.allsides.com"


class ExcerptPolicy(str, Enum):
    """How side-article excerpts are cut at the ``...`` truncation marker."""

    TAKE_WHILE = "take_while"
    FILTER = "filter"


class FetcherConfig(BaseModel):
    """Rendering browser settings.

    With ``host``/``port`` set the fetcher attaches to a remote browser over CDP,
    otherwise a local Chromium is launched.
    """

    host: str | None = None
    port: int | None = None
    timeout: float = 30.0
    retries: int = 1
    headless: bool = True

    @model_validator(mode="after")
    def _validate_endpoint(self) -> "FetcherConfig":
        if (self.host is None) != (self.port is None):
            raise ValueError("fetcher host and port must be configured together")
        if self.port is not None and not 0 < self.port < 65536:
            raise ValueError("fetcher port must be within 1..65535")
        if self.retries < 0:
            raise ValueError("retries must be >= 0")
        if self.timeout <= 0:
            raise ValueError("timeout must be > 0")
        return self

    @property
    def endpoint(self) -> str | None:
        if self.host is None or self.port is None:
            return None
        return f"http://{self.host}:{self.port}"


class TelegramConfig(BaseModel):
    """Bot credentials and delivery targets."""

    secret: str
    channel: str
    admin: str
    api_base: str = "https://api.telegram.org"
    timeout: float = 20.0
    disable_web_page_preview: bool = True

    @field_validator("secret", "channel", "admin")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value.strip()


class AppConfig(BaseModel):
    """Top-level configuration consumed by the orchestrator and CLI."""

    update_interval: int = Field(default=15, description="Minutes between poll cycles.")
    story_db: Path = Field(default=Path("stories.db"))
    main_page_url: str = MAIN_PAGE_URL
    site_origin: str = SITE_ORIGIN
    excerpt_policy: ExcerptPolicy = ExcerptPolicy.TAKE_WHILE
    isolate_story_errors: bool = True
    fetcher: FetcherConfig = Field(default_factory=FetcherConfig)
    telegram: TelegramConfig

    @field_validator("update_interval")
    @classmethod
    def _positive_interval(cls, value: int) -> int:
        if value < 1:
            raise ValueError("update_interval must be at least one minute")
        return value

    @field_validator("story_db", mode="before")
    @classmethod
    def _coerce_path(cls, value: Any) -> Path:
        return Path(value)

    @property
    def interval_seconds(self) -> float:
        return float(self.update_interval * 60)

    def resolved_story_db(self, base_dir: Path) -> Path:
        """Return the dedup store path, relative paths anchored at ``base_dir``."""

        if not self.story_db.is_absolute():
            return (base_dir / self.story_db).resolve()
        return self.story_db


__all__ = [
    "AppConfig",
    "ExcerptPolicy",
    "FetcherConfig",
    "MAIN_PAGE_URL",
    "SITE_ORIGIN",
    "TelegramConfig",
]
