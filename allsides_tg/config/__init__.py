"""Configuration package exports."""

from .loader import ConfigLocator, ConfigRepository
from .models import (
    MAIN_PAGE_URL,
    SITE_ORIGIN,
    AppConfig,
    ExcerptPolicy,
    FetcherConfig,
    TelegramConfig,
)

__all__ = [
    "AppConfig",
    "ConfigLocator",
    "ConfigRepository",
    "ExcerptPolicy",
    "FetcherConfig",
    "MAIN_PAGE_URL",
    "SITE_ORIGIN",
    "TelegramConfig",
]
