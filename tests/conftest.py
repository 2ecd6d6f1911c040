"""Pytest configuration providing HTML fixtures and in-memory collaborators."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Any, Callable, Iterable

import pytest

# Keep log files of the test session out of the working tree
os.environ.setdefault("ASTG_HOME", tempfile.mkdtemp(prefix="allsides-tg-tests-"))

from allsides_tg.config import AppConfig, TelegramConfig  # noqa: E402
from allsides_tg.engine import DedupStore  # noqa: E402
from allsides_tg.errors import NetworkError  # noqa: E402

FIXTURES_DIR = Path(__file__).resolve().parent / "fixtures"

MAIN_PAGE_URL = "https://www.allsides.com/unbiased-balanced-news"
STORY_TITLE = "NY Gov. Cuomo Accused of Sexual Harrassment; Less Coverage from Left-Rated Outlets"
TEASER_URLS = [
    "https://www.allsides.com/story/mcconnell-recognizes-biden-president-elect",
    "https://www.allsides.com/story/russian-hackers-suspected-broad-attack-us-government-businesses",
    "https://www.allsides.com/story/ny-gov-cuomo-accused-sexual-harrassment-less-coverage-left-rated-outlets",
]


class FakeFetcher:
    """Serve canned HTML per URL and record every request."""

    def __init__(self, pages: dict[str, str], errors: dict[str, Exception] | None = None) -> None:
        self.pages = pages
        self.errors = errors or {}
        self.calls: list[str] = []
        self.closed = False

    def fetch(self, url: str, wait_selector: str | None = None) -> str:
        self.calls.append(url)
        if url in self.errors:
            raise self.errors[url]
        if url not in self.pages:
            raise NetworkError(f"no page for {url}")
        return self.pages[url]

    def close(self) -> None:
        self.closed = True


class FakeNotifier:
    """Capture published posts and admin reports."""

    def __init__(
        self,
        fail_publish: Iterable[str] = (),
        fail_admin: bool = False,
    ) -> None:
        self.published: list[tuple[str, str]] = []
        self.admin_messages: list[tuple[str, str]] = []
        self.fail_publish = set(fail_publish)
        self.fail_admin = fail_admin
        self.closed = False

    def publish(self, channel: str, body: str) -> None:
        if any(marker in body for marker in self.fail_publish):
            raise NetworkError("telegram is down")
        self.published.append((channel, body))

    def notify_admin(self, admin: str, message: str) -> None:
        if self.fail_admin:
            raise NetworkError("admin chat unreachable")
        self.admin_messages.append((admin, message))

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def main_page_html() -> str:
    return (FIXTURES_DIR / "allsides-main-page.html").read_text(encoding="utf-8")


@pytest.fixture
def story_html() -> str:
    return (FIXTURES_DIR / "allsides-story.html").read_text(encoding="utf-8")


@pytest.fixture
def site_pages(main_page_html: str, story_html: str) -> dict[str, str]:
    """Main page plus one story page per teaser, each carrying its own slug as title."""

    pages = {MAIN_PAGE_URL: main_page_html}
    for url in TEASER_URLS:
        slug = url.rsplit("/", 1)[1]
        pages[url] = story_html.replace(STORY_TITLE, f"Story {slug}")
    return pages


@pytest.fixture
def app_config(tmp_path: Path) -> Callable[..., AppConfig]:
    def _builder(**overrides: Any) -> AppConfig:
        base: dict[str, Any] = {
            "update_interval": 15,
            "story_db": tmp_path / "stories.db",
            "telegram": TelegramConfig(secret="123:abc", channel="@allsides_news", admin="@admin"),
        }
        base.update(overrides)
        return AppConfig(**base)

    return _builder


@pytest.fixture
def dedup_store(tmp_path: Path) -> Iterable[DedupStore]:
    store = DedupStore.open(tmp_path / "stories.db")
    yield store
    store.close()


@pytest.fixture
def fake_fetcher_factory() -> Callable[..., FakeFetcher]:
    return FakeFetcher


@pytest.fixture
def fake_notifier_factory() -> Callable[..., FakeNotifier]:
    return FakeNotifier
