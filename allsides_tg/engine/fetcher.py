"""Rendered-page fetching through a Playwright-driven browser."""

from __future__ import annotations

from threading import Lock
from typing import Protocol

import structlog

from ..config import FetcherConfig
from ..errors import NetworkError


class PageFetcher(Protocol):
    """Anything able to turn a URL into fully rendered HTML."""

    def fetch(self, url: str, wait_selector: str | None = None) -> str: ...


class Fetcher:
    """Fetch pages with a lazily started browser session and bounded retries."""

    def __init__(
        self,
        config: FetcherConfig,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.config = config
        self.logger = logger or structlog.get_logger("allsides_tg.fetcher")
        self._session: _PlaywrightSession | None = None
        self._lock = Lock()

    def fetch(self, url: str, wait_selector: str | None = None) -> str:
        attempts = self.config.retries + 1
        last_error: Exception | None = None
        for attempt in range(1, attempts + 1):
            try:
                html = self._ensure_session().fetch(url, self.config.timeout, wait_selector)
                self.logger.debug("page_fetched", url=url, attempt=attempt, size=len(html))
                return html
            except Exception as exc:  # noqa: BLE001
                self.logger.warning("fetch_error", url=url, attempt=attempt, error=str(exc))
                last_error = exc
                # A broken browser connection is not reusable
                self._reset_session()
        raise NetworkError(f"fetch failed after {attempts} attempts: {url}: {last_error}") from last_error

    def close(self) -> None:
        self._reset_session()

    # ------------------------------------------------------------------
    def _ensure_session(self) -> "_PlaywrightSession":
        with self._lock:
            if self._session is None:
                self._session = _PlaywrightSession(self.config)
            return self._session

    def _reset_session(self) -> None:
        with self._lock:
            session, self._session = self._session, None
        if session is not None:
            try:
                session.close()
            except Exception as exc:  # noqa: BLE001
                self.logger.debug("browser_close_failed", error=str(exc))


class _PlaywrightSession:
    def __init__(self, config: FetcherConfig) -> None:
        self._config = config
        self._lock = Lock()
        self._playwright = None
        self._browser = None
        self._context = None
        self._page = None

    def _ensure_started(self) -> None:
        if self._playwright is not None:
            return
        from playwright.sync_api import sync_playwright

        self._playwright = sync_playwright().start()
        endpoint = self._config.endpoint
        if endpoint:
            self._browser = self._playwright.chromium.connect_over_cdp(
                endpoint, timeout=self._config.timeout * 1000
            )
        else:
            self._browser = self._playwright.chromium.launch(headless=self._config.headless)
        self._context = self._browser.new_context(locale="en-US")
        self._page = self._context.new_page()

    def fetch(self, url: str, timeout: float, wait_selector: str | None = None) -> str:
        from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

        timeout_ms = int(timeout * 1000)
        with self._lock:
            self._ensure_started()
            try:
                response = self._page.goto(url, wait_until="domcontentloaded", timeout=timeout_ms)
            except PlaywrightTimeoutError as exc:
                raise RuntimeError(f"Playwright timeout: {exc}") from exc
            if response is not None and response.status >= 400:
                raise RuntimeError(f"Unexpected status {response.status}")
            # Story clusters are rendered client side
            if wait_selector:
                try:
                    self._page.wait_for_selector(wait_selector, timeout=timeout_ms)
                except PlaywrightTimeoutError as exc:
                    raise RuntimeError(
                        f"Playwright selector wait timeout for '{wait_selector}': {exc}"
                    ) from exc
            return self._page.content()

    def close(self) -> None:
        with self._lock:
            if self._page is not None:
                self._page.close()
                self._page = None
            if self._context is not None:
                self._context.close()
                self._context = None
            if self._browser is not None:
                self._browser.close()
                self._browser = None
            if self._playwright is not None:
                self._playwright.stop()
                self._playwright = None


__all__ = ["Fetcher", "PageFetcher"]
