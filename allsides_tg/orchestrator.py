"""Poll-cycle orchestrator wiring fetching, parsing, formatting, publishing and dedup."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from threading import Event
from typing import Callable, Protocol

import structlog

from .config import AppConfig
from .engine import DedupStore, Formatter, Notifier, PageFetcher, Parser, Teaser
from .engine.parser import STORY_BLOCK, STORY_CONTENT
from .errors import AllSidesError, DataFormatError, DurabilityError, StructuralParseError
from .logging_conf import configure_logging


class CycleState(str, Enum):
    """Where the orchestrator currently is within a poll cycle."""

    IDLE = "idle"
    FETCHING_MAIN = "fetching_main"
    EXTRACTING_MAIN = "extracting_main"
    CHECK_DEDUP = "check_dedup"
    FETCHING_DETAIL = "fetching_detail"
    EXTRACTING_DETAIL = "extracting_detail"
    FORMATTING = "formatting"
    PUBLISHING = "publishing"
    RECORDING = "recording"
    SLEEPING = "sleeping"


class CycleScheduler(Protocol):
    def start(self) -> None: ...

    def shutdown(self) -> None: ...

    def schedule_cycle(self, callback: Callable[[], None], delay_seconds: float) -> None: ...


@dataclass(slots=True)
class ProcessingResult:
    status: str
    url: str
    reason: str | None = None
    abort_cycle: bool = False


@dataclass(slots=True)
class CycleSummary:
    published: int = 0
    skipped: int = 0
    failed: int = 0
    aborted: bool = False
    interrupted: bool = False
    error: str | None = None

    def record(self, result: ProcessingResult) -> None:
        if result.status == "published":
            self.published += 1
        elif result.status == "skipped":
            self.skipped += 1
        else:
            self.failed += 1

    def as_dict(self) -> dict[str, object]:
        return {
            "published": self.published,
            "skipped": self.skipped,
            "failed": self.failed,
            "aborted": self.aborted,
            "interrupted": self.interrupted,
            "error": self.error,
        }


class Orchestrator:
    """Central coordinator of the fetch → parse → dedup → publish → record cycle."""

    def __init__(
        self,
        config: AppConfig,
        fetcher: PageFetcher,
        notifier: Notifier,
        store: DedupStore,
        parser: Parser | None = None,
        formatter: Formatter | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.config = config
        self.fetcher = fetcher
        self.notifier = notifier
        self.store = store
        self.parser = parser or Parser(site_origin=config.site_origin)
        self.formatter = formatter or Formatter(excerpt_policy=config.excerpt_policy)
        self.logger = logger or configure_logging().bind(component="orchestrator")
        self.state = CycleState.IDLE

    # ------------------------------------------------------------------
    def run_forever(self, scheduler: CycleScheduler, stop_event: Event) -> None:
        """Run cycles with a fixed delay between them until ``stop_event`` is set."""

        def _cycle() -> None:
            if stop_event.is_set():
                return
            try:
                self.run_cycle(stop_event)
            finally:
                if not stop_event.is_set():
                    self._enter(CycleState.SLEEPING, delay_seconds=self.config.interval_seconds)
                    scheduler.schedule_cycle(_cycle, self.config.interval_seconds)

        scheduler.start()
        scheduler.schedule_cycle(_cycle, 0)
        try:
            stop_event.wait()
        finally:
            # Blocks until an in-flight cycle reaches a teaser boundary
            scheduler.shutdown()
            self._enter(CycleState.IDLE)
            self.logger.info("poll_loop_stopped")

    def run_cycle(self, stop_event: Event | None = None) -> CycleSummary:
        """Run one poll cycle, returning early between teasers once ``stop_event`` is set."""

        summary = CycleSummary()
        self.logger.info("cycle_started", main_page=self.config.main_page_url)
        try:
            self._enter(CycleState.FETCHING_MAIN)
            html = self.fetcher.fetch(self.config.main_page_url, wait_selector=STORY_BLOCK)
            self._enter(CycleState.EXTRACTING_MAIN)
            main_page = self.parser.parse_main_page(html)
        except Exception as exc:  # noqa: BLE001
            summary.aborted = True
            summary.error = str(exc)
            self.report_error(exc, stage=self.state.value, url=self.config.main_page_url)
            self._enter(CycleState.IDLE)
            return summary

        self.logger.info("main_page_parsed", teasers=len(main_page.teasers))
        for teaser in main_page.teasers:
            if stop_event is not None and stop_event.is_set():
                summary.interrupted = True
                self.logger.info("cycle_interrupted", next_url=teaser.url)
                break
            result = self.process_teaser(teaser)
            summary.record(result)
            if result.abort_cycle:
                summary.aborted = True
                summary.error = result.reason
                self.logger.warning("cycle_aborted", url=teaser.url, reason=result.reason)
                break

        self._enter(CycleState.IDLE)
        self.logger.info("cycle_finished", **summary.as_dict())
        return summary

    def process_teaser(self, teaser: Teaser) -> ProcessingResult:
        url = teaser.url
        try:
            self._enter(CycleState.CHECK_DEDUP, url=url)
            if self.store.is_published(url):
                self.logger.debug("teaser_skipped", url=url)
                return ProcessingResult(status="skipped", url=url, reason="published")

            self._enter(CycleState.FETCHING_DETAIL, url=url)
            html = self.fetcher.fetch(url, wait_selector=STORY_CONTENT)
            self._enter(CycleState.EXTRACTING_DETAIL, url=url)
            story = self.parser.parse_story(html)
            self._enter(CycleState.FORMATTING, url=url)
            body = self.formatter.format_story(story, url)
            self._enter(CycleState.PUBLISHING, url=url)
            self.notifier.publish(self.config.telegram.channel, body)
        except (StructuralParseError, DataFormatError) as exc:
            self.report_error(exc, stage=self.state.value, url=url)
            return ProcessingResult(
                status="failed",
                url=url,
                reason=str(exc),
                abort_cycle=not self.config.isolate_story_errors,
            )
        except Exception as exc:  # noqa: BLE001
            self.report_error(exc, stage=self.state.value, url=url)
            return ProcessingResult(status="failed", url=url, reason=str(exc))

        self.logger.info("story_published", url=url, title=teaser.title)
        self._enter(CycleState.RECORDING, url=url)
        try:
            newly_recorded = self.store.mark_published(url)
        except DurabilityError as exc:
            self.logger.critical(
                "dedup_mark_failed",
                url=url,
                error=str(exc),
                consequence="story was published but not recorded and may be posted again",
            )
            self._notify_admin(f"Story published but NOT recorded, expect a duplicate: {url}\n{exc}")
            return ProcessingResult(status="failed", url=url, reason=str(exc))
        if not newly_recorded:
            self.logger.warning("story_already_recorded", url=url)
        return ProcessingResult(status="published", url=url)

    def preview(self, url: str) -> str:
        """Fetch, parse and format a story without publishing or recording it."""

        html = self.fetcher.fetch(url, wait_selector=STORY_CONTENT)
        story = self.parser.parse_story(html)
        return self.formatter.format_story(story, url)

    # ------------------------------------------------------------------
    def report_error(self, error: Exception, *, stage: str, url: str) -> None:
        kind = error.kind.value if isinstance(error, AllSidesError) else "unexpected"
        self.logger.error("stage_failed", stage=stage, url=url, kind=kind, error=str(error))
        self._notify_admin(f"{stage} failed for {url}: {error}")

    def _notify_admin(self, message: str) -> None:
        try:
            self.notifier.notify_admin(self.config.telegram.admin, message)
        except Exception as exc:  # noqa: BLE001
            self.logger.error("admin_notify_failed", error=str(exc))

    def _enter(self, state: CycleState, **context: object) -> None:
        self.state = state
        self.logger.debug("state_changed", state=state.value, **context)


__all__ = ["CycleState", "CycleSummary", "Orchestrator", "ProcessingResult"]
