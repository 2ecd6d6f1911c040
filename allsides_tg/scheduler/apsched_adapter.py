"""APScheduler wrapper driving the fixed-delay poll loop."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.date import DateTrigger

from ..logging_conf import configure_logging

POLL_JOB_ID = "poll::cycle"


class APSchedulerAdapter:
    """Schedule one poll cycle at a time.

    Each cycle is a one-shot job; the next one is queued only after the
    previous cycle finished, which keeps the delay between cycles fixed.
    """

    def __init__(self) -> None:
        self.scheduler = BackgroundScheduler(timezone=timezone.utc)
        self.logger = configure_logging().bind(component="scheduler")
        self.started = False

    def start(self) -> None:
        if not self.started:
            self.scheduler.start()
            self.started = True
            self.logger.info("apscheduler_started")

    def shutdown(self, wait: bool = True) -> None:
        """Stop the scheduler, by default blocking until a running cycle returns."""

        if self.started:
            self.scheduler.shutdown(wait=wait)
            self.started = False
            self.logger.info("apscheduler_stopped")

    def schedule_cycle(self, callback: Callable[[], None], delay_seconds: float) -> None:
        run_date = datetime.now(timezone.utc) + timedelta(seconds=max(delay_seconds, 0.0))
        self.scheduler.add_job(
            callback,
            trigger=DateTrigger(run_date=run_date),
            id=POLL_JOB_ID,
            replace_existing=True,
            misfire_grace_time=None,
        )
        self.logger.info("cycle_scheduled", run_date=run_date.isoformat())

    def list_jobs(self) -> list[dict]:
        jobs = []
        for job in self.scheduler.get_jobs():
            jobs.append(
                {
                    "id": job.id,
                    "next_run_time": job.next_run_time,
                    "trigger": str(job.trigger),
                }
            )
        return jobs


__all__ = ["APSchedulerAdapter", "POLL_JOB_ID"]
