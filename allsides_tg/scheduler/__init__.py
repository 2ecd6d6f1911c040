"""Scheduling of poll cycles."""

from .apsched_adapter import APSchedulerAdapter, POLL_JOB_ID

__all__ = ["APSchedulerAdapter", "POLL_JOB_ID"]
