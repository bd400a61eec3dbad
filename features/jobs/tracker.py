"""
Job Tracker - records a job's progress through the pipeline.

Each pipeline stage produces an immutable event. ``apply_event`` folds an
event into a new Job snapshot and the tracker publishes that snapshot to the
store, so readers only ever see whole records.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Union

from features.jobs.store import JobStore
from models.schemas import Job, JobStatus, Step, StepStatus

log = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _elapsed(started_iso: str, finished_iso: str) -> float | None:
    try:
        start = datetime.fromisoformat(started_iso)
        end = datetime.fromisoformat(finished_iso)
    except ValueError:
        return None
    return round((end - start).total_seconds(), 2)


@dataclass(frozen=True)
class StepStarted:
    name: str
    at: str = field(default_factory=_now)


@dataclass(frozen=True)
class StepFinished:
    status: StepStatus
    details: dict[str, Any] = field(default_factory=dict)
    at: str = field(default_factory=_now)


@dataclass(frozen=True)
class JobUpdated:
    """Set result fields on the job (test_details, test_result, ...)."""
    changes: dict[str, Any]


@dataclass(frozen=True)
class JobFinished:
    status: JobStatus
    error: str | None = None
    at: str = field(default_factory=_now)


JobEvent = Union[StepStarted, StepFinished, JobUpdated, JobFinished]


def apply_event(job: Job, event: JobEvent) -> Job:
    """Return the snapshot that results from applying ``event`` to ``job``."""
    if job.status.is_terminal:
        raise ValueError(f"Job {job.id} is already {job.status.value}")

    if isinstance(event, StepStarted):
        current = job.current_step
        if current is not None and current.status is StepStatus.RUNNING:
            raise ValueError(f"Step '{current.name}' is still running")
        step = Step(name=event.name, status=StepStatus.RUNNING, timestamp=event.at)
        return replace(job, steps=job.steps + (step,))

    if isinstance(event, StepFinished):
        current = job.current_step
        if current is None or current.status is not StepStatus.RUNNING:
            raise ValueError("No running step to finish")
        finished = replace(
            current,
            status=event.status,
            completed_at=event.at,
            duration_sec=_elapsed(current.timestamp, event.at),
            details={**current.details, **event.details},
        )
        return replace(job, steps=job.steps[:-1] + (finished,))

    if isinstance(event, JobUpdated):
        return replace(job, **event.changes)

    if isinstance(event, JobFinished):
        if not event.status.is_terminal:
            raise ValueError("A job can only finish with a terminal status")
        return replace(
            job,
            status=event.status,
            error=event.error,
            completed_at=event.at,
            duration_sec=_elapsed(job.timestamp, event.at),
        )

    raise TypeError(f"Unknown job event: {event!r}")


class JobTracker:
    """Folds pipeline events for one job and publishes each snapshot.

    Only the pipeline task that owns the job uses its tracker.
    """

    def __init__(self, store: JobStore, job: Job):
        self.store = store
        self.job = job
        self._started: float | None = None

    def emit(self, event: JobEvent) -> Job:
        self.job = apply_event(self.job, event)
        self.store.publish(self.job)
        return self.job

    def start(self, name: str) -> None:
        """Append a running step."""
        self.emit(StepStarted(name))
        self._started = time.monotonic()
        log.info("[STEP] Started: %s - %s", self.job.id, name)

    def complete(self, **details: Any) -> None:
        """Mark the running step completed, attaching any diagnostics."""
        self._finish_step(StepStatus.COMPLETED, details)

    def fail(self, **details: Any) -> None:
        """Mark the running step failed, attaching any diagnostics."""
        self._finish_step(StepStatus.FAILED, details)

    def fail_running(self, error: str) -> None:
        """Mark the running step failed if there is one; used on unexpected faults."""
        current = self.job.current_step
        if current is not None and current.status is StepStatus.RUNNING:
            self._finish_step(StepStatus.FAILED, {"error": error})

    def update(self, **changes: Any) -> None:
        self.emit(JobUpdated(changes))

    def finish(self, status: JobStatus, error: str | None = None) -> None:
        self.emit(JobFinished(status, error=error))
        if status is JobStatus.ERROR:
            log.error("[JOB] %s finished with error: %s", self.job.id, error)
        else:
            log.info(
                "[JOB] %s finished: %s (%.2fs)",
                self.job.id, status.value, self.job.duration_sec or 0,
            )

    def _finish_step(self, status: StepStatus, details: dict[str, Any]) -> None:
        name = self.job.current_step.name if self.job.current_step else "?"
        self.emit(StepFinished(status, details=details))
        elapsed = time.monotonic() - self._started if self._started else 0.0
        self._started = None
        if status is StepStatus.FAILED:
            log.warning("[STEP] Failed: %s - %s (%.2fs)", self.job.id, name, elapsed)
        else:
            log.info("[STEP] Completed: %s - %s (%.2fs)", self.job.id, name, elapsed)
