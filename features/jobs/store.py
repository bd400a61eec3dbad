"""
In-memory job store.

All jobs live in process memory for the lifetime of the process: there is no
persistence and no eviction, so a restart clears the history. ``list`` is a
truncated newest-first view, not a retention limit.
"""

from __future__ import annotations

import logging
import threading

from models.errors import JobNotFoundError
from models.schemas import Job

log = logging.getLogger(__name__)


class JobStore:
    """Process-wide collection of Job snapshots keyed by id."""

    def __init__(self) -> None:
        self._jobs: dict[str, Job] = {}
        self._order: list[str] = []  # submission order, oldest first
        self._lock = threading.Lock()

    def add(self, job: Job) -> None:
        """Register a newly submitted job."""
        with self._lock:
            if job.id in self._jobs:
                raise ValueError(f"Duplicate job id: {job.id}")
            self._jobs[job.id] = job
            self._order.append(job.id)
        log.info("Registered job %s", job.id)

    def publish(self, job: Job) -> None:
        """Replace the stored snapshot of an existing job."""
        with self._lock:
            current = self._jobs.get(job.id)
            if current is None:
                raise JobNotFoundError(job.id)
            if current.status.is_terminal:
                raise ValueError(f"Job {job.id} is already {current.status.value}")
            self._jobs[job.id] = job

    def get(self, job_id: str) -> Job:
        with self._lock:
            job = self._jobs.get(job_id)
        if job is None:
            raise JobNotFoundError(job_id)
        return job

    def list(self, limit: int = 10) -> list[Job]:
        """Most recently submitted jobs first, at most ``limit`` of them."""
        if limit <= 0:
            return []
        with self._lock:
            ids = self._order[-limit:]
            return [self._jobs[i] for i in reversed(ids)]

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)
