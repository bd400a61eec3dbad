"""
Jobs feature - in-memory job history and per-job progress tracking.

Public API:
    from features.jobs import JobStore, JobTracker
"""

from features.jobs.store import JobStore
from features.jobs.tracker import JobTracker, apply_event

__all__ = ["JobStore", "JobTracker", "apply_event"]
