"""
Error taxonomy for the test generation pipeline.

A failing test run is not an error: it is a normal ``failed`` job outcome and
is reported through ``RunResult`` rather than raised.
"""

from __future__ import annotations


class PilotError(Exception):
    """Base class for all pipeline errors."""


class ValidationError(PilotError):
    """Bad caller input, e.g. a missing prompt. Surfaced as HTTP 400."""


class GenerationError(PilotError):
    """The generative backend failed or returned an unusable response."""


class MergeError(PilotError):
    """A support file could not be read or written."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Could not update {path}: {reason}")


class JobNotFoundError(PilotError):
    """No job with the given id exists in the store."""

    def __init__(self, job_id: str):
        self.job_id = job_id
        super().__init__(f"Test not found: {job_id}")
