"""
Data models for the test generation pipeline.

Job and Step records are immutable snapshots: the pipeline never edits a
record in place, it builds a new one with ``dataclasses.replace`` and
publishes it to the job store.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class JobStatus(str, Enum):
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self is not JobStatus.PROCESSING


class StepStatus(str, Enum):
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class GeneratedTestDetails:
    """Identity of the test derived from a prompt."""

    prompt: str
    test_name: str
    feature_file: str  # relative to the test project, e.g. features/x.feature
    files: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "prompt": self.prompt,
            "testName": self.test_name,
            "featureFile": self.feature_file,
            "files": list(self.files),
        }


@dataclass(frozen=True)
class ArtifactBundle:
    """Structured output of the generative backend."""
    feature_file: str
    step_definitions: str = ""
    page_object_methods: str = ""
    explanation: str = ""


@dataclass(frozen=True)
class RunSummary:
    passing: int = 0
    failing: int = 0

    def to_dict(self) -> dict:
        return {"passing": self.passing, "failing": self.failing}


@dataclass(frozen=True)
class RunResult:
    """Outcome of one external runner invocation."""
    success: bool
    exit_code: int | None
    stdout: str = ""
    stderr: str = ""
    summary: RunSummary = field(default_factory=RunSummary)

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "exitCode": self.exit_code,
            "output": self.stdout,
            "errorOutput": self.stderr,
            "summary": self.summary.to_dict(),
        }


@dataclass(frozen=True)
class Validation:
    passed: bool
    issues: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {"passed": self.passed, "issues": list(self.issues)}


@dataclass(frozen=True)
class Step:
    """Progress record for one pipeline stage."""
    name: str
    status: StepStatus = StepStatus.RUNNING
    timestamp: str = ""
    completed_at: str | None = None
    duration_sec: float | None = None
    details: dict[str, Any] = field(default_factory=dict)  # files, output, error, ...

    def to_dict(self) -> dict:
        data: dict[str, Any] = {
            "step": self.name,
            "status": self.status.value,
            "timestamp": self.timestamp,
        }
        if self.completed_at is not None:
            data["completedAt"] = self.completed_at
            data["durationSec"] = self.duration_sec
        for key, value in self.details.items():
            data[key] = list(value) if isinstance(value, tuple) else value
        return data


@dataclass(frozen=True)
class Job:
    """One request to synthesize and run a test from a prompt."""
    id: str
    prompt: str
    timestamp: str
    status: JobStatus = JobStatus.PROCESSING
    steps: tuple[Step, ...] = ()
    test_details: GeneratedTestDetails | None = None
    test_result: RunResult | None = None
    validation: Validation | None = None
    explanation: str | None = None
    error: str | None = None
    completed_at: str | None = None
    duration_sec: float | None = None

    @property
    def current_step(self) -> Step | None:
        return self.steps[-1] if self.steps else None

    def to_dict(self) -> dict:
        data: dict[str, Any] = {
            "id": self.id,
            "prompt": self.prompt,
            "status": self.status.value,
            "timestamp": self.timestamp,
            "steps": [s.to_dict() for s in self.steps],
        }
        if self.test_details is not None:
            data["testDetails"] = self.test_details.to_dict()
        if self.test_result is not None:
            data["testResult"] = self.test_result.to_dict()
        if self.validation is not None:
            data["validation"] = self.validation.to_dict()
        if self.explanation is not None:
            data["explanation"] = self.explanation
        if self.error is not None:
            data["error"] = self.error
        if self.completed_at is not None:
            data["completedAt"] = self.completed_at
            data["durationSec"] = self.duration_sec
        return data
