"""
Activity: Validate - turns a run's raw output into a short list of likely
causes when the run failed.
"""

from __future__ import annotations

from models.schemas import RunResult, Validation

# (stream, substring, issue)
FAILURE_RULES: list[tuple[str, str, str]] = [
    ("stderr", "ECONNREFUSED", "Appium server not running"),
    ("stdout", "no such element", "Element not found - selector may need adjustment"),
]


def validate_results(result: RunResult) -> Validation:
    issues: list[str] = []
    if not result.success:
        issues.append("Test execution failed")
        for stream, needle, issue in FAILURE_RULES:
            if needle in getattr(result, stream):
                issues.append(issue)
    return Validation(passed=result.success, issues=tuple(issues))
