"""
Activity: Parse Prompt - derives a test name and feature path from the
user's free-text description.

Naming is a pure function of the prompt and a clock value. The pipeline
accepts any callable with the ``derive_test_name`` signature, so the keyword
table can be swapped for a smarter classifier.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import config
from models.schemas import GeneratedTestDetails

# Checked in order, first keyword found in the lower-cased prompt wins
KEYWORD_TEST_NAMES: list[tuple[str, str]] = [
    ("font", "fonts-ai-generated"),
    ("dictionary", "dictionary-ai-generated"),
    ("about", "settings-ai-generated"),
]


def derive_test_name(prompt: str, now: datetime) -> str:
    """Map a prompt to a test name, falling back to ``test-<epoch ms>``."""
    lower = prompt.lower()
    for keyword, name in KEYWORD_TEST_NAMES:
        if keyword in lower:
            return name
    return f"test-{int(now.timestamp() * 1000)}"


def _relative(path: Path) -> str:
    try:
        return path.relative_to(config.TEST_PROJECT_DIR).as_posix()
    except ValueError:
        return str(path)


def parse_prompt(prompt: str, namer=derive_test_name, now: datetime | None = None) -> GeneratedTestDetails:
    """
    Build the test details for a prompt.

    ``files`` lists every file the pipeline may touch: the new feature file,
    then the shared step definitions and page object.
    """
    now = now or datetime.now(timezone.utc)
    test_name = namer(prompt, now)
    feature_file = _relative(config.FEATURES_DIR / f"{test_name}.feature")
    return GeneratedTestDetails(
        prompt=prompt,
        test_name=test_name,
        feature_file=feature_file,
        files=(
            feature_file,
            _relative(config.STEP_DEFINITIONS_FILE),
            _relative(config.PAGE_OBJECT_FILE),
        ),
    )
