"""
Activity: Merge - writes the generated feature file and splices new step
definitions and page-object methods into the hand-maintained support files.

Fragments are never deduplicated here; the generator is told to return only
additions.
"""

from __future__ import annotations

import logging
from pathlib import Path

from models.errors import MergeError

log = logging.getLogger(__name__)


def read_support_file(path: Path | str) -> str:
    """Read a support file, raising ``MergeError`` if it cannot be read."""
    try:
        return Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise MergeError(str(path), str(e)) from e


def _write(path: Path, content: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise MergeError(str(path), str(e)) from e


def write_feature_file(path: Path | str, content: str) -> bool:
    """Create or overwrite the feature file."""
    path = Path(path)
    _write(path, content)
    log.info("Wrote feature file: %s (%d chars)", path, len(content))
    return True


def append_step_definitions(path: Path | str, fragment: str) -> bool:
    """Append new step definitions after a blank line. Returns True if the file changed."""
    if not fragment or not fragment.strip():
        return False
    path = Path(path)
    original = read_support_file(path)
    _write(path, f"{original}\n\n{fragment}")
    log.info("Appended step definitions to %s (%d chars)", path, len(fragment))
    return True


def insert_page_object_methods(path: Path | str, fragment: str) -> bool:
    """
    Insert new methods just before the last closing brace of the page object,
    i.e. at the end of the class body. Whatever follows that brace (such as
    ``export default new SettingsPage()``) is kept as is.

    Returns True if the file changed.
    """
    if not fragment or not fragment.strip():
        return False
    path = Path(path)
    original = read_support_file(path)

    anchor = original.rfind("}")
    if anchor == -1:
        log.warning("No closing brace in %s, appending methods at the end", path)
        updated = f"{original}\n{fragment}\n"
    else:
        updated = f"{original[:anchor]}\n{fragment}\n{original[anchor:]}"

    _write(path, updated)
    log.info("Inserted page object methods into %s (%d chars)", path, len(fragment))
    return True
