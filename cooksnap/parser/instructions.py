"""Splitting of instruction blobs that pack numbered steps into one string."""

import re

_FIRST_STEP_RE = re.compile(r"^\s*1\.\s")
_STEP_MARKER_RE = re.compile(
    r"^\s*(?:step\s*\d+\s*[:.)\-–]?|\d+\s*[.)](?!\d))\s*", re.IGNORECASE
)


def split_numbered_steps(text: str) -> list[str]:
    """
    Split "1. Do X.2. Do Y.3. Do Z." into one string per step.

    Markers must be sequential and directly follow sentence-ending punctuation,
    which stays with the preceding step. Text that does not open with "1. " is
    returned as a single element, as is anything yielding fewer than two steps.
    """
    if not _FIRST_STEP_RE.match(text):
        return [text]

    steps = []
    start = 0
    expected = 2
    while True:
        marker = re.compile(rf"(?<=[.!?])\s*{expected}\.\s")
        match = marker.search(text, start + 1)
        if not match:
            break
        steps.append(text[start : match.start()].strip())
        start = match.start()
        expected += 1
    steps.append(text[start:].strip())

    steps = [step for step in steps if step]
    if len(steps) < 2:
        return [text]
    return steps


def strip_step_marker(line: str) -> str:
    """Remove a leading "3.", "3)" or "Step 3:" marker."""
    return _STEP_MARKER_RE.sub("", line, count=1).strip()
