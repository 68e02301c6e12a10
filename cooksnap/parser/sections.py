"""Ingredient sub-heading detection ("For the sauce:") and re-threading."""

import logging
import re

from cooksnap.parser.vocabulary import UNIT_PATTERN

logger = logging.getLogger(__name__)

SECTION_MARKER = "## "

_MAX_HEADER_LENGTH = 80
_MAX_FOR_PREFIX_LENGTH = 50
_QUANTITY_UNIT_RE = re.compile(
    rf"\d[\d\s/.½⅓⅔¼¾⅛⅜⅝⅞-]*\s*(?:{UNIT_PATTERN})\b", re.IGNORECASE
)
_FOR_PREFIX_RE = re.compile(r"^for\s+(?:the\s+)?\S", re.IGNORECASE)


def is_section_header(line: str) -> bool:
    return line.startswith(SECTION_MARKER)


def as_section_header(text: str) -> str:
    return SECTION_MARKER + text.strip()


def _looks_like_header(line: str) -> str | None:
    """Return the header text for a line that reads like a sub-heading."""
    text = line.strip()
    if not text or len(text) > _MAX_HEADER_LENGTH:
        return None
    if text[0].isdigit() or _QUANTITY_UNIT_RE.search(text):
        return None
    if text.endswith(":") and len(text) > 1:
        return text
    if _FOR_PREFIX_RE.match(text) and len(text) <= _MAX_FOR_PREFIX_LENGTH:
        return f"{text}:"
    return None


def mark_section_headers(ingredients: list[str]) -> list[str]:
    """Promote sub-heading lines in a flat ingredient list to header entries."""
    marked = []
    for line in ingredients:
        if is_section_header(line):
            marked.append(line)
            continue
        header = _looks_like_header(line)
        marked.append(as_section_header(header) if header else line)
    return marked


def merge_group_headers(
    ingredients: list[str], groups: list[tuple[str, int]]
) -> list[str]:
    """
    Interleave plugin group headers into a flat ingredient list by count.

    Each (header, count) pair claims the next ``count`` flat entries in order.
    An unnamed group claims its entries without emitting a header. Fewer than
    two named groups is not treated as grouping, and a list that already
    carries headers is left alone.
    """
    valid = [(header.strip(), count) for header, count in groups if count > 0]
    named = [header for header, _ in valid if header]
    if len(named) < 2 or any(is_section_header(line) for line in ingredients):
        return ingredients

    merged: list[str] = []
    position = 0
    for header, count in valid:
        chunk = ingredients[position : position + count]
        if not chunk:
            break
        if header:
            merged.append(as_section_header(header))
        merged.extend(chunk)
        position += len(chunk)

    merged.extend(ingredients[position:])
    logger.debug("Merged %d group headers into %d ingredients", len(named), len(ingredients))
    return merged
