"""Normalizers for loosely typed recipe metadata."""

import logging
import math
import re

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

_ISO_DURATION_RE = re.compile(
    r"^P(?:(?P<days>\d+(?:\.\d+)?)D)?"
    r"(?:T(?:(?P<hours>\d+(?:\.\d+)?)H)?(?:(?P<minutes>\d+(?:\.\d+)?)M)?"
    r"(?:(?P<seconds>\d+(?:\.\d+)?)S)?)?$",
    re.IGNORECASE,
)
_CLOCK_RE = re.compile(r"^(\d+):(\d{1,2})$")
_HOURS_RE = re.compile(r"(?<![\d.])(\d+(?:\.\d+)?)\s*(?:hours?|hrs?|h)\b", re.IGNORECASE)
_MINUTES_RE = re.compile(r"(?<![\d.])(\d+(?:\.\d+)?)\s*(?:minutes?|mins?|m)\b", re.IGNORECASE)
_PLAIN_NUMBER_RE = re.compile(r"^\d+$")
_DIGITS_RE = re.compile(r"\d+")


def clean_text(text: str | None) -> str:
    """Collapse runs of whitespace into single spaces."""
    return re.sub(r"\s+", " ", text or "").strip()


def strip_tags(text: str) -> str:
    """Remove markup embedded in a text value (common in JSON-LD strings)."""
    if "<" not in text:
        return clean_text(text)
    return clean_text(BeautifulSoup(text, "html.parser").get_text(" "))


def format_duration(total_minutes: int) -> str | None:
    """Render a minute count as PT#H#M; zero yields None, never "PT"."""
    if total_minutes <= 0:
        return None
    hours, minutes = divmod(total_minutes, 60)
    out = "PT"
    if hours:
        out += f"{hours}H"
    if minutes:
        out += f"{minutes}M"
    return out


def _duration_from_minutes(total: float) -> str | None:
    # NaN and infinity get through json.loads
    if isinstance(total, float) and not math.isfinite(total):
        return None
    return format_duration(round(total))


def normalize_duration(value) -> str | None:
    """
    Convert a duration in any common shape to canonical ISO form.

    Accepts ISO 8601 ("PT1H30M", "P0DT45M", "PT90M"), clock form ("1:30"),
    prose ("1 hr 30 mins", "1h 30m"), plain numbers (minutes), and ints.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return _duration_from_minutes(value)
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None

    iso = _ISO_DURATION_RE.match(text)
    if iso:
        days = float(iso.group("days") or 0)
        hours = float(iso.group("hours") or 0)
        minutes = float(iso.group("minutes") or 0)
        seconds = float(iso.group("seconds") or 0)
        total = days * 24 * 60 + hours * 60 + minutes + seconds / 60
        return _duration_from_minutes(total)

    clock = _CLOCK_RE.match(text)
    if clock:
        return format_duration(int(clock.group(1)) * 60 + int(clock.group(2)))

    if _PLAIN_NUMBER_RE.match(text):
        return format_duration(int(text))

    hours_match = _HOURS_RE.search(text)
    minutes_match = _MINUTES_RE.search(text)
    if not hours_match and not minutes_match:
        return None
    total = 0.0
    if hours_match:
        total += float(hours_match.group(1)) * 60
    if minutes_match:
        total += float(minutes_match.group(1))
    return _duration_from_minutes(total)


def normalize_servings(value) -> str | None:
    """Reduce a yield value to the digits of its first number."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if (isinstance(value, float) and not math.isfinite(value)) or value <= 0:
            return None
        return str(int(value))
    if isinstance(value, list):
        for item in value:
            result = normalize_servings(item)
            if result:
                return result
        return None
    if not isinstance(value, str):
        return None
    match = _DIGITS_RE.search(value)
    if not match:
        return None
    return match.group().lstrip("0") or None


def normalize_author(value, graph: list | None = None) -> str | None:
    """
    Resolve an author value to a display name.

    JSON-LD authors may be plain strings, Person nodes, bare {"@id": ...}
    references into the surrounding @graph, or lists of any of those.
    """
    if value is None:
        return None
    if isinstance(value, str):
        return clean_text(value) or None
    if isinstance(value, list):
        names = []
        for item in value:
            name = normalize_author(item, graph)
            if name and name not in names:
                names.append(name)
        return ", ".join(names) or None
    if not isinstance(value, dict):
        return None

    name = value.get("name")
    if isinstance(name, str) and name.strip():
        return clean_text(name)

    ref = value.get("@id")
    if ref and graph:
        for node in graph:
            if isinstance(node, dict) and node.get("@id") == ref and node is not value:
                return normalize_author({k: v for k, v in node.items() if k != "@id"})
    return None
