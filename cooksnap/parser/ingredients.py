"""Ingredient string parsing, scaling, and quantity formatting."""

import logging
import math
import re

from cooksnap.models import ParsedIngredient
from cooksnap.parser.sections import SECTION_MARKER
from cooksnap.parser.vocabulary import DISPLAY_FRACTIONS, UNICODE_FRACTIONS, UNITS

logger = logging.getLogger(__name__)

_GLYPHS = "".join(UNICODE_FRACTIONS)
_GLYPH_RE = re.compile(f"[{_GLYPHS}]")
_DIGIT_GLYPH_RE = re.compile(f"(\\d)([{_GLYPHS}])")

# Tried in order; the first pattern to match the start of the line wins.
_QUANTITY_PATTERNS: tuple[tuple[str, re.Pattern], ...] = (
    ("mixed", re.compile(r"^(\d+)\s+(\d+)/(\d+)")),
    ("glyph_mixed", re.compile(r"^(\d+)\s+(0?\.\d+)")),
    ("range", re.compile(r"^(\d+(?:\.\d+)?|\.\d+)\s*[-–]\s*(?:\d+(?:\.\d+)?|\.\d+)")),
    ("fraction", re.compile(r"^(\d+)/(\d+)")),
    ("number", re.compile(r"^(\d+(?:\.\d+)?|\.\d+)")),
)

_LEADING_QUANTITY_CHARS_RE = re.compile(f"^[\\d\\s/.\\-–{_GLYPHS}]+")
_TRAILING_PAREN_RE = re.compile(r"\(\(?([^)]*)\)?\)\s*$")


def _replace_unicode_fractions(text: str) -> tuple[str, bool]:
    """Swap vulgar fraction glyphs for decimals ("1½" becomes "1 0.5")."""
    if not _GLYPH_RE.search(text):
        return text, False
    spaced = _DIGIT_GLYPH_RE.sub(r"\1 \2", text)
    return _GLYPH_RE.sub(lambda m: str(UNICODE_FRACTIONS[m.group()]), spaced), True


def _parse_fraction(numerator: str, denominator: str) -> float | None:
    den = float(denominator)
    if den == 0:
        return None
    return float(numerator) / den


def _match_quantity(text: str, had_glyph: bool) -> tuple[float | None, str]:
    """Consume a leading quantity; return (quantity, remaining text)."""
    for kind, pattern in _QUANTITY_PATTERNS:
        if kind == "glyph_mixed" and not had_glyph:
            continue
        match = pattern.match(text)
        if not match:
            continue

        if kind == "mixed":
            fraction = _parse_fraction(match.group(2), match.group(3))
            quantity = int(match.group(1)) + (fraction or 0)
        elif kind == "glyph_mixed":
            quantity = float(match.group(1)) + float(match.group(2))
        elif kind == "fraction":
            quantity = _parse_fraction(match.group(1), match.group(2))
        else:
            # "range" keeps its first number
            quantity = float(match.group(1))

        if quantity is None or math.isnan(quantity):
            return None, text
        return quantity, text[match.end() :].strip()
    return None, text


def _find_top_level_comma(text: str) -> int:
    """Index of the first comma not nested inside parentheses, or -1."""
    depth = 0
    for i, char in enumerate(text):
        if char == "(":
            depth += 1
        elif char == ")":
            depth = max(0, depth - 1)
        elif char == "," and depth == 0:
            return i
    return -1


def extract_prep_note(name: str) -> tuple[str, str | None]:
    """
    Split a trailing preparation note off an ingredient name.

    A trailing parenthetical is preferred ("onion (, sliced)" gives "sliced");
    otherwise the first top-level comma splits name from note. Parentheticals in
    the middle of the string, like can sizes, stay part of the name.
    """
    match = _TRAILING_PAREN_RE.search(name)
    if match:
        name_part = re.sub(r"[,;\s]+$", "", name[: match.start()]).strip()
        note = re.sub(r"^[,;\s]+|[,;\s]+$", "", match.group(1)).strip()
        if name_part and note:
            return name_part, note

    comma = _find_top_level_comma(name)
    if comma != -1:
        name_part = name[:comma].strip()
        detail = name[comma + 1 :].strip()
        if name_part and detail:
            return name_part, detail

    return name, None


def parse_ingredient(raw: str) -> ParsedIngredient:
    """
    Parse a raw ingredient string into quantity, unit, name, and prep note.

    Examples:
        "2 cups flour"       -> quantity 2, unit "cups", name "flour"
        "1½ cups broth"      -> quantity 1.5, unit "cups", name "broth"
        "salt to taste"      -> no quantity, name "salt to taste"
        "1 onion (, sliced)" -> quantity 1, name "onion", prep note "sliced"
    """
    original = raw
    text = (raw or "").strip()

    if not text:
        return ParsedIngredient(name="", original=original)

    if text.startswith(SECTION_MARKER):
        return ParsedIngredient(name=text[len(SECTION_MARKER) :], original=original)

    replaced, had_glyph = _replace_unicode_fractions(text)
    quantity, rest = _match_quantity(replaced, had_glyph)

    if quantity is None:
        name, prep_note = extract_prep_note(text)
        return ParsedIngredient(name=name, prep_note=prep_note, original=original)

    unit = None
    unit_match = re.match(r"^(\S+)\s*", rest)
    if unit_match:
        token = re.sub(r"[.,]$", "", unit_match.group(1))
        if token.lower() in UNITS:
            unit = token
            rest = rest[unit_match.end() :].strip()

    raw_name = rest or _LEADING_QUANTITY_CHARS_RE.sub("", text).strip()
    name, prep_note = extract_prep_note(raw_name)

    return ParsedIngredient(
        quantity=quantity,
        unit=unit,
        name=name,
        prep_note=prep_note,
        original=original,
    )


def format_quantity(value: float) -> str:
    """Render a quantity using common kitchen fractions where close enough."""
    if value <= 0:
        return "0"

    whole = math.floor(value)
    frac = value - whole

    if frac > 0.01:
        for target, label in DISPLAY_FRACTIONS:
            if abs(frac - target) < 0.05:
                return f"{whole} {label}" if whole > 0 else label

    if frac < 0.01:
        return str(whole)

    return f"{round(value, 2):.2f}".rstrip("0").rstrip(".")


def format_ingredient_main(parsed: ParsedIngredient, ratio: float = 1) -> str:
    """Quantity, unit, and name without the prep note, scaled by ratio."""
    if parsed.quantity is None:
        return parsed.name

    parts = [format_quantity(parsed.quantity * ratio)]
    if parsed.unit:
        parts.append(parsed.unit)
    if parsed.name:
        parts.append(parsed.name)
    return " ".join(parts)


def scale_ingredient(parsed: ParsedIngredient, ratio: float) -> str:
    """
    Scale a parsed ingredient and return display text.

    Ingredients without a quantity come back unchanged, apart from the prep
    note being re-attached with a comma.
    """
    if parsed.quantity is None:
        if parsed.prep_note:
            return f"{parsed.name}, {parsed.prep_note}"
        return parsed.original

    main = format_ingredient_main(parsed, ratio)
    return f"{main}, {parsed.prep_note}" if parsed.prep_note else main


def parse_servings(text: str | None) -> int | None:
    """Extract a serving count ("Serves 4", "4-6", "6 servings")."""
    if not text:
        return None
    match = re.search(r"\d+", text)
    if not match:
        return None
    count = int(match.group())
    return count if count > 0 else None
