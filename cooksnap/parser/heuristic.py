"""Tier 3: Heuristic extraction from class-name and label conventions."""

import logging
import re
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from cooksnap.models import ExtractedRecipe
from cooksnap.parser.normalize import clean_text

logger = logging.getLogger(__name__)

_INGREDIENT_RE = re.compile(r"ingredients\s*:?", re.IGNORECASE)
_INSTRUCTION_RE = re.compile(
    r"(?:instructions|directions|steps|method|preparation)\s*:?", re.IGNORECASE
)
_INGREDIENT_CLASS_RE = re.compile(r"ingredient", re.IGNORECASE)
_INSTRUCTION_CLASS_RE = re.compile(r"instruction|direction|step|method", re.IGNORECASE)
_HEADING_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6"]
_LABEL_TAGS = [*_HEADING_TAGS, "strong", "b"]

MAX_INGREDIENT_LENGTH = 200
MAX_INSTRUCTION_LENGTH = 1000
MIN_LINES = 2


def extract_heuristic(soup: BeautifulSoup, url: str) -> ExtractedRecipe | None:
    """Try to extract a recipe from conventional class names or labelled lists."""
    ingredients = _class_list_items(soup, _INGREDIENT_CLASS_RE) or _find_list_after_label(
        soup, _INGREDIENT_RE
    )
    steps = _class_list_items(soup, _INSTRUCTION_CLASS_RE) or _find_list_after_label(
        soup, _INSTRUCTION_RE
    )

    ingredients = _bounded(ingredients, MAX_INGREDIENT_LENGTH)
    steps = _bounded(steps, MAX_INSTRUCTION_LENGTH)

    logger.debug(
        "Heuristic found %d ingredients, %d steps", len(ingredients), len(steps)
    )

    if len(ingredients) < MIN_LINES and len(steps) < MIN_LINES:
        return None

    image = soup.find("meta", property="og:image")
    image_url = image.get("content", "").strip() if image else ""

    return ExtractedRecipe(
        title=extract_title(soup),
        source_url=url,
        image=urljoin(url, image_url) if image_url else None,
        ingredients=ingredients,
        instructions=steps,
    )


def _bounded(lines: list[str], max_length: int) -> list[str]:
    """Drop over-long lines and case-insensitive repeats."""
    seen = set()
    kept = []
    for line in lines:
        key = line.lower()
        if not line or len(line) > max_length or key in seen:
            continue
        seen.add(key)
        kept.append(line)
    return kept


def _class_list_items(soup: BeautifulSoup, pattern: re.Pattern) -> list[str]:
    """Collect <li> text from elements whose class names match the pattern."""
    seen_ids = set()
    items = []
    for el in soup.find_all(class_=pattern):
        candidates = [el] if el.name == "li" else el.find_all("li")
        for li in candidates:
            if id(li) in seen_ids:
                continue
            seen_ids.add(id(li))
            text = clean_text(li.get_text(" "))
            if text:
                items.append(text)
    return items


def _find_list_after_label(soup: BeautifulSoup, pattern: re.Pattern) -> list[str]:
    """Find a <ul>/<ol> that follows a label matching the pattern."""
    for tag in soup.find_all(_LABEL_TAGS):
        if not pattern.search(tag.get_text(strip=True)):
            continue

        # The label might be inside a <p> wrapper, so look from the parent
        search_from = tag.parent if isinstance(tag.parent, Tag) and tag.parent.name == "p" else tag
        ul = search_from.find_next(["ul", "ol"])
        if ul:
            items = [clean_text(li.get_text(" ")) for li in ul.find_all("li")]
            items = [item for item in items if item]
            if items:
                return items

    return []


def extract_title(soup: BeautifulSoup) -> str:
    """
    Extract a recipe title from the page, falling back through og:title, <title> (with
    site name suffix stripped), and <h1>.
    """
    og = soup.find("meta", property="og:title")
    if og and og.get("content", "").strip():
        return og["content"].strip()

    title_tag = soup.find("title")
    if title_tag:
        text = title_tag.get_text(strip=True)
        # Strip common suffixes like " — Site Name" or " | Site Name"
        text = re.split(r"\s*[—|–\-]\s*(?!.*[—|–\-])", text)[0].strip()
        if text:
            return text

    h1 = soup.find("h1")
    if h1:
        return clean_text(h1.get_text(" "))

    return "Untitled Recipe"
