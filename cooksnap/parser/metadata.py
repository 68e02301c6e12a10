"""Document-wide scans used to back-fill metadata the winning strategy missed."""

import logging
import re

from bs4 import BeautifulSoup, Tag

from cooksnap.parser.normalize import clean_text, normalize_author, normalize_servings

logger = logging.getLogger(__name__)

_SERVINGS_CLASS_RE = re.compile(r"servings|yield|serves", re.IGNORECASE)
_SERVINGS_TEXT_RE = re.compile(
    r"\b(?:serves|servings?|yields?|makes)\b\s*:?\s*(?:about\s+)?(\d+)", re.IGNORECASE
)
_AUTHOR_CLASS_RE = re.compile(r"author|byline", re.IGNORECASE)
_BY_PREFIX_RE = re.compile(r"^(?:recipe\s+)?(?:by|author)\s*:?\s+", re.IGNORECASE)
_MAX_LABEL_LENGTH = 60

_GROUP_HEADING_TAGS = ["h2", "h3", "h4", "h5"]
_GENERIC_GROUP_CLASS_RE = re.compile(r"ingredients?[-_]group", re.IGNORECASE)
_GROUP_NAME_CLASS_RE = re.compile(r"group[-_]?(?:name|title|heading)", re.IGNORECASE)


def find_servings(soup: BeautifulSoup) -> str | None:
    """Find a serving count from servings/yield classes or "Serves 4" style labels."""
    for el in soup.find_all(class_=_SERVINGS_CLASS_RE):
        text = clean_text(el.get_text(" "))
        if text and len(text) <= _MAX_LABEL_LENGTH:
            servings = normalize_servings(text)
            if servings:
                return servings

    for string in soup.find_all(string=_SERVINGS_TEXT_RE):
        if isinstance(string.parent, Tag) and string.parent.name in ("script", "style"):
            continue
        text = clean_text(string)
        if len(text) > _MAX_LABEL_LENGTH:
            continue
        match = _SERVINGS_TEXT_RE.search(text)
        if match:
            return normalize_servings(match.group(1))
    return None


def find_author(soup: BeautifulSoup) -> str | None:
    """Find an author name from meta tags, rel/itemprop attributes, or byline classes."""
    meta = soup.find("meta", attrs={"name": "author"})
    if meta and meta.get("content", "").strip():
        return normalize_author(meta["content"])

    candidates = [
        soup.find(attrs={"rel": "author"}),
        soup.find(attrs={"itemprop": "author"}),
        *soup.find_all(class_=_AUTHOR_CLASS_RE, limit=10),
    ]
    for el in candidates:
        if el is None:
            continue
        name_el = el.find(attrs={"itemprop": "name"}) or el
        text = _BY_PREFIX_RE.sub("", clean_text(name_el.get_text(" ")))
        if text and len(text) <= _MAX_LABEL_LENGTH:
            return normalize_author(text)
    return None


def find_ingredient_groups(soup: BeautifulSoup) -> list[tuple[str, int]]:
    """
    Return (header, item count) pairs for grouped ingredient containers.

    Recognizes WP Recipe Maker groups, heading-plus-list layouts inside Tasty
    Recipes and Mediavine Create cards, and generic "ingredient-group" classes.
    Groups without items are dropped. Unnamed groups are kept with an empty
    header so the counts still line up with the flat ingredient list.
    """
    for finder in (_wprm_groups, _heading_list_groups, _generic_groups):
        groups = [(header, count) for header, count in finder(soup) if count]
        if any(header for header, _ in groups):
            logger.debug("Found %d ingredient groups via %s", len(groups), finder.__name__)
            return groups
    return []


def _wprm_groups(soup: BeautifulSoup) -> list[tuple[str, int]]:
    groups = []
    for group in soup.select(".wprm-recipe-ingredient-group"):
        name = group.select_one(".wprm-recipe-group-name")
        items = group.select("li.wprm-recipe-ingredient") or group.select(
            ".wprm-recipe-ingredient"
        )
        groups.append((clean_text(name.get_text(" ")) if name else "", len(items)))
    return groups


def _heading_list_groups(soup: BeautifulSoup) -> list[tuple[str, int]]:
    groups = []
    for container in soup.select(".tasty-recipes-ingredients, .mv-create-ingredients"):
        header = None
        for el in container.find_all(True):
            if el.name in _GROUP_HEADING_TAGS or (
                el.name == "strong" and el.parent is not None and el.parent.name == "p"
            ):
                header = clean_text(el.get_text(" ")).rstrip(":")
            elif el.name in ("ul", "ol"):
                groups.append((header or "", len(el.find_all("li"))))
                header = None
    return groups


def _generic_groups(soup: BeautifulSoup) -> list[tuple[str, int]]:
    groups = []
    for group in soup.find_all(class_=_GENERIC_GROUP_CLASS_RE):
        if group.find(class_=_GENERIC_GROUP_CLASS_RE):
            # a wrapper around the real groups
            continue
        name = group.find(class_=_GROUP_NAME_CLASS_RE) or group.find(_GROUP_HEADING_TAGS)
        header = clean_text(name.get_text(" ")).rstrip(":") if name else ""
        groups.append((header, len(group.find_all("li"))))
    return groups
