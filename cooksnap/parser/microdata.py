"""Tier 2: Extract recipe from schema.org microdata attributes."""

import logging
import re
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from cooksnap.models import ExtractedRecipe
from cooksnap.parser.normalize import (
    clean_text,
    normalize_author,
    normalize_duration,
    normalize_servings,
)

logger = logging.getLogger(__name__)

_RECIPE_ITEMTYPE_RE = re.compile(r"schema\.org/Recipe\b", re.IGNORECASE)


def _prop_re(name: str) -> re.Pattern:
    # itemprop may hold several space-separated names
    return re.compile(rf"(?:^|\s){name}(?:\s|$)")


def extract_from_microdata(soup: BeautifulSoup, url: str) -> ExtractedRecipe | None:
    """Try to extract a Recipe from an itemtype=schema.org/Recipe container."""
    container = soup.find(attrs={"itemtype": _RECIPE_ITEMTYPE_RE})
    if container is None:
        logger.debug("No microdata Recipe container found")
        return None

    ingredients = [
        _element_text(el)
        for el in _own_props(container, "recipeIngredient", "ingredients")
    ]
    ingredients = [text for text in ingredients if text]
    steps = _extract_instructions(container)

    logger.debug(
        "Microdata found %d ingredients, %d steps", len(ingredients), len(steps)
    )
    if not ingredients and not steps:
        return None

    name = _first_prop(container, "name")
    image = _first_prop(container, "image")
    image_url = _attr_value(image, "src", "content", "href", "data-src") if image else None

    return ExtractedRecipe(
        title=(_element_text(name) if name else "") or "Untitled Recipe",
        source_url=url,
        image=urljoin(url, image_url) if image_url else None,
        ingredients=ingredients,
        instructions=steps,
        prep_time=_duration_prop(container, "prepTime"),
        cook_time=_duration_prop(container, "cookTime"),
        total_time=_duration_prop(container, "totalTime"),
        servings=normalize_servings(_text_prop(container, "recipeYield")),
        author=_extract_author(container),
        cuisine_type=_text_prop(container, "recipeCuisine"),
    )


def _owner(el: Tag) -> Tag | None:
    """The nearest ancestor that declares an item type."""
    return el.find_parent(attrs={"itemtype": True})


def _own_props(container: Tag, *names: str) -> list[Tag]:
    """Property elements that belong to the container, not to a nested item."""
    found = []
    for name in names:
        for el in container.find_all(attrs={"itemprop": _prop_re(name)}):
            if _owner(el) is container:
                found.append(el)
        if found:
            break
    return found


def _first_prop(container: Tag, name: str) -> Tag | None:
    props = _own_props(container, name)
    return props[0] if props else None


def _attr_value(el: Tag, *attrs: str) -> str | None:
    for attr in attrs:
        value = el.get(attr)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def _element_text(el: Tag) -> str:
    if el.name == "meta":
        return clean_text(el.get("content", ""))
    return clean_text(el.get_text(" "))


def _text_prop(container: Tag, name: str) -> str | None:
    el = _first_prop(container, name)
    if el is None:
        return None
    return _attr_value(el, "content") or _element_text(el) or None


def _duration_prop(container: Tag, name: str) -> str | None:
    el = _first_prop(container, name)
    if el is None:
        return None
    return normalize_duration(
        _attr_value(el, "content", "datetime") or _element_text(el)
    )


def _extract_author(container: Tag) -> str | None:
    el = _first_prop(container, "author")
    if el is None:
        return None
    if el.get("itemtype") is not None:
        nested_name = el.find(attrs={"itemprop": _prop_re("name")})
        if nested_name is not None:
            return normalize_author(_element_text(nested_name))
    return normalize_author(_attr_value(el, "content") or _element_text(el))


def _extract_instructions(container: Tag) -> list[str]:
    """Step texts from recipeInstructions: itemprop=text nodes, list items, or paragraphs."""
    steps = []
    for el in _own_props(container, "recipeInstructions", "instructions"):
        text_nodes = el.find_all(attrs={"itemprop": _prop_re("text")})
        if text_nodes:
            steps.extend(_element_text(node) for node in text_nodes)
            continue

        items = el.find_all("li")
        if items:
            steps.extend(_element_text(li) for li in items)
            continue

        paragraphs = el.find_all("p")
        if paragraphs:
            steps.extend(_element_text(p) for p in paragraphs)
        else:
            steps.append(_element_text(el))
    return [s for s in steps if s]
