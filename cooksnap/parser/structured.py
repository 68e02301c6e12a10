"""Tier 1: Extract recipe from Schema.org JSON-LD structured data via extruct."""

import logging
from urllib.parse import urljoin

from bs4 import BeautifulSoup
from extruct.jsonld import JsonLdExtractor

from cooksnap.models import ExtractedRecipe
from cooksnap.parser.normalize import (
    clean_text,
    normalize_author,
    normalize_duration,
    normalize_servings,
    strip_tags,
)

logger = logging.getLogger(__name__)

_jsonld = JsonLdExtractor()


def extract_from_jsonld(soup: BeautifulSoup, url: str) -> ExtractedRecipe | None:
    """Try to extract a Recipe from the page's JSON-LD blocks."""
    scripts = soup.find_all("script", attrs={"type": "application/ld+json"})
    logger.debug("Found %d JSON-LD blocks", len(scripts))

    for idx, script in enumerate(scripts):
        if not script.get_text(strip=True):
            continue
        try:
            data = _jsonld.extract(str(script))
        except Exception:
            logger.debug("JSON-LD block %d failed to parse", idx, exc_info=True)
            continue

        recipe = _find_recipe(data, url)
        if recipe is not None:
            logger.debug("Found recipe in JSON-LD block %d", idx)
            return recipe

    logger.debug("No structured recipe data found")
    return None


def _find_recipe(node, url: str, graph: list | None = None) -> ExtractedRecipe | None:
    """
    Walk a JSON-LD value looking for a usable Recipe node.

    Lists are searched item by item; an @graph array becomes the reference
    graph for the nodes inside it, so author ids can be resolved.
    """
    if isinstance(node, list):
        for item in node:
            recipe = _find_recipe(item, url, graph)
            if recipe is not None:
                return recipe
        return None

    if not isinstance(node, dict):
        return None

    nested = node.get("@graph")
    if isinstance(nested, list):
        recipe = _find_recipe(nested, url, nested)
        if recipe is not None:
            return recipe

    if not _is_recipe_type(node.get("@type")):
        return None
    return _build_recipe(node, url, graph)


def _is_recipe_type(value) -> bool:
    types = value if isinstance(value, list) else [value]
    for item in types:
        if not isinstance(item, str):
            continue
        # "Recipe", "schema:Recipe", "http://schema.org/Recipe"
        local = item.rsplit("/", 1)[-1].rsplit(":", 1)[-1]
        if local.strip().lower() == "recipe":
            return True
    return False


def _build_recipe(obj: dict, url: str, graph: list | None) -> ExtractedRecipe | None:
    ingredients = _extract_string_list(
        obj.get("recipeIngredient") or obj.get("ingredients")
    )
    steps = _normalize_instructions(obj.get("recipeInstructions"))

    if not ingredients and not steps:
        logger.debug("Structured data had no ingredients or steps")
        return None

    title = obj.get("name")
    title = strip_tags(title) if isinstance(title, str) else ""

    image = _extract_image(obj.get("image"))

    return ExtractedRecipe(
        title=title or "Untitled Recipe",
        source_url=url,
        image=urljoin(url, image) if image else None,
        ingredients=ingredients,
        instructions=steps,
        prep_time=normalize_duration(obj.get("prepTime")),
        cook_time=normalize_duration(obj.get("cookTime")),
        total_time=normalize_duration(obj.get("totalTime")),
        servings=normalize_servings(obj.get("recipeYield") or obj.get("yield")),
        author=normalize_author(obj.get("author"), graph),
        cuisine_type=_extract_cuisine(obj.get("recipeCuisine")),
    )


def _extract_image(value) -> str | None:
    """Handle image given as a string, a list, or an ImageObject."""
    if isinstance(value, list):
        for item in value:
            image = _extract_image(item)
            if image:
                return image
        return None
    if isinstance(value, dict):
        value = value.get("url") or value.get("contentUrl")
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _extract_string_list(value) -> list[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [strip_tags(value)] if value.strip() else []
    if not isinstance(value, list):
        return []

    items = []
    for item in value:
        if isinstance(item, dict):
            item = item.get("text") or item.get("name") or ""
        if isinstance(item, str):
            text = strip_tags(item)
            if text:
                items.append(text)
    return items


def _normalize_instructions(raw) -> list[str]:
    """Normalize recipeInstructions into a flat list of step strings."""
    if not raw:
        return []

    if isinstance(raw, str):
        # Single text block: split on newlines
        return [strip_tags(s) for s in raw.splitlines() if strip_tags(s)]

    if isinstance(raw, dict):
        raw = [raw]
    if not isinstance(raw, list):
        return []

    steps = []
    for item in raw:
        if isinstance(item, str):
            steps.extend(_normalize_instructions(item))
        elif isinstance(item, dict):
            sub_steps = item.get("itemListElement")
            if sub_steps:
                # HowToSection (or an ItemList of steps)
                steps.extend(_normalize_instructions(sub_steps))
            else:
                text = item.get("text") or item.get("name") or ""
                if isinstance(text, str):
                    steps.append(strip_tags(text))
        elif isinstance(item, list):
            steps.extend(_normalize_instructions(item))
    return [s for s in steps if s]


def _extract_cuisine(value) -> str | None:
    if isinstance(value, list):
        names = [clean_text(v) for v in value if isinstance(v, str) and v.strip()]
        return ", ".join(names) or None
    if isinstance(value, str):
        return clean_text(value) or None
    return None
