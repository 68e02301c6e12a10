"""Orchestrator: parse markup once and run extraction strategies in order."""

import logging
from urllib.parse import urlparse

from bs4 import BeautifulSoup

from cooksnap.models import ExtractedRecipe, ParseError
from cooksnap.parser.heuristic import extract_heuristic
from cooksnap.parser.instructions import split_numbered_steps
from cooksnap.parser.metadata import find_author, find_ingredient_groups, find_servings
from cooksnap.parser.microdata import extract_from_microdata
from cooksnap.parser.sections import mark_section_headers, merge_group_headers
from cooksnap.parser.structured import extract_from_jsonld
from cooksnap.parser.textwalk import extract_text_walk

logger = logging.getLogger(__name__)

STRUCTURED_DATA = "Tier 1 (structured data)"

STRATEGIES = (
    (STRUCTURED_DATA, extract_from_jsonld),
    ("Tier 2 (microdata)", extract_from_microdata),
    ("Tier 3 (heuristic)", extract_heuristic),
    ("Tier 4 (text walk)", extract_text_walk),
)


def extract_recipe(html: str, url: str) -> ExtractedRecipe | None:
    """
    Extract a recipe from page markup, or return None.

    Strategies run in a fixed order and the first one that yields ingredients
    or instructions wins; results are never combined across strategies. Any
    exception inside a strategy counts as "found nothing".
    """
    if not html or not html.strip():
        return None

    try:
        soup = BeautifulSoup(html, "html.parser")
    except Exception:
        logger.debug("Could not parse markup for %s", url, exc_info=True)
        return None

    for name, extract in STRATEGIES:
        try:
            recipe = extract(soup, url)
        except Exception:
            logger.debug("%s raised for %s", name, url, exc_info=True)
            continue
        if recipe is not None and recipe.has_content():
            logger.info("%s succeeded for %s", name, url)
            return _finalize(recipe, soup, name)
        logger.debug("%s found nothing for %s", name, url)

    logger.info("All strategies failed for %s", url)
    return None


def _finalize(recipe: ExtractedRecipe, soup: BeautifulSoup, strategy: str) -> ExtractedRecipe:
    """Back-fill metadata and tidy the winning record's lists."""
    try:
        updates = {}
        if not recipe.servings:
            updates["servings"] = find_servings(soup)
        if not recipe.author:
            updates["author"] = find_author(soup)

        ingredients = recipe.ingredients
        if strategy == STRUCTURED_DATA:
            ingredients = merge_group_headers(ingredients, find_ingredient_groups(soup))
        updates["ingredients"] = mark_section_headers(ingredients)

        if len(recipe.instructions) == 1:
            updates["instructions"] = split_numbered_steps(recipe.instructions[0])

        return recipe.model_copy(update=updates)
    except Exception:
        logger.warning("Enrichment failed for %s", recipe.source_url, exc_info=True)
        return recipe


def validate_url(url: str) -> None:
    """Validate the source URL's scheme and host."""
    parsed = urlparse(url)

    if parsed.scheme not in ("http", "https"):
        logger.warning("Rejected URL with scheme %r: %s", parsed.scheme, url)
        raise ParseError("validation", "Only http and https URLs are supported.")

    if not parsed.hostname:
        logger.warning("Rejected URL with no hostname: %s", url)
        raise ParseError("validation", "Invalid URL.")


def parse_recipe(html: str, url: str) -> ExtractedRecipe:
    """Validate the URL and extract a recipe from already-fetched markup."""
    logger.info("Parsing recipe from %s (%d bytes)", url, len(html or ""))
    validate_url(url)

    if not html or not html.strip():
        raise ParseError("validation", "The page markup is empty.")

    recipe = extract_recipe(html, url)
    if recipe is None:
        logger.warning("No recipe found in %s", url)
        raise ParseError("parse", "No recipe found on that page. Try a different URL.")
    return recipe
