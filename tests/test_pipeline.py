"""Tests for the strategy dispatcher and service wrapper."""

from unittest.mock import patch

import pytest

from cooksnap.models import ParseError
from cooksnap.parser.heuristic import extract_heuristic
from cooksnap.parser.pipeline import extract_recipe, parse_recipe

URL = "https://example.com/recipe"

# -- Fixtures: sample HTML snippets --

JSONLD_WITH_GROUPS_HTML = """
<html><head>
<meta name="author" content="Luca">
<script type="application/ld+json">
{
    "@context": "https://schema.org",
    "@type": "Recipe",
    "name": "Pizza",
    "recipeIngredient": ["2 cups flour", "1 cup water", "1 cup cheese", "1 tsp oregano"],
    "recipeInstructions": "1. Make the dough.2. Add toppings.3. Bake."
}
</script>
</head><body>
<div class="wprm-recipe-ingredient-group">
  <h4 class="wprm-recipe-group-name">Dough</h4>
  <ul>
    <li class="wprm-recipe-ingredient">2 cups flour</li>
    <li class="wprm-recipe-ingredient">1 cup water</li>
  </ul>
</div>
<div class="wprm-recipe-ingredient-group">
  <h4 class="wprm-recipe-group-name">Topping</h4>
  <ul><li class="wprm-recipe-ingredient">1 cup cheese</li></ul>
</div>
<span class="wprm-recipe-servings">8</span>
</body></html>
"""

JSONLD_UNNAMED_FIRST_GROUP_HTML = """
<html><head>
<script type="application/ld+json">
{"@type": "Recipe", "name": "Pasta", "recipeIngredient": ["a1", "a2", "s1", "s2", "t1"]}
</script>
</head><body>
<div class="wprm-recipe-ingredient-group">
  <ul>
    <li class="wprm-recipe-ingredient">a1</li>
    <li class="wprm-recipe-ingredient">a2</li>
  </ul>
</div>
<div class="wprm-recipe-ingredient-group">
  <h4 class="wprm-recipe-group-name">Sauce</h4>
  <ul>
    <li class="wprm-recipe-ingredient">s1</li>
    <li class="wprm-recipe-ingredient">s2</li>
  </ul>
</div>
<div class="wprm-recipe-ingredient-group">
  <h4 class="wprm-recipe-group-name">Topping</h4>
  <ul><li class="wprm-recipe-ingredient">t1</li></ul>
</div>
</body></html>
"""

JSONLD_INFINITE_TIME_HTML = """
<html><head>
<script type="application/ld+json">
{
    "@type": "Recipe",
    "name": "Odd Times",
    "prepTime": Infinity,
    "recipeYield": Infinity,
    "recipeIngredient": ["1 cup rice", "2 cups water"],
    "recipeInstructions": ["Rinse the rice.", "Simmer until tender."]
}
</script>
</head><body></body></html>
"""

MICRODATA_WITH_GROUPS_HTML = """
<html><body>
<div itemscope itemtype="https://schema.org/Recipe">
  <span itemprop="name">Salad</span>
  <div class="wprm-recipe-ingredient-group">
    <h4 class="wprm-recipe-group-name">Greens</h4>
    <ul><li class="wprm-recipe-ingredient" itemprop="recipeIngredient">1 head lettuce</li></ul>
  </div>
  <div class="wprm-recipe-ingredient-group">
    <h4 class="wprm-recipe-group-name">Dressing</h4>
    <ul><li class="wprm-recipe-ingredient" itemprop="recipeIngredient">2 tbsp olive oil</li></ul>
  </div>
</div>
</body></html>
"""

JSONLD_EMPTY_HTML = """
<html><head>
<script type="application/ld+json">
{"@type": "Recipe", "name": "Empty", "recipeIngredient": [], "recipeInstructions": []}
</script>
</head><body></body></html>
"""

INVALID_JSONLD_HTML = """
<html><head>
<script type="application/ld+json">{"@type": "Recipe", "name": oops}</script>
</head><body><p>Nothing to see.</p></body></html>
"""

# Structured data and heuristic content disagree; structured data must win
JSONLD_AND_LISTS_HTML = """
<html><head>
<script type="application/ld+json">
{"@type": "Recipe", "name": "From JSON", "author": "Ann", "recipeIngredient": ["1 egg"]}
</script>
</head><body>
<meta name="author" content="Someone Else">
<h2>Ingredients</h2>
<ul><li>water</li><li>salt</li></ul>
</body></html>
"""

HEURISTIC_FALLBACK_HTML = """
<html><body>
<h1>Grandma's Soup</h1>
<h2>Ingredients</h2>
<ul><li>For the broth</li><li>4 cups water</li><li>1 tsp salt</li></ul>
<h2>Directions</h2>
<ol><li>Boil water.</li><li>Add salt.</li></ol>
<p>Serves 4</p>
</body></html>
"""

TEXT_WALK_HTML = """
<html><body>
<div class="text-3xl">Weeknight Chili</div>
<div>
  <div class="section-heading">Ingredients</div>
  <div><div>1 lb ground beef</div><div>1 can kidney beans</div></div>
</div>
<div>
  <div class="section-heading">Instructions</div>
  <div><div>Brown the beef in a large pot.</div><div>Add the beans and simmer.</div></div>
</div>
</body></html>
"""

NO_RECIPE_HTML = """
<html><head><title>Just a Blog</title></head>
<body><p>No recipe here.</p></body></html>
"""


def _explode(soup, url):
    raise RuntimeError("boom")


# -- extract_recipe --


def test_empty_markup_returns_none():
    assert extract_recipe("", URL) is None
    assert extract_recipe("   \n", URL) is None


def test_jsonld_winner_gets_group_headers_and_backfill():
    recipe = extract_recipe(JSONLD_WITH_GROUPS_HTML, URL)
    assert recipe is not None
    assert recipe.title == "Pizza"
    assert recipe.ingredients == [
        "## Dough",
        "2 cups flour",
        "1 cup water",
        "## Topping",
        "1 cup cheese",
        "1 tsp oregano",
    ]
    assert recipe.instructions == ["1. Make the dough.", "2. Add toppings.", "3. Bake."]
    assert recipe.servings == "8"
    assert recipe.author == "Luca"


def test_unnamed_first_group_keeps_headers_aligned():
    recipe = extract_recipe(JSONLD_UNNAMED_FIRST_GROUP_HTML, URL)
    assert recipe is not None
    assert recipe.ingredients == ["a1", "a2", "## Sauce", "s1", "s2", "## Topping", "t1"]


def test_non_finite_numbers_do_not_lose_structured_recipe():
    recipe = extract_recipe(JSONLD_INFINITE_TIME_HTML, URL)
    assert recipe is not None
    assert recipe.title == "Odd Times"
    assert recipe.prep_time is None
    assert recipe.servings is None
    assert recipe.instructions == ["Rinse the rice.", "Simmer until tender."]


def test_microdata_winner_is_not_group_merged():
    recipe = extract_recipe(MICRODATA_WITH_GROUPS_HTML, URL)
    assert recipe is not None
    assert recipe.title == "Salad"
    assert recipe.ingredients == ["1 head lettuce", "2 tbsp olive oil"]


def test_empty_structured_recipe_returns_none():
    assert extract_recipe(JSONLD_EMPTY_HTML, URL) is None


def test_invalid_structured_data_does_not_raise():
    assert extract_recipe(INVALID_JSONLD_HTML, URL) is None


def test_structured_data_wins_without_merging():
    recipe = extract_recipe(JSONLD_AND_LISTS_HTML, URL)
    assert recipe is not None
    assert recipe.title == "From JSON"
    assert recipe.ingredients == ["1 egg"]
    assert recipe.author == "Ann"


def test_falls_through_to_heuristic_and_marks_headers():
    recipe = extract_recipe(HEURISTIC_FALLBACK_HTML, URL)
    assert recipe is not None
    assert recipe.title == "Grandma's Soup"
    assert recipe.ingredients == ["## For the broth:", "4 cups water", "1 tsp salt"]
    assert recipe.instructions == ["Boil water.", "Add salt."]
    assert recipe.servings == "4"


def test_falls_through_to_text_walk():
    recipe = extract_recipe(TEXT_WALK_HTML, URL)
    assert recipe is not None
    assert recipe.title == "Weeknight Chili"
    assert recipe.ingredients == ["1 lb ground beef", "1 can kidney beans"]


def test_strategy_exception_is_treated_as_no_result():
    strategies = (("exploding", _explode), ("Tier 3 (heuristic)", extract_heuristic))
    with patch("cooksnap.parser.pipeline.STRATEGIES", strategies):
        recipe = extract_recipe(HEURISTIC_FALLBACK_HTML, URL)
    assert recipe is not None
    assert recipe.title == "Grandma's Soup"


def test_enrichment_failure_returns_winner():
    with patch("cooksnap.parser.pipeline.find_servings", side_effect=RuntimeError("boom")):
        recipe = extract_recipe(HEURISTIC_FALLBACK_HTML, URL)
    assert recipe is not None
    assert recipe.servings is None
    assert recipe.ingredients[0] == "For the broth"


def test_no_recipe_returns_none():
    assert extract_recipe(NO_RECIPE_HTML, URL) is None


# -- parse_recipe --


def test_parse_recipe_success():
    recipe = parse_recipe(HEURISTIC_FALLBACK_HTML, URL)
    assert recipe.title == "Grandma's Soup"


def test_parse_recipe_no_recipe_raises():
    with pytest.raises(ParseError, match="No recipe found") as exc_info:
        parse_recipe(NO_RECIPE_HTML, URL)
    assert exc_info.value.error_type == "parse"


def test_parse_recipe_empty_markup_raises():
    with pytest.raises(ParseError) as exc_info:
        parse_recipe("", URL)
    assert exc_info.value.error_type == "validation"


def test_parse_recipe_validates_url():
    with pytest.raises(ParseError, match="Only http and https"):
        parse_recipe(HEURISTIC_FALLBACK_HTML, "ftp://example.com/soup")


# -- Tests: error model --


def test_parse_error():
    err = ParseError("parse", "Nothing found")
    assert err.error_type == "parse"
    assert err.message == "Nothing found"
    assert str(err) == "Nothing found"
