"""Tests for the text-walk (Tier 4) extractor."""

from bs4 import BeautifulSoup

from cooksnap.parser.textwalk import (
    COOK_TIME_LABEL_RE,
    PREP_TIME_LABEL_RE,
    TOTAL_TIME_LABEL_RE,
    collect_section_lines,
    expand_shared_quantity,
    extract_checkbox_rows,
    extract_labeled_duration,
    extract_page_image,
    extract_page_title,
    extract_text_walk,
    filter_ingredient_lines,
    filter_instruction_lines,
    find_section_headings,
    heading_level,
)

URL = "https://example.com/recipes/chili"

# -- Fixtures --

DIV_SOUP_HTML = """
<html><head><title>Weeknight Chili | Example</title></head><body>
<div class="app">
  <div class="text-3xl font-bold">Weeknight Chili</div>
  <div>
    <div class="section-heading">Ingredients</div>
    <div>
      <div>1 lb ground beef</div>
      <div>1 can kidney beans</div>
      <div>2 tbsp chili powder</div>
      <div>Print</div>
    </div>
  </div>
  <div>
    <div class="section-heading">Instructions</div>
    <div>
      <div>Brown the beef in a large pot.</div>
      <div>Add the beans and chili powder.</div>
      <div>Simmer for 30 minutes and serve.</div>
    </div>
    <div class="section-heading">Nutrition</div>
    <div>Calories 400</div>
  </div>
</div>
</body></html>
"""

LARGE_TEXT_ROWS_HTML = """
<html><body><div>
<h2>Ingredients</h2>
<div class="text-lg">2 cups flour</div>
<div class="text-lg">1 tsp salt</div>
<div class="text-2xl">Instructions</div>
<div>Mix everything together well.</div>
</div></body></html>
"""

WRAPPED_HEADING_HTML = """
<html><body>
<div class="card">
  <div class="card-header"><h2>Ingredients</h2></div>
  <ul><li>2 cups rice</li><li>3 cups water</li></ul>
  <div class="card-header"><h2>Directions</h2></div>
  <ol><li>Rinse the rice well.</li><li>Cook covered for 18 minutes.</li></ol>
</div>
</body></html>
"""

NOISY_SECTION_HTML = """
<html><body><div>
<h2>Ingredients</h2>
<p>Jump to Recipe</p>
<script>var tracking = true;</script>
<ul>
  <li>2 cups flour</li>
  <li>2 cups flour</li>
  <li>Stir well</li>
  <li style="display: none">secret sauce</li>
  <li>1 tsp baking soda</li>
</ul>
<p>Notes</p>
<ul><li>Use fresh baking soda</li></ul>
</div></body></html>
"""

CHECKBOX_HTML = """
<html><head>
<meta property="og:site_name" content="Meal Kit">
<title>Meal Kit</title>
</head><body>
<h1>Meal Kit</h1>
<div class="text-2xl">Lemon Chicken</div>
<div class="list">
  <div class="text-lg">Chicken</div>
  <div class="row"><input type="checkbox"><span>2 lbs</span><span>chicken</span></div>
  <div class="row"><input type="checkbox"><div><div>1 lemon</div><div>zested</div></div></div>
  <div class="text-lg">Seasoning</div>
  <hr>
  <div class="row"><input type="checkbox"><span>1 tsp each salt, pepper &amp; paprika</span></div>
</div>
<div class="steps">
  <h3>Steps</h3>
  <p>Season the chicken generously.</p>
  <p>Roast at 425F for 25 minutes.</p>
</div>
</body></html>
"""

SINGLE_ITEM_HTML = """
<html><body>
<h2>Ingredients</h2>
<ul><li>1 cup flour</li></ul>
<h2>Instructions</h2>
</body></html>
"""

TIMES_HTML = """
<html><body>
<div><span>Prep Time</span><span>15 mins</span></div>
<div><span>Cook Time:</span> <span>1 hr 10 mins</span></div>
<div>Total: 1 hour 25 minutes</div>
</body></html>
"""

IMAGES_HTML = """
<html><body>
<img src="https://pixel.doubleclick.net/track.gif">
<img src="/static/logo.png" width="120">
<img src="/icons/share.svg">
<img src="data:image/gif;base64,R0lGOD" data-src="/img/chili-hero.jpg">
</body></html>
"""


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


# -- Headings --


def test_heading_level_variants():
    soup = _soup(
        '<h3>a</h3><div role="heading" aria-level="4">b</div>'
        '<div class="recipe-title">c</div><span class="text-xl">d</span>'
        '<div class="card-h2">e</div><p class="text-sm">f</p>'
    )
    tags = soup.find_all(True)
    assert [heading_level(tag) for tag in tags] == [3, 4, 3, 3, 2, None]


def test_find_section_headings_in_div_soup():
    ingredient, instruction = find_section_headings(_soup(DIV_SOUP_HTML))
    assert ingredient is not None and ingredient.get_text() == "Ingredients"
    assert instruction is not None and instruction.get_text() == "Instructions"


# -- Leaf-text walk --


def test_collect_stops_at_next_heading():
    ingredient, _ = find_section_headings(_soup(DIV_SOUP_HTML))
    assert collect_section_lines(ingredient) == [
        "1 lb ground beef",
        "1 can kidney beans",
        "2 tbsp chili powder",
        "Print",
    ]


def test_collect_climbs_out_of_heading_wrapper():
    ingredient, instruction = find_section_headings(_soup(WRAPPED_HEADING_HTML))
    assert collect_section_lines(ingredient) == ["2 cups rice", "3 cups water"]
    assert collect_section_lines(instruction) == [
        "Rinse the rice well.",
        "Cook covered for 18 minutes.",
    ]


def test_collect_reads_through_large_text_rows():
    ingredient, instruction = find_section_headings(_soup(LARGE_TEXT_ROWS_HTML))
    assert collect_section_lines(ingredient) == ["2 cups flour", "1 tsp salt"]
    assert instruction is not None and instruction.get_text() == "Instructions"


def test_collect_skips_noise_and_stops_at_notes():
    ingredient, _ = find_section_headings(_soup(NOISY_SECTION_HTML))
    lines = collect_section_lines(ingredient)
    assert "secret sauce" not in lines
    assert "Use fresh baking soda" not in lines
    assert filter_ingredient_lines(lines) == ["2 cups flour", "1 tsp baking soda"]


# -- Checkbox rows --


def test_checkbox_rows_with_group_headers():
    assert extract_checkbox_rows(_soup(CHECKBOX_HTML)) == [
        "## Chicken",
        "2 lbs chicken",
        "1 lemon, zested",
        "## Seasoning",
        "1 tsp salt",
        "1 tsp pepper",
        "1 tsp paprika",
    ]


def test_expand_shared_quantity():
    assert expand_shared_quantity("1/2 tsp cumin, coriander, turmeric") == [
        "1/2 tsp cumin",
        "1/2 tsp coriander",
        "1/2 tsp turmeric",
    ]
    assert expand_shared_quantity("2 cups flour, sifted") == ["2 cups flour, sifted"]
    assert expand_shared_quantity("salt and pepper") == ["salt and pepper"]


# -- Line filters --


def test_filter_ingredient_lines():
    lines = ["ok", "2 eggs", "2 Eggs", "Preheat the oven", "Save Recipe", "x" * 200]
    assert filter_ingredient_lines(lines) == ["2 eggs"]


def test_filter_instruction_lines_splits_and_strips():
    lines = ["1. Mix the flour.2. Bake the bread.", "Step 3: Let it rest overnight", "Short."]
    assert filter_instruction_lines(lines) == [
        "Mix the flour.",
        "Bake the bread.",
        "Let it rest overnight",
    ]


# -- Whole extractor --


def test_extract_div_soup_page():
    recipe = extract_text_walk(_soup(DIV_SOUP_HTML), URL)
    assert recipe is not None
    assert recipe.title == "Weeknight Chili"
    assert recipe.ingredients == ["1 lb ground beef", "1 can kidney beans", "2 tbsp chili powder"]
    assert recipe.instructions == [
        "Brown the beef in a large pot.",
        "Add the beans and chili powder.",
        "Simmer for 30 minutes and serve.",
    ]


def test_extract_checkbox_page_skips_site_name_title():
    recipe = extract_text_walk(_soup(CHECKBOX_HTML), "https://mealkit.example/lemon")
    assert recipe is not None
    assert recipe.title == "Lemon Chicken"
    assert "2 lbs chicken" in recipe.ingredients
    assert recipe.instructions == [
        "Season the chicken generously.",
        "Roast at 425F for 25 minutes.",
    ]


def test_single_item_is_below_threshold():
    assert extract_text_walk(_soup(SINGLE_ITEM_HTML), URL) is None


# -- Title, image, times --


def test_title_falls_back_to_title_tag_parts():
    soup = _soup("<html><head><title>Example | Garlic Bread</title></head></html>")
    assert extract_page_title(soup, URL) == "Garlic Bread"


def test_title_fallback_untitled():
    assert extract_page_title(_soup("<html><body></body></html>"), URL) == "Untitled Recipe"


def test_page_image_filters_junk():
    assert extract_page_image(_soup(IMAGES_HTML), URL) == "https://example.com/img/chili-hero.jpg"


def test_page_image_prefers_og():
    soup = _soup('<meta property="og:image" content="/hero.jpg"><img src="/other.jpg">')
    assert extract_page_image(soup, URL) == "https://example.com/hero.jpg"


def test_labeled_durations():
    soup = _soup(TIMES_HTML)
    assert extract_labeled_duration(soup, PREP_TIME_LABEL_RE) == "PT15M"
    assert extract_labeled_duration(soup, COOK_TIME_LABEL_RE) == "PT1H10M"
    assert extract_labeled_duration(soup, TOTAL_TIME_LABEL_RE) == "PT1H25M"


def test_labeled_duration_keeps_decimal_hours():
    soup = _soup("<div><span>Prep Time</span><span>1.5 hours</span></div>")
    assert extract_labeled_duration(soup, PREP_TIME_LABEL_RE) == "PT1H30M"
