"""Static keyword tables shared by the parser modules.

Everything here is read-only: frozensets, tuples, and compiled patterns built
once at import time.
"""

import re

UNICODE_FRACTIONS: dict[str, float] = {
    "½": 1 / 2,
    "⅓": 1 / 3,
    "⅔": 2 / 3,
    "¼": 1 / 4,
    "¾": 3 / 4,
    "⅕": 1 / 5,
    "⅖": 2 / 5,
    "⅗": 3 / 5,
    "⅘": 4 / 5,
    "⅙": 1 / 6,
    "⅚": 5 / 6,
    "⅛": 1 / 8,
    "⅜": 3 / 8,
    "⅝": 5 / 8,
    "⅞": 7 / 8,
}

# (value, label) pairs checked in order when formatting scaled quantities
DISPLAY_FRACTIONS: tuple[tuple[float, str], ...] = (
    (1 / 8, "1/8"),
    (1 / 4, "1/4"),
    (1 / 3, "1/3"),
    (3 / 8, "3/8"),
    (1 / 2, "1/2"),
    (2 / 3, "2/3"),
    (3 / 4, "3/4"),
    (7 / 8, "7/8"),
)

UNITS = frozenset(
    {
        "cup",
        "cups",
        "c",
        "tablespoon",
        "tablespoons",
        "tbsp",
        "tbsps",
        "tbs",
        "tbl",
        "teaspoon",
        "teaspoons",
        "tsp",
        "tsps",
        "ounce",
        "ounces",
        "oz",
        "fl oz",
        "pound",
        "pounds",
        "lb",
        "lbs",
        "gram",
        "grams",
        "g",
        "kilogram",
        "kilograms",
        "kg",
        "milliliter",
        "milliliters",
        "millilitre",
        "millilitres",
        "ml",
        "liter",
        "liters",
        "litre",
        "litres",
        "l",
        "quart",
        "quarts",
        "qt",
        "pint",
        "pints",
        "pt",
        "gallon",
        "gallons",
        "gal",
        "pinch",
        "pinches",
        "dash",
        "dashes",
        "clove",
        "cloves",
        "can",
        "cans",
        "jar",
        "jars",
        "bunch",
        "bunches",
        "slice",
        "slices",
        "piece",
        "pieces",
        "head",
        "heads",
        "stalk",
        "stalks",
        "stick",
        "sticks",
        "sprig",
        "sprigs",
        "handful",
        "handfuls",
        "package",
        "packages",
        "pkg",
    }
)

# Alternation used where a "quantity followed by unit" has to be spotted inside
# free text; longest first so "tablespoons" wins over "tbsp"-style prefixes.
UNIT_PATTERN = "|".join(
    re.escape(unit) for unit in sorted(UNITS, key=len, reverse=True) if " " not in unit
)

INGREDIENT_HEADING_RE = re.compile(
    r"^(?:(?:the\s+)?ingredients?|what\s+you(?:'|’)?ll\s+need|you(?:'|’)?ll\s+need"
    r"|shopping\s+list)(?:\s*\([^)]*\))?\s*:?$",
    re.IGNORECASE,
)

INSTRUCTION_HEADING_RE = re.compile(
    r"^(?:instructions?|directions?|steps?|method|preparation|how\s+to\s+make(?:\s+it)?)"
    r"(?:\s*\([^)]*\))?\s*:?$",
    re.IGNORECASE,
)

STOP_SECTION_RE = re.compile(
    r"^(?:nutrition(?:al)?(?:\s+(?:info(?:rmation)?|facts))?|(?:recipe\s+)?notes?"
    r"|tips?(?:\s*(?:&|and)\s*tricks)?|equipment|video|reviews?|comments?|faq"
    r"|storage|variations?|you\s+may\s+also\s+like|related\s+recipes|more\s+recipes"
    r"|keywords?|course|cuisine)\s*:?$",
    re.IGNORECASE,
)

# Navigation and button labels that leak into naive text scans
UI_NOISE = frozenset(
    {
        "print",
        "print recipe",
        "jump to recipe",
        "jump to video",
        "save",
        "save recipe",
        "saved",
        "share",
        "pin",
        "pin recipe",
        "pin it",
        "email",
        "tweet",
        "rate",
        "rate this recipe",
        "add to cart",
        "add to list",
        "add to shopping list",
        "add all to shopping list",
        "log in",
        "login",
        "sign in",
        "sign up",
        "subscribe",
        "us customary",
        "metric",
        "1x",
        "2x",
        "3x",
        "cook mode",
        "skip to content",
        "menu",
        "home",
        "search",
        "read more",
        "show more",
        "see more",
        "show less",
        "copy",
        "copied",
        "checked",
        "check all",
        "uncheck all",
        "watch video",
        "advertisement",
        "scroll to top",
        "back to top",
        "close",
        "next",
        "previous",
    }
)

UI_NOISE_PREFIX_RE = re.compile(
    r"^(?:prevent your screen from going dark|advertisement\b|this post may contain"
    r"|click here|tap here|© |copyright\b)",
    re.IGNORECASE,
)

# A candidate ingredient that opens with one of these is instruction leakage
COOKING_VERBS = frozenset(
    {
        "add",
        "allow",
        "arrange",
        "bake",
        "beat",
        "blend",
        "boil",
        "bring",
        "broil",
        "combine",
        "cook",
        "cover",
        "discard",
        "divide",
        "drain",
        "drizzle",
        "fold",
        "fry",
        "garnish",
        "grease",
        "grill",
        "heat",
        "knead",
        "let",
        "line",
        "melt",
        "mix",
        "place",
        "pour",
        "preheat",
        "reduce",
        "refrigerate",
        "remove",
        "repeat",
        "roast",
        "saute",
        "sauté",
        "season",
        "serve",
        "simmer",
        "spoon",
        "spread",
        "sprinkle",
        "stir",
        "strain",
        "transfer",
        "whisk",
    }
)
