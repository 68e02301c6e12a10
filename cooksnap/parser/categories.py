"""Grocery-aisle categorization of parsed ingredients."""

import logging

from cooksnap.models import CategorizedIngredient, IngredientCategory, IngredientGroup
from cooksnap.parser.ingredients import parse_ingredient
from cooksnap.parser.sections import is_section_header

logger = logging.getLogger(__name__)

# Searched in this order. Categories whose keywords collide with produce names
# ("tomato paste", "garlic powder") come before Produce.
CATEGORY_KEYWORDS: tuple[tuple[IngredientCategory, tuple[str, ...]], ...] = (
    (
        IngredientCategory.OILS_CONDIMENTS,
        (
            "oil",
            "vinegar",
            "soy sauce",
            "fish sauce",
            "hot sauce",
            "oyster sauce",
            "hoisin",
            "worcestershire",
            "mustard",
            "ketchup",
            "mayo",
            "mayonnaise",
            "dressing",
            "sriracha",
            "tahini",
            "mirin",
        ),
    ),
    (
        IngredientCategory.CANNED_JARRED,
        (
            "tomato paste",
            "tomato sauce",
            "canned",
            "diced tomatoes",
            "crushed tomatoes",
            "coconut milk",
            "coconut cream",
            "broth",
            "stock",
            "bouillon",
            "paste",
            "jarred",
            "salsa",
            "jam",
            "jelly",
            "preserves",
            "pickles",
            "olives",
            "capers",
            "anchov",
        ),
    ),
    (
        IngredientCategory.SPICES_SEASONINGS,
        (
            "salt",
            "pepper",
            "cumin",
            "paprika",
            "cinnamon",
            "nutmeg",
            "oregano",
            "basil",
            "thyme",
            "rosemary",
            "parsley",
            "cilantro",
            "dill",
            "bay leaf",
            "bay leaves",
            "chili powder",
            "cayenne",
            "turmeric",
            "coriander",
            "cardamom",
            "cloves",
            "ginger",
            "garlic powder",
            "onion powder",
            "seasoning",
            "spice",
            "herb",
            "vanilla",
            "extract",
            "mint",
            "sage",
            "tarragon",
            "chili flakes",
            "red pepper flakes",
            "curry powder",
            "garam masala",
            "saffron",
            "allspice",
            "fennel seed",
            "mustard seed",
            "celery seed",
        ),
    ),
    (
        IngredientCategory.BEVERAGES,
        (
            "coffee",
            "espresso",
            "tea bag",
            "black tea",
            "green tea",
            "club soda",
            "soda water",
            "sparkling water",
            "tonic water",
            "kombucha",
        ),
    ),
    (
        IngredientCategory.ALCOHOL,
        (
            "wine",
            "beer",
            "vodka",
            "bourbon",
            "whiskey",
            "whisky",
            "brandy",
            "tequila",
            "liqueur",
            "sherry",
            "cognac",
            "vermouth",
            "champagne",
            "prosecco",
        ),
    ),
    (
        IngredientCategory.NUTS_SEEDS,
        (
            "almond",
            "walnut",
            "pecan",
            "cashew",
            "peanut",
            "pistachio",
            "hazelnut",
            "macadamia",
            "pine nut",
            "sunflower seed",
            "pumpkin seed",
            "sesame seed",
            "chia seed",
            "flax seed",
            "flaxseed",
            "hemp seed",
            "poppy seed",
        ),
    ),
    (
        IngredientCategory.GRAINS_PASTA,
        (
            "rice",
            "pasta",
            "spaghetti",
            "penne",
            "fettuccine",
            "linguine",
            "macaroni",
            "noodle",
            "couscous",
            "quinoa",
            "barley",
            "oat",
            "farro",
            "bulgur",
            "polenta",
            "cornmeal",
            "bread",
            "tortilla",
            "pita",
            "bun",
            "roll",
            "crouton",
            "panko",
        ),
    ),
    (
        IngredientCategory.MEAT_SEAFOOD,
        (
            "chicken",
            "beef",
            "pork",
            "lamb",
            "turkey",
            "bacon",
            "sausage",
            "ham",
            "steak",
            "ground meat",
            "shrimp",
            "salmon",
            "tuna",
            "cod",
            "tilapia",
            "crab",
            "lobster",
            "scallop",
            "mussel",
            "clam",
            "prosciutto",
            "pancetta",
            "chorizo",
            "fish",
            "seafood",
        ),
    ),
    (
        IngredientCategory.DAIRY_EGGS,
        (
            "milk",
            "cream",
            "butter",
            "cheese",
            "yogurt",
            "egg",
            "parmesan",
            "mozzarella",
            "cheddar",
            "feta",
            "ricotta",
            "gouda",
            "brie",
            "gruyere",
            "mascarpone",
            "half and half",
            "ghee",
        ),
    ),
    (
        IngredientCategory.DRY_GOODS_BAKING,
        (
            "flour",
            "sugar",
            "baking powder",
            "baking soda",
            "yeast",
            "cornstarch",
            "cocoa",
            "chocolate",
            "honey",
            "maple syrup",
            "molasses",
            "agave",
            "gelatin",
            "pectin",
        ),
    ),
    (
        IngredientCategory.PRODUCE,
        (
            "onion",
            "garlic",
            "tomato",
            "potato",
            "carrot",
            "celery",
            "lettuce",
            "spinach",
            "kale",
            "broccoli",
            "cauliflower",
            "zucchini",
            "squash",
            "mushroom",
            "corn",
            "pea",
            "bean",
            "cucumber",
            "avocado",
            "lemon",
            "lime",
            "orange",
            "apple",
            "banana",
            "berry",
            "berries",
            "grape",
            "mango",
            "pineapple",
            "peach",
            "pear",
            "melon",
            "cherry",
            "plum",
            "fig",
            "cabbage",
            "asparagus",
            "artichoke",
            "eggplant",
            "radish",
            "turnip",
            "beet",
            "jalape",
            "scallion",
            "shallot",
            "leek",
            "chive",
            "arugula",
            "romaine",
            "bok choy",
            "edamame",
        ),
    ),
)


def categorize_ingredient(name: str) -> IngredientCategory:
    """Classify an ingredient name; the first keyword hit in priority order wins."""
    lowered = name.lower()
    for category, keywords in CATEGORY_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return category
    return IngredientCategory.OTHER


def group_ingredients(ingredients: list[str]) -> list[IngredientGroup]:
    """
    Bucket ingredient lines by category, in display order.

    Every line keeps its position in the input as ``original_index``.
    Section-header entries are not matched against the keyword tables and
    land in Other, so their positions survive grouping.
    """
    buckets: dict[IngredientCategory, list[CategorizedIngredient]] = {}
    for index, raw in enumerate(ingredients):
        parsed = parse_ingredient(raw)
        if is_section_header(raw.strip()):
            category = IngredientCategory.OTHER
        else:
            category = categorize_ingredient(parsed.name)
        buckets.setdefault(category, []).append(
            CategorizedIngredient(original_index=index, raw=raw, parsed=parsed)
        )

    return [
        IngredientGroup(category=category, items=buckets[category])
        for category in IngredientCategory
        if category in buckets
    ]
