import html
from enum import Enum

from pydantic import BaseModel, model_validator


class ParsedIngredient(BaseModel):
    """Structured ingredient data extracted from a raw ingredient string."""

    quantity: float | None = None
    unit: str | None = None
    name: str
    prep_note: str | None = None
    original: str


class IngredientCategory(str, Enum):
    """Grocery aisles, declared in display order."""

    PRODUCE = "Produce"
    MEAT_SEAFOOD = "Meat & Seafood"
    DAIRY_EGGS = "Dairy & Eggs"
    DRY_GOODS_BAKING = "Dry Goods & Baking"
    SPICES_SEASONINGS = "Spices & Seasonings"
    OILS_CONDIMENTS = "Oils & Condiments"
    CANNED_JARRED = "Canned & Jarred"
    GRAINS_PASTA = "Grains & Pasta"
    NUTS_SEEDS = "Nuts & Seeds"
    BEVERAGES = "Beverages"
    ALCOHOL = "Alcohol"
    OTHER = "Other"


class CategorizedIngredient(BaseModel):
    original_index: int
    raw: str
    parsed: ParsedIngredient


class IngredientGroup(BaseModel):
    category: IngredientCategory
    items: list[CategorizedIngredient]


class ExtractedRecipe(BaseModel):
    title: str
    source_url: str
    image: str | None = None
    ingredients: list[str]
    instructions: list[str]
    prep_time: str | None = None
    cook_time: str | None = None
    total_time: str | None = None
    servings: str | None = None
    author: str | None = None
    cuisine_type: str | None = None

    @model_validator(mode="after")
    def clean_text(self) -> "ExtractedRecipe":
        """Decode HTML entities, strip whitespace, and drop blank list entries."""
        self.title = html.unescape(self.title).strip()
        self.ingredients = [
            s for s in (html.unescape(s).strip() for s in self.ingredients) if s
        ]
        self.instructions = [
            s for s in (html.unescape(s).strip() for s in self.instructions) if s
        ]
        return self

    def has_content(self) -> bool:
        return bool(self.ingredients or self.instructions)


class ParseError(Exception):
    def __init__(self, error_type: str, message: str):
        self.error_type = error_type
        self.message = message
        super().__init__(message)
