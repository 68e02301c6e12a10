"""FastAPI application for CookSnap."""

import hashlib
import logging

from cachetools import TTLCache
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.middleware.base import BaseHTTPMiddleware

from cooksnap.models import ExtractedRecipe, IngredientGroup, ParsedIngredient, ParseError
from cooksnap.parser.categories import group_ingredients
from cooksnap.parser.ingredients import parse_ingredient, scale_ingredient
from cooksnap.parser.pipeline import parse_recipe

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

EXTRACT_RATE_LIMIT = "30/minute"

# In-memory cache: up to 128 recipes, 30-minute TTL
_recipe_cache: TTLCache[str, ExtractedRecipe] = TTLCache(maxsize=128, ttl=30 * 60)

limiter = Limiter(key_func=get_remote_address)
app = FastAPI(title="CookSnap")
app.state.limiter = limiter


class ExtractRequest(BaseModel):
    url: str
    html: str


class IngredientsRequest(BaseModel):
    ingredients: list[str]


class ScaleRequest(BaseModel):
    ingredients: list[str]
    ratio: float = Field(gt=0)


class ScaleResponse(BaseModel):
    ingredients: list[str]


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(
        status_code=429,
        content={
            "error_type": "rate_limit",
            "error": "You're sending too many requests. Please wait a moment and try again.",
        },
    )


@app.exception_handler(ParseError)
async def parse_error_handler(request: Request, exc: ParseError):
    logger.warning("ParseError [%s] on %s: %s", exc.error_type, request.url.path, exc.message)
    return JSONResponse(
        status_code=422,
        content={"error_type": exc.error_type, "error": exc.message},
    )


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response


app.add_middleware(SecurityHeadersMiddleware)


def _cache_key(url: str, html: str) -> str:
    digest = hashlib.sha256()
    digest.update(url.encode("utf-8"))
    digest.update(b"\0")
    digest.update(html.encode("utf-8"))
    return digest.hexdigest()


@app.post("/extract", response_model=ExtractedRecipe)
@limiter.limit(EXTRACT_RATE_LIMIT)
async def extract(request: Request, payload: ExtractRequest):
    key = _cache_key(payload.url, payload.html)
    cached = _recipe_cache.get(key)
    if cached is not None:
        logger.info("Cache hit for %s", payload.url)
        return cached

    result = parse_recipe(payload.html, payload.url)
    _recipe_cache[key] = result
    logger.info("Served recipe %r from %s", result.title, payload.url)
    return result


@app.post("/ingredients/parse", response_model=list[ParsedIngredient])
async def parse_ingredients(payload: IngredientsRequest):
    return [parse_ingredient(line) for line in payload.ingredients]


@app.post("/ingredients/scale", response_model=ScaleResponse)
async def scale_ingredients(payload: ScaleRequest):
    # Header entries parse without a quantity and come back as written
    scaled = [
        scale_ingredient(parse_ingredient(line), payload.ratio)
        for line in payload.ingredients
    ]
    return ScaleResponse(ingredients=scaled)


@app.post("/ingredients/group", response_model=list[IngredientGroup])
async def group(payload: IngredientsRequest):
    return group_ingredients(payload.ingredients)
