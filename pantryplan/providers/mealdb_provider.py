"""TheMealDB-backed recipe catalog provider.

Collects meal ids from several list endpoints (by cuisine/area, category and
ingredient), then looks up full details for each meal so the planner gets
complete ingredient lists.

API Reference: https://www.themealdb.com/api.php

DESIGN DECISIONS:
- A failing list query is logged and skipped; only when every list query
  fails is RecipeFetchError raised
- Details lookups are capped (max_details) to bound the number of requests
- Results are ordered by how many requested ingredients they use (stable)
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

import requests

from pantryplan.data_layer.exceptions import RecipeFetchError
from pantryplan.data_layer.models import Recipe, RecipeIngredient
from pantryplan.providers.diet import filter_by_diet
from pantryplan.providers.recipe_provider import RecipeCatalogProvider
from pantryplan.scoring.ingredient_matcher import IngredientMatcher

logger = logging.getLogger(__name__)

# TheMealDB detail records carry up to 20 ingredient/measure pairs
MAX_INGREDIENT_FIELDS = 20

DEFAULT_CATEGORIES = [
    "Chicken", "Beef", "Vegetarian", "Pasta", "Seafood",
    "Breakfast", "Dessert", "Side", "Starter",
]
# Dietary preferences that name a TheMealDB category directly
CATEGORY_PREFERENCES = {"breakfast", "pasta", "seafood", "dessert", "side", "starter"}
MEAT_CATEGORIES = {"Chicken", "Beef", "Seafood"}

# Pantry names mapped to the short ingredient names TheMealDB indexes
SEARCH_SIMPLIFICATIONS = [
    ("chicken breast", "chicken"), ("beef", "beef"), ("tomato", "tomato"),
    ("spinach", "spinach"), ("avocado", "avocado"), ("pepper", "pepper"),
    ("onion", "onion"), ("garlic", "garlic"), ("potato", "potato"),
    ("carrot", "carrot"), ("broccoli", "broccoli"), ("rice", "rice"),
    ("pasta", "pasta"), ("cheese", "cheese"),
]


def simplify_ingredient(ingredient: str) -> str:
    """Map an ingredient name to the form TheMealDB's filter endpoint expects."""
    lower = ingredient.strip().lower()
    for needle, simplified in SEARCH_SIMPLIFICATIONS:
        if needle in lower:
            return simplified
    simplified = "_".join(lower.split())
    if simplified.endswith("s"):
        simplified = simplified[:-1]
    for suffix in ("_fresh", "_ripe"):
        if simplified.endswith(suffix):
            simplified = simplified[: -len(suffix)]
    return simplified


def meal_to_recipe(meal: Dict[str, Any]) -> Recipe:
    """Convert a TheMealDB detail record into a Recipe."""
    ingredients = []
    for i in range(1, MAX_INGREDIENT_FIELDS + 1):
        name = (meal.get(f"strIngredient{i}") or "").strip()
        if not name:
            continue
        measure = (meal.get(f"strMeasure{i}") or "").strip()
        ingredients.append(RecipeIngredient(name=name, raw_amount_text=measure))

    area = (meal.get("strArea") or "").strip().lower()
    return Recipe(
        id=str(meal["idMeal"]),
        title=meal.get("strMeal") or "",
        ingredients=ingredients,
        cuisines=frozenset([area]) if area and area != "unknown" else frozenset(),
        image_url=meal.get("strMealThumb") or "",
    )


class MealDBRecipeProvider(RecipeCatalogProvider):
    """Provider that fetches recipes from TheMealDB.

    Usage::

        provider = MealDBRecipeProvider()
        recipes = provider.fetch_recipes(["spinach", "eggs"], cuisine_preferences=["italian"])
    """

    BASE_URL = "https://www.themealdb.com/api/json/v1/1"

    def __init__(self,
                 base_url: str = BASE_URL,
                 timeout: float = 10.0,
                 max_details: int = 100,
                 max_ingredient_queries: int = 5,
                 min_diet_results: int = 10,
                 matcher: Optional[IngredientMatcher] = None) -> None:
        """Initialize TheMealDB provider.

        Args:
            base_url: API base URL
            timeout: Per-request timeout in seconds
            max_details: Maximum number of meals to look up in detail
            max_ingredient_queries: Maximum ingredient filter queries per fetch
            min_diet_results: Skip dietary filtering if it would leave fewer recipes
            matcher: IngredientMatcher used to rank results by ingredient use
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_details = max_details
        self.max_ingredient_queries = max_ingredient_queries
        self.min_diet_results = min_diet_results
        self._matcher = matcher or IngredientMatcher()

    def fetch_recipes(self,
                      ingredients: Sequence[str],
                      dietary_preferences: Sequence[str] = (),
                      cuisine_preferences: Sequence[str] = ()) -> List[Recipe]:
        queries = self._list_queries(ingredients, dietary_preferences, cuisine_preferences)

        meal_ids: List[str] = []
        seen = set()
        failures = 0
        for params in queries:
            try:
                meals = self._get("filter.php", params).get("meals") or []
            except RecipeFetchError as e:
                logger.warning("TheMealDB list query %s failed: %s", params, e)
                failures += 1
                continue
            for meal in meals:
                meal_id = str(meal.get("idMeal", ""))
                if meal_id and meal_id not in seen:
                    seen.add(meal_id)
                    meal_ids.append(meal_id)

        if queries and failures == len(queries):
            raise RecipeFetchError("All TheMealDB list queries failed")

        recipes = []
        for meal_id in meal_ids[: self.max_details]:
            recipe = self.get_recipe(meal_id)
            if recipe is not None:
                recipes.append(recipe)
        logger.info("Fetched %d recipes from TheMealDB (%d ids found)", len(recipes), len(meal_ids))

        recipes = filter_by_diet(recipes, dietary_preferences, self.min_diet_results)
        wanted = [i for i in ingredients if i and i.strip()]
        recipes.sort(key=lambda r: -self._pantry_use(r, wanted))
        return recipes

    def get_recipe(self, meal_id: str) -> Optional[Recipe]:
        """Full recipe for one meal id, or None if the lookup fails."""
        try:
            meals = self._get("lookup.php", {"i": meal_id}).get("meals") or []
        except RecipeFetchError as e:
            logger.warning("TheMealDB lookup for %s failed: %s", meal_id, e)
            return None
        if not meals:
            return None
        return meal_to_recipe(meals[0])

    def _list_queries(self,
                      ingredients: Sequence[str],
                      dietary_preferences: Sequence[str],
                      cuisine_preferences: Sequence[str]) -> List[Dict[str, str]]:
        """Parameters of every filter.php query for one fetch, in order."""
        queries = [{"a": c.strip().capitalize()} for c in cuisine_preferences if c.strip()]

        prefs = [p.lower() for p in dietary_preferences]
        categories = [p.capitalize() for p in prefs if p in CATEGORY_PREFERENCES]
        if not categories:
            categories = list(DEFAULT_CATEGORIES)
        if "vegetarian" in prefs or "vegan" in prefs:
            categories = [c for c in categories if c not in MEAT_CATEGORIES]
        queries.extend({"c": c} for c in categories)

        wanted = [i for i in ingredients if i and i.strip()]
        simplified = []
        for ingredient in wanted:
            name = simplify_ingredient(ingredient)
            if name not in simplified:
                simplified.append(name)
        queries.extend({"i": name} for name in simplified[: self.max_ingredient_queries])
        return queries

    def _pantry_use(self, recipe: Recipe, wanted: Sequence[str]) -> int:
        names = recipe.ingredient_names()
        return sum(1 for ing in wanted if any(self._matcher.matches(n, ing) for n in names))

    def _get(self, endpoint: str, params: Dict[str, str]) -> Dict[str, Any]:
        """GET one TheMealDB endpoint.

        Raises:
            RecipeFetchError: If the request fails or returns invalid JSON
        """
        url = f"{self.base_url}/{endpoint}"
        try:
            response = requests.get(url, params=params, timeout=self.timeout)
        except requests.exceptions.Timeout:
            raise RecipeFetchError(f"TheMealDB request to {endpoint} timed out")
        except requests.exceptions.ConnectionError:
            raise RecipeFetchError("Failed to connect to TheMealDB")
        except requests.exceptions.RequestException as e:
            raise RecipeFetchError(f"Request failed: {str(e)}")

        if response.status_code != 200:
            raise RecipeFetchError(f"TheMealDB returned status {response.status_code}")
        try:
            data = response.json()
        except ValueError:
            raise RecipeFetchError(f"TheMealDB returned invalid JSON for {endpoint}")
        if not isinstance(data, dict):
            raise RecipeFetchError(f"TheMealDB returned unexpected payload for {endpoint}")
        return data
