"""Local (JSON-backed) recipe catalog provider.

Wraps RecipeDB so the orchestrator can program against
:class:`RecipeCatalogProvider` without knowing the data source.
"""

from typing import List, Optional, Sequence

from pantryplan.data_layer.models import Recipe
from pantryplan.data_layer.recipe_db import RecipeDB
from pantryplan.providers.diet import filter_by_diet
from pantryplan.providers.recipe_provider import RecipeCatalogProvider
from pantryplan.scoring.ingredient_matcher import IngredientMatcher


class LocalRecipeProvider(RecipeCatalogProvider):
    """Provider backed by a local JSON recipe catalog.

    A recipe is returned when it uses any of the requested ingredients or
    belongs to one of the preferred cuisines. Catalog order is kept.
    """

    def __init__(self, recipe_db: RecipeDB, matcher: Optional[IngredientMatcher] = None) -> None:
        self._recipe_db = recipe_db
        self._matcher = matcher or IngredientMatcher()

    def fetch_recipes(self,
                      ingredients: Sequence[str],
                      dietary_preferences: Sequence[str] = (),
                      cuisine_preferences: Sequence[str] = ()) -> List[Recipe]:
        cuisines = {c.lower() for c in cuisine_preferences}
        wanted = [i for i in ingredients if i and i.strip()]

        found = []
        for recipe in self._recipe_db.get_all_recipes():
            if cuisines & recipe.cuisines:
                found.append(recipe)
                continue
            names = recipe.ingredient_names()
            if any(self._matcher.matches(name, ing) for name in names for ing in wanted):
                found.append(recipe)
        return filter_by_diet(found, dietary_preferences)
