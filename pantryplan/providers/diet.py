"""Ingredient-based dietary filtering shared by the catalog providers."""

from typing import List, Sequence

from pantryplan.data_layer.models import Recipe

NON_VEGETARIAN = ("chicken", "beef", "pork", "meat", "fish", "seafood", "lamb")
DAIRY = ("milk", "cheese", "cream", "yogurt", "butter")


def violates_diet(recipe: Recipe, dietary_preferences: Sequence[str]) -> bool:
    """True if any recipe ingredient conflicts with a vegetarian/vegan preference."""
    prefs = {p.lower() for p in dietary_preferences}
    banned: tuple = ()
    if "vegetarian" in prefs:
        banned = NON_VEGETARIAN
    if "vegan" in prefs:
        banned = NON_VEGETARIAN + DAIRY
    if not banned:
        return False
    return any(word in name for name in recipe.ingredient_names() for word in banned)


def filter_by_diet(recipes: List[Recipe],
                   dietary_preferences: Sequence[str],
                   min_results: int = 0) -> List[Recipe]:
    """Drop recipes that break the dietary preferences.

    If filtering would leave fewer than ``min_results`` recipes, the
    unfiltered list is returned instead.
    """
    if not dietary_preferences:
        return recipes
    kept = [r for r in recipes if not violates_diet(r, dietary_preferences)]
    if len(kept) < min_results:
        return recipes
    return kept
