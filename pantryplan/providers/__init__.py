"""Provider abstraction layer for recipe catalogs.

This package decouples the orchestrator from concrete recipe sources
(local JSON vs. TheMealDB).
"""

from pantryplan.providers.recipe_provider import RecipeCatalogProvider
from pantryplan.providers.local_provider import LocalRecipeProvider
from pantryplan.providers.mealdb_provider import MealDBRecipeProvider

__all__ = [
    "RecipeCatalogProvider",
    "LocalRecipeProvider",
    "MealDBRecipeProvider",
]
