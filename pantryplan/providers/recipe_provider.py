"""Abstract base class for recipe catalog providers.

The orchestrator uses a provider to top up the user's selected recipes with
supplementary candidates. It depends ONLY on this interface; concrete
implementations read a local JSON catalog or a remote recipe API.
"""

from abc import ABC, abstractmethod
from typing import List, Sequence

from pantryplan.data_layer.models import Recipe


class RecipeCatalogProvider(ABC):
    """Abstraction for fetching candidate recipes."""

    @abstractmethod
    def fetch_recipes(self,
                      ingredients: Sequence[str],
                      dietary_preferences: Sequence[str] = (),
                      cuisine_preferences: Sequence[str] = ()) -> List[Recipe]:
        """Return recipes relevant to the given ingredients and preferences.

        Implementations must return complete ``Recipe`` objects (with
        ingredient lists), in the order they should be considered.

        Args:
            ingredients: Ingredient names to search by (pantry items first).
            dietary_preferences: e.g. ["vegetarian"].
            cuisine_preferences: e.g. ["italian", "mexican"].

        Returns:
            List of recipes (possibly empty).

        Raises:
            RecipeFetchError: If the catalog cannot be read at all.
        """
        ...
