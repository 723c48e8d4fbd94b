"""Recipe database for loading recipes from JSON."""
import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from pantryplan.data_layer.models import Recipe, RecipeIngredient


def parse_recipe(recipe_data: Dict[str, Any]) -> Recipe:
    """Parse a single recipe from dictionary data.

    Ingredients may be given as objects ({"name", "amount"}) or plain strings.

    Args:
        recipe_data: Dictionary containing recipe data

    Returns:
        Recipe object

    Raises:
        KeyError: If id or title is missing
    """
    ingredients = []
    for ing_data in recipe_data.get("ingredients", []):
        if isinstance(ing_data, str):
            ingredients.append(RecipeIngredient(name=ing_data))
        else:
            ingredients.append(RecipeIngredient(
                name=ing_data["name"],
                raw_amount_text=str(ing_data.get("amount", "") or ""),
            ))

    return Recipe(
        id=str(recipe_data["id"]),
        title=recipe_data["title"],
        ingredients=ingredients,
        cuisines=frozenset(c.lower() for c in recipe_data.get("cuisines", []) or []),
        popularity=int(recipe_data.get("popularity", 0) or 0),
        image_url=recipe_data.get("image_url", "") or "",
    )


def recipe_to_dict(recipe: Recipe) -> Dict[str, Any]:
    """Inverse of parse_recipe (cuisines sorted)."""
    return {
        "id": recipe.id,
        "title": recipe.title,
        "ingredients": [
            {"name": ing.name, "amount": ing.raw_amount_text} for ing in recipe.ingredients
        ],
        "cuisines": sorted(recipe.cuisines),
        "popularity": recipe.popularity,
        "image_url": recipe.image_url,
    }


class RecipeDB:
    """Database for managing recipes loaded from JSON."""

    def __init__(self, json_path: str):
        """Initialize recipe database from JSON file.

        Args:
            json_path: Path to JSON file containing {"recipes": [...]}
        """
        self.json_path = Path(json_path)
        self._recipes: List[Recipe] = []
        self._load_recipes()

    def _load_recipes(self):
        """Load recipes from JSON file."""
        with open(self.json_path, "r") as f:
            data = json.load(f)

        for recipe_data in data.get("recipes", []):
            self._recipes.append(parse_recipe(recipe_data))

    def get_all_recipes(self) -> List[Recipe]:
        """Get all recipes in the database.

        Returns:
            List of all Recipe objects
        """
        return self._recipes.copy()

    def get_recipe_by_id(self, recipe_id: str) -> Optional[Recipe]:
        """Get a recipe by its ID.

        Args:
            recipe_id: Unique recipe identifier

        Returns:
            Recipe object if found, None otherwise
        """
        for recipe in self._recipes:
            if recipe.id == recipe_id:
                return recipe
        return None

    def get_recipes_by_ids(self, recipe_ids: Iterable[str]) -> List[Recipe]:
        """Recipes for the given ids in the given order; unknown ids are skipped."""
        by_id = {r.id: r for r in self._recipes}
        return [by_id[rid] for rid in recipe_ids if rid in by_id]
