"""Ingredient name matching between recipe lines and pantry items.

Matching is deliberately lenient: a recipe that asks for "chicken" should
be able to use the "Chicken breast" sitting in the pantry.

Rules, applied in order to normalized names:
- equal, or one is a substring of the other
- same singular form (eggs/egg, tomatoes/tomato, berries/berry)
- both belong to the same synonym family (pasta/spaghetti, onion/shallot)

DESIGN DECISIONS:
- Descriptors are removed as whole words only (not substrings)
- Multi-word descriptors are handled before single-word ones
- Pure functions; no state is shared between calls
"""

import re
from typing import Dict, Iterable, List, Optional, Set

from pantryplan.data_layer.models import PantryItem


DESCRIPTORS: Set[str] = {
    "fresh", "dried", "frozen", "organic", "raw", "cooked",
    "diced", "sliced", "minced", "chopped", "ripe",
    "large", "medium", "small", "extra large",
}

# Base ingredient -> names that count as the same thing when shopping
SYNONYMS: Dict[str, List[str]] = {
    "chicken": ["poultry", "hen", "fowl", "chicken breast", "chicken thigh", "chicken wing"],
    "beef": ["steak", "ground beef", "chuck", "sirloin"],
    "pork": ["ham", "bacon", "sausage"],
    "fish": ["salmon", "tuna", "cod", "tilapia", "seafood"],
    "onion": ["shallot", "scallion", "spring onion", "green onion"],
    "potato": ["spud", "sweet potato", "yam"],
    "tomato": ["cherry tomato", "grape tomato", "roma tomato"],
    "pepper": ["bell pepper", "chili pepper", "jalapeno"],
    "rice": ["basmati", "jasmine rice", "brown rice"],
    "pasta": ["spaghetti", "noodle", "macaroni", "penne", "fettuccine"],
}

_SORTED_DESCRIPTORS = sorted(DESCRIPTORS, key=lambda d: (-len(d), d))


def normalize_ingredient_name(name: Optional[str]) -> str:
    """Lowercase, collapse whitespace and drop descriptor words."""
    if not name:
        return ""
    text = name.lower().replace(",", " ")
    text = re.sub(r"\s+", " ", text).strip()
    for descriptor in _SORTED_DESCRIPTORS:
        text = re.sub(r"\b" + re.escape(descriptor) + r"\b", "", text)
    return re.sub(r"\s+", " ", text).strip()


def singularize(name: str) -> str:
    """Basic plural -> singular heuristics for ingredient names."""
    if name.endswith("ies") and len(name) > 3:
        return name[:-3] + "y"
    if name.endswith("oes") and len(name) > 3:
        return name[:-2]
    if name.endswith(("ches", "shes", "sses", "xes")):
        return name[:-2]
    if name.endswith("s") and not name.endswith("ss") and len(name) > 1:
        return name[:-1]
    return name


def _family_of(name: str, synonyms: Dict[str, List[str]]) -> Set[str]:
    families = set()
    for base, variations in synonyms.items():
        if name == base or any(v in name for v in variations):
            families.add(base)
    return families


def ingredients_match(
    recipe_ingredient: str,
    pantry_name: str,
    synonyms: Optional[Dict[str, List[str]]] = None,
) -> bool:
    """Decide whether a recipe ingredient and a pantry item are the same ingredient.

    Args:
        recipe_ingredient: Ingredient name from a recipe
        pantry_name: Name of a pantry item
        synonyms: Synonym families (defaults to SYNONYMS)

    Returns:
        True if the names denote the same ingredient
    """
    recipe_norm = normalize_ingredient_name(recipe_ingredient)
    pantry_norm = normalize_ingredient_name(pantry_name)
    if not recipe_norm or not pantry_norm:
        return False

    if recipe_norm == pantry_norm or recipe_norm in pantry_norm or pantry_norm in recipe_norm:
        return True

    if singularize(recipe_norm) == singularize(pantry_norm):
        return True

    families = _family_of(recipe_norm, synonyms if synonyms is not None else SYNONYMS)
    if families:
        return bool(families & _family_of(pantry_norm, synonyms if synonyms is not None else SYNONYMS))
    return False


class IngredientMatcher:
    """Matches recipe ingredients against a pantry snapshot.

    Usage:
        matcher = IngredientMatcher()
        matcher.matches("eggs", "Egg")  # True
        matcher.matching_items("spinach", pantry)  # pantry items named like spinach
    """

    def __init__(self, extra_synonyms: Optional[Dict[str, List[str]]] = None):
        """Initialize matcher with optional additional synonym families.

        Args:
            extra_synonyms: Extra base -> variations entries (merged into SYNONYMS)
        """
        self.synonyms: Dict[str, List[str]] = {k: list(v) for k, v in SYNONYMS.items()}
        if extra_synonyms:
            for base, variations in extra_synonyms.items():
                self.synonyms.setdefault(base.lower(), []).extend(v.lower() for v in variations)

    def matches(self, recipe_ingredient: str, pantry_name: str) -> bool:
        return ingredients_match(recipe_ingredient, pantry_name, self.synonyms)

    def matching_items(self, recipe_ingredient: str, pantry: Iterable[PantryItem]) -> List[PantryItem]:
        """Pantry items that match ``recipe_ingredient``, in pantry order."""
        return [item for item in pantry if self.matches(recipe_ingredient, item.name)]

    def in_pantry(self, recipe_ingredient: str, pantry: Iterable[PantryItem]) -> bool:
        return any(self.matches(recipe_ingredient, item.name) for item in pantry)
