"""Data models for the pantry-aware meal planner."""
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import FrozenSet, List, Optional, Tuple


DAYS_IN_WEEK = 7
MAX_USES_PER_WEEK = 3
NO_EXPIRY_DAYS = 100  # Days-until-expiry reported for items without a date
MIN_MEALS_PER_DAY = 1
MAX_MEALS_PER_DAY = 3


class FoodCategory(Enum):
    """Pantry item categories."""

    FRUITS = "fruits"
    VEGETABLES = "vegetables"
    DAIRY = "dairy"
    MEAT = "meat"
    SEAFOOD = "seafood"
    GRAINS = "grains"
    BAKERY = "bakery"
    CANNED = "canned"
    FROZEN = "frozen"
    SNACKS = "snacks"
    BEVERAGES = "beverages"
    CONDIMENTS = "condiments"
    SPICES = "spices"
    OTHER = "other"

    @classmethod
    def from_string(cls, value: Optional[str]) -> "FoodCategory":
        """Convert a category string to FoodCategory.

        Args:
            value: Category name (case-insensitive)

        Returns:
            Matching FoodCategory, or OTHER if unknown or empty
        """
        if not value:
            return cls.OTHER
        value = str(value).strip().lower()
        for category in cls:
            if category.value == value:
                return category
        return cls.OTHER


class MealType(Enum):
    """Meal types in slot order."""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"

    @classmethod
    def for_meals_per_day(cls, meals_per_day: int) -> List["MealType"]:
        """Return the first ``meals_per_day`` meal types in slot order."""
        return list(cls)[:meals_per_day]

    @classmethod
    def from_string(cls, value: str) -> "MealType":
        """Parse a meal type string.

        Raises:
            ValueError: If value is not breakfast, lunch or dinner
        """
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown meal type: {value!r}") from None

    @property
    def order(self) -> int:
        return list(MealType).index(self)


@dataclass(frozen=True)
class PantryItem:
    """A pantry item as seen by one planning run (read-only snapshot)."""

    name: str
    expiry_date: Optional[date] = None
    category: FoodCategory = FoodCategory.OTHER


@dataclass(frozen=True)
class RecipeIngredient:
    """An ingredient line of a recipe."""

    name: str
    raw_amount_text: str = ""  # e.g. "2 cups", kept for display only


@dataclass(frozen=True)
class Recipe:
    """Represents a candidate recipe."""

    id: str
    title: str
    ingredients: Tuple[RecipeIngredient, ...] = ()
    cuisines: FrozenSet[str] = frozenset()
    popularity: int = 0
    image_url: str = ""

    def __post_init__(self):
        # Accept lists/sets from callers and store immutable copies
        object.__setattr__(self, "ingredients", tuple(self.ingredients))
        object.__setattr__(self, "cuisines", frozenset(self.cuisines))

    def ingredient_names(self) -> List[str]:
        """Lowercased ingredient names, de-duplicated in recipe order."""
        names: List[str] = []
        seen = set()
        for ingredient in self.ingredients:
            name = (ingredient.name or "").strip().lower()
            if name and name not in seen:
                seen.add(name)
                names.append(name)
        return names


@dataclass(frozen=True)
class CalculatedScore:
    """Score breakdown for one recipe against one plan state."""

    base_score: float
    overlap_bonus: float
    total_score: float


@dataclass(frozen=True)
class ScoredRecipe:
    """A recipe together with its most recent score."""

    recipe: Recipe
    calculated_score: CalculatedScore
    is_user_selected: bool = False

    @property
    def score(self) -> float:
        return self.calculated_score.total_score

    @property
    def id(self) -> str:
        return self.recipe.id


@dataclass(frozen=True)
class MealPlanItem:
    """A recipe committed to one (day, meal type) slot."""

    id: str
    recipe_id: str
    title: str
    day_index: int  # 0-6
    meal_type: MealType
    score: float
    ingredients: FrozenSet[str] = frozenset()
    image_url: str = ""
    calculated_score: Optional[CalculatedScore] = None
    pinned: bool = False

    @property
    def slot(self) -> Tuple[int, MealType]:
        return (self.day_index, self.meal_type)


@dataclass
class PlanningPreferences:
    """User planning preferences."""

    meals_per_day: int = 3
    dietary_preferences: List[str] = field(default_factory=list)
    cuisine_preferences: List[str] = field(default_factory=list)

    def __post_init__(self):
        """Validate meals_per_day is in [1, 3]."""
        if (
            not isinstance(self.meals_per_day, int)
            or self.meals_per_day < MIN_MEALS_PER_DAY
            or self.meals_per_day > MAX_MEALS_PER_DAY
        ):
            raise ValueError(
                f"meals_per_day must be an integer in [{MIN_MEALS_PER_DAY}, {MAX_MEALS_PER_DAY}]; "
                f"got {self.meals_per_day}"
            )

    @property
    def meal_types(self) -> List[MealType]:
        return MealType.for_meals_per_day(self.meals_per_day)

    @property
    def slots_needed(self) -> int:
        return DAYS_IN_WEEK * self.meals_per_day


@dataclass(frozen=True)
class FillReport:
    """How many slots a plan filled out of how many were needed."""

    slots_filled: int
    slots_needed: int

    @property
    def is_complete(self) -> bool:
        return self.slots_filled >= self.slots_needed


# (day_index, meal_type, recipe_id)
SlotAssignment = Tuple[int, MealType, str]
