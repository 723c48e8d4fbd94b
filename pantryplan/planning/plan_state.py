"""Working state of one planning run.

PlanState is owned by exactly one run. It holds the committed meals and the
counters derived from them:

- usage_count: recipe_id -> times committed (may be reset by the allocator's
  tier-2 relaxation)
- last_used_day: recipe_id -> most recent day index (-1 when unused)
- claimed_ingredients: union of the ingredients of all committed meals

claimed_ingredients is always exactly the union over committed_meals; every
mutation goes through commit/remove/swap/clear to keep it that way.
"""

import re
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, List, Mapping, Optional, Set, Tuple

from pantryplan.data_layer.exceptions import SlotOccupiedError
from pantryplan.data_layer.models import (
    DAYS_IN_WEEK,
    CalculatedScore,
    MealPlanItem,
    MealType,
    Recipe,
    SlotAssignment,
)

UNUSED_DAY = -1

_MEAL_ID_RE = re.compile(r"^meal-(\d+)-")


def _id_sequence(item_id: str) -> int:
    """Sequence number of a generated meal id (0 for foreign ids)."""
    match = _MEAL_ID_RE.match(item_id)
    return int(match.group(1)) if match else 0


def validate_day_index(day_index: int) -> None:
    """Validate day_index is in [0, 6]."""
    if not isinstance(day_index, int) or day_index < 0 or day_index >= DAYS_IN_WEEK:
        raise ValueError(f"day_index must be an integer in [0, {DAYS_IN_WEEK - 1}]; got {day_index}")


@dataclass
class PlanState:
    """Mutable working set for one planning run."""

    committed_meals: List[MealPlanItem] = field(default_factory=list)
    usage_count: Dict[str, int] = field(default_factory=dict)
    last_used_day: Dict[str, int] = field(default_factory=dict)
    claimed_ingredients: Set[str] = field(default_factory=set)
    _next_seq: int = field(default=1, repr=False)

    # --- Construction ---

    @classmethod
    def from_meals(cls, meals: Iterable[MealPlanItem]) -> "PlanState":
        """Build a state pre-seeded with already committed meals (e.g. pinned slots).

        Raises:
            SlotOccupiedError: If two meals share a slot
        """
        state = cls()
        for meal in meals:
            validate_day_index(meal.day_index)
            existing = state.meal_for_slot(meal.day_index, meal.meal_type)
            if existing is not None:
                raise SlotOccupiedError(meal.day_index, meal.meal_type.value, existing.recipe_id)
            state.committed_meals.append(meal)
        state._recompute()
        state._next_seq = max((_id_sequence(m.id) for m in state.committed_meals), default=0) + 1
        return state

    @classmethod
    def from_assignments(cls,
                         assignments: Iterable[SlotAssignment],
                         recipes_by_id: Mapping[str, Recipe],
                         pinned: bool = True) -> "PlanState":
        """Build a state from (day_index, meal_type, recipe_id) triples.

        Raises:
            KeyError: If a recipe_id is not in recipes_by_id
            SlotOccupiedError: If two assignments share a slot
        """
        state = cls()
        for day_index, meal_type, recipe_id in assignments:
            state.commit(recipes_by_id[recipe_id], day_index, meal_type, pinned=pinned)
        return state

    # --- Queries ---

    def is_occupied(self, day_index: int, meal_type: MealType) -> bool:
        return self.meal_for_slot(day_index, meal_type) is not None

    def meal_for_slot(self, day_index: int, meal_type: MealType) -> Optional[MealPlanItem]:
        for meal in self.committed_meals:
            if meal.day_index == day_index and meal.meal_type == meal_type:
                return meal
        return None

    def meals_for_day(self, day_index: int) -> List[MealPlanItem]:
        """Meals on one day in meal-type order."""
        meals = [m for m in self.committed_meals if m.day_index == day_index]
        return sorted(meals, key=lambda m: m.meal_type.order)

    def ordered_meals(self) -> List[MealPlanItem]:
        """All committed meals ordered by (day, meal type)."""
        return sorted(self.committed_meals, key=lambda m: (m.day_index, m.meal_type.order))

    def get(self, item_id: str) -> Optional[MealPlanItem]:
        for meal in self.committed_meals:
            if meal.id == item_id:
                return meal
        return None

    def last_used(self, recipe_id: str) -> int:
        return self.last_used_day.get(recipe_id, UNUSED_DAY)

    def uses(self, recipe_id: str) -> int:
        """Current (possibly reset) usage counter for a recipe."""
        return self.usage_count.get(recipe_id, 0)

    def uses_this_week(self, recipe_id: str) -> int:
        """Committed meals for a recipe, unaffected by counter resets."""
        return sum(1 for m in self.committed_meals if m.recipe_id == recipe_id)

    def days_used(self, recipe_id: str) -> int:
        """Distinct days the recipe is already planned on."""
        return len({m.day_index for m in self.committed_meals if m.recipe_id == recipe_id})

    def used_near(self, recipe_id: str, day_index: int) -> bool:
        """True if the recipe is planned on day_index or a neighbouring day."""
        return any(
            m.recipe_id == recipe_id and abs(m.day_index - day_index) <= 1
            for m in self.committed_meals
        )

    def pinned_meals(self) -> List[MealPlanItem]:
        return [m for m in self.committed_meals if m.pinned]

    def assignments(self) -> List[Tuple[int, MealType, str]]:
        return [(m.day_index, m.meal_type, m.recipe_id) for m in self.ordered_meals()]

    @property
    def slots_filled(self) -> int:
        return len(self.committed_meals)

    # --- Mutations ---

    def commit(self,
               recipe: Recipe,
               day_index: int,
               meal_type: MealType,
               calculated_score: Optional[CalculatedScore] = None,
               pinned: bool = False) -> MealPlanItem:
        """Commit ``recipe`` to an empty slot and update the counters.

        Raises:
            ValueError: If day_index is out of range
            SlotOccupiedError: If the slot already holds a meal
        """
        validate_day_index(day_index)
        existing = self.meal_for_slot(day_index, meal_type)
        if existing is not None:
            raise SlotOccupiedError(day_index, meal_type.value, existing.recipe_id)

        item = MealPlanItem(
            id=self._new_id(recipe.id),
            recipe_id=recipe.id,
            title=recipe.title,
            day_index=day_index,
            meal_type=meal_type,
            score=calculated_score.total_score if calculated_score else 0.0,
            ingredients=frozenset(recipe.ingredient_names()),
            image_url=recipe.image_url,
            calculated_score=calculated_score,
            pinned=pinned,
        )
        self.committed_meals.append(item)
        self.usage_count[recipe.id] = self.uses(recipe.id) + 1
        self.last_used_day[recipe.id] = max(self.last_used(recipe.id), day_index)
        self.claimed_ingredients.update(item.ingredients)
        return item

    def remove(self, item_id: str) -> MealPlanItem:
        """Remove a committed meal by id and recompute the counters.

        Raises:
            KeyError: If no meal has this id
        """
        item = self.get(item_id)
        if item is None:
            raise KeyError(f"No meal with id '{item_id}' in plan")
        self.committed_meals.remove(item)
        self._recompute()
        return item

    def swap(self, first_id: str, second_id: str) -> None:
        """Exchange the slots of two committed meals.

        Raises:
            KeyError: If either id is unknown
        """
        first = self.get(first_id)
        second = self.get(second_id)
        if first is None or second is None:
            missing = first_id if first is None else second_id
            raise KeyError(f"No meal with id '{missing}' in plan")
        if first.id == second.id:
            return
        i = self.committed_meals.index(first)
        j = self.committed_meals.index(second)
        self.committed_meals[i] = replace(first, day_index=second.day_index, meal_type=second.meal_type)
        self.committed_meals[j] = replace(second, day_index=first.day_index, meal_type=first.meal_type)
        self._recompute()

    def clear(self, keep_pinned: bool = False) -> None:
        """Drop committed meals (all of them, or all but the pinned ones)."""
        if keep_pinned:
            self.committed_meals = [m for m in self.committed_meals if m.pinned]
        else:
            self.committed_meals = []
        self._recompute()

    def reset_usage(self, recipe_id: str) -> None:
        """Zero the usage counter of one recipe (committed meals are kept)."""
        self.usage_count[recipe_id] = 0

    # --- Internal helpers ---

    def _new_id(self, recipe_id: str) -> str:
        seq = self._next_seq
        self._next_seq += 1
        return f"meal-{seq:03d}-{recipe_id}"

    def _recompute(self) -> None:
        """Rebuild counters and the claimed set from committed_meals."""
        self.usage_count = {}
        self.last_used_day = {}
        self.claimed_ingredients = set()
        for meal in self.committed_meals:
            self.usage_count[meal.recipe_id] = self.usage_count.get(meal.recipe_id, 0) + 1
            self.last_used_day[meal.recipe_id] = max(
                self.last_used_day.get(meal.recipe_id, UNUSED_DAY), meal.day_index
            )
            self.claimed_ingredients.update(meal.ingredients)
