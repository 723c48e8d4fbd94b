"""Plan explanations and shopping summaries.

Reporting only. Nothing here changes which recipes are planned.
"""

from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Sequence, Union

from pantryplan.data_layer.models import FillReport, MealPlanItem, PantryItem
from pantryplan.scoring.expiry import days_until_expiry, sort_by_urgency
from pantryplan.scoring.ingredient_matcher import IngredientMatcher

# Pantry items expiring within this many days are called out by name
URGENT_DAYS = 3
MAX_NAMED_ITEMS = 5


def shopping_needs(meals: Iterable[MealPlanItem],
                   pantry: Sequence[PantryItem],
                   matcher: Optional[IngredientMatcher] = None) -> List[str]:
    """Distinct planned ingredients no pantry item covers, sorted."""
    matcher = matcher or IngredientMatcher()
    needed = set()
    for meal in meals:
        for name in meal.ingredients:
            if not matcher.in_pantry(name, pantry):
                needed.add(name)
    return sorted(needed)


def pantry_items_used(meals: Iterable[MealPlanItem],
                      pantry: Sequence[PantryItem],
                      matcher: Optional[IngredientMatcher] = None) -> List[PantryItem]:
    """Pantry items at least one planned meal uses, in pantry order."""
    matcher = matcher or IngredientMatcher()
    names = set()
    for meal in meals:
        names.update(meal.ingredients)
    return [item for item in pantry if any(matcher.matches(n, item.name) for n in names)]


def shared_ingredients(meals: Iterable[MealPlanItem]) -> Dict[str, int]:
    """Ingredients used by more than one distinct recipe -> number of recipes."""
    recipes_by_ingredient: Dict[str, set] = {}
    for meal in meals:
        for name in meal.ingredients:
            recipes_by_ingredient.setdefault(name, set()).add(meal.recipe_id)
    return {
        name: len(ids) for name, ids in sorted(recipes_by_ingredient.items()) if len(ids) > 1
    }


def variety_note(pool_size: int, slots_needed: int) -> Optional[str]:
    """Note for plans whose candidate pool is smaller than the week."""
    if pool_size >= slots_needed:
        return None
    return (
        f"Only {pool_size} recipe(s) were available for {slots_needed} slots, so some "
        "recipes repeat and some slots may stay empty. Select more recipes for more variety."
    )


def fill_warning(fill_report: FillReport) -> Optional[str]:
    if fill_report.is_complete:
        return None
    return (
        f"Filled {fill_report.slots_filled} of {fill_report.slots_needed} meal slots; "
        "add more recipes to complete the plan."
    )


def synthesize_explanation(meals: Sequence[MealPlanItem],
                           pantry: Sequence[PantryItem],
                           now: Union[date, datetime],
                           pool_size: int,
                           fill_report: FillReport,
                           relaxed_slots: int = 0,
                           matcher: Optional[IngredientMatcher] = None) -> str:
    """Describe the expiry, overlap and variety strategy behind a plan.

    Args:
        meals: Planned meals
        pantry: Pantry snapshot the plan was built from
        now: Reference moment for expiry
        pool_size: Number of candidate recipes
        fill_report: Slots filled vs needed
        relaxed_slots: Slots filled only after relaxing repetition rules
        matcher: IngredientMatcher (default instance if None)

    Returns:
        Explanation paragraph
    """
    matcher = matcher or IngredientMatcher()
    parts = []

    used = pantry_items_used(meals, pantry, matcher)
    urgent = [
        item for item in sort_by_urgency(used, now)
        if item.expiry_date is not None and days_until_expiry(item, now) <= URGENT_DAYS
    ]
    if urgent:
        names = ", ".join(item.name for item in urgent[:MAX_NAMED_ITEMS])
        parts.append(f"Recipes were chosen to use ingredients that expire soon first ({names}).")
    elif used:
        parts.append(f"The plan uses {len(used)} item(s) already in your pantry.")
    else:
        parts.append("None of the planned recipes use items currently in your pantry.")

    shared = shared_ingredients(meals)
    if shared:
        parts.append(
            f"{len(shared)} ingredient(s) are shared between recipes to keep the shopping list short."
        )

    distinct = len({m.recipe_id for m in meals})
    parts.append(
        f"{distinct} different recipe(s) fill {fill_report.slots_filled} of "
        f"{fill_report.slots_needed} slots, avoiding the same recipe on consecutive days "
        "where possible."
    )
    if relaxed_slots:
        parts.append(f"Repetition rules were relaxed for {relaxed_slots} slot(s).")

    note = variety_note(pool_size, fill_report.slots_needed)
    if note:
        parts.append(note)
    return " ".join(parts)
