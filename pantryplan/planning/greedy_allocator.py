"""Deterministic greedy slot allocation.

Walks the week day by day and, for every meal type the user wants, commits the
highest scoring eligible recipe. Scores are recomputed against the current
plan before every pick, so the overlap bonus and repetition penalty reflect
what has already been committed.

Eligibility is relaxed in tiers when nothing qualifies:

    0  strict: under the weekly cap and not used yesterday or today
    1  under the weekly cap (consecutive days allowed)
    2  reset usage counters of recipes idle for more than two days, retry tier 1
    3  whole pool

With ``enforce_weekly_cap`` on (the default) no tier may put a recipe in the
plan more than ``max_uses`` times. Usage counters never exceed the committed
meals, so tiers 2 and 3 cannot find anything tier 1 rejected: they are no-ops
while the cap is enforced and only pick recipes with
``enforce_weekly_cap=False``. Slots nobody qualifies for stay empty.
"""

import logging
from dataclasses import dataclass, field
from typing import Collection, List, Optional, Sequence, Tuple

from pantryplan.data_layer.models import (
    DAYS_IN_WEEK,
    MAX_USES_PER_WEEK,
    CalculatedScore,
    FillReport,
    MealPlanItem,
    MealType,
    PantryItem,
    PlanningPreferences,
    Recipe,
)
from pantryplan.planning.plan_state import UNUSED_DAY, PlanState
from pantryplan.scoring.recipe_scorer import RecipeScorer

logger = logging.getLogger(__name__)

TIER_STRICT = 0
TIER_ALLOW_CONSECUTIVE = 1
TIER_RESET_USAGE = 2
TIER_WHOLE_POOL = 3

# Days a recipe must sit idle before tier 2 resets its usage counter
RESET_IDLE_DAYS = 2


@dataclass
class AllocationResult:
    """Outcome of one greedy allocation pass."""

    meals: List[MealPlanItem]
    fill_report: FillReport
    # (day_index, meal_type, tier) for every slot the allocator filled
    relaxations: List[Tuple[int, MealType, int]] = field(default_factory=list)
    unfilled_slots: List[Tuple[int, MealType]] = field(default_factory=list)

    @property
    def relaxed_slots(self) -> List[Tuple[int, MealType, int]]:
        """Slots filled only after relaxing the strict rules."""
        return [entry for entry in self.relaxations if entry[2] > TIER_STRICT]


class GreedyAllocator:
    """Fills empty week slots one at a time with the best scoring recipe."""

    def __init__(self,
                 scorer: RecipeScorer,
                 max_uses: int = MAX_USES_PER_WEEK,
                 enforce_weekly_cap: bool = True):
        """Initialize allocator.

        Args:
            scorer: RecipeScorer used to rank candidates against the live plan
            max_uses: Maximum times one recipe may be used in the week
            enforce_weekly_cap: Keep the max_uses cap even in relaxed tiers
        """
        if max_uses < 1:
            raise ValueError(f"max_uses must be at least 1, got {max_uses}")
        self.scorer = scorer
        self.max_uses = max_uses
        self.enforce_weekly_cap = enforce_weekly_cap

    def allocate(self,
                 pool: Sequence[Recipe],
                 pantry: Collection[PantryItem],
                 preferences: PlanningPreferences,
                 state: Optional[PlanState] = None) -> AllocationResult:
        """Fill every empty slot of the week.

        Occupied slots (pinned or assisted picks already in ``state``) are
        skipped. Never raises for an empty pool; the slots just stay empty.

        Args:
            pool: Candidate recipes in priority order (earlier wins ties)
            pantry: Pantry snapshot
            preferences: Planning preferences (meals_per_day)
            state: Plan to extend in place (a fresh PlanState if None)

        Returns:
            AllocationResult with the ordered meals and fill report
        """
        if state is None:
            state = PlanState()

        relaxations: List[Tuple[int, MealType, int]] = []
        unfilled: List[Tuple[int, MealType]] = []

        for day in range(DAYS_IN_WEEK):
            for meal_type in preferences.meal_types:
                if state.is_occupied(day, meal_type):
                    continue

                picked = self._pick(pool, pantry, state, day)
                if picked is None:
                    logger.debug("Day %d %s: no eligible recipe, slot left empty", day, meal_type.value)
                    unfilled.append((day, meal_type))
                    continue

                recipe, score, tier = picked
                state.commit(recipe, day, meal_type, calculated_score=score)
                relaxations.append((day, meal_type, tier))
                logger.debug(
                    "Day %d %s: committed '%s' (score %.2f, tier %d)",
                    day, meal_type.value, recipe.id, score.total_score, tier,
                )

        meals = [
            m for m in state.ordered_meals() if m.meal_type in preferences.meal_types
        ]
        fill_report = FillReport(slots_filled=len(meals), slots_needed=preferences.slots_needed)
        if not fill_report.is_complete:
            logger.info(
                "Greedy allocation filled %d of %d slots",
                fill_report.slots_filled, fill_report.slots_needed,
            )
        return AllocationResult(
            meals=meals,
            fill_report=fill_report,
            relaxations=relaxations,
            unfilled_slots=unfilled,
        )

    def _pick(self,
              pool: Sequence[Recipe],
              pantry: Collection[PantryItem],
              state: PlanState,
              day: int) -> Optional[Tuple[Recipe, CalculatedScore, int]]:
        """Best recipe for one slot and the tier it was found in."""
        if not pool:
            return None

        for tier in (TIER_STRICT, TIER_ALLOW_CONSECUTIVE, TIER_RESET_USAGE, TIER_WHOLE_POOL):
            if tier == TIER_RESET_USAGE:
                for recipe in pool:
                    last = state.last_used(recipe.id)
                    if last != UNUSED_DAY and day - last > RESET_IDLE_DAYS:
                        state.reset_usage(recipe.id)

            eligible = [r for r in pool if self._eligible(r, state, day, tier)]
            best = self._best(eligible, pantry, state)
            if best is not None:
                return best[0], best[1], tier
        return None

    def _eligible(self, recipe: Recipe, state: PlanState, day: int, tier: int) -> bool:
        if self.enforce_weekly_cap and state.uses_this_week(recipe.id) >= self.max_uses:
            return False
        if tier == TIER_WHOLE_POOL:
            return True
        if state.uses(recipe.id) >= self.max_uses:
            return False
        if tier == TIER_STRICT:
            last = state.last_used(recipe.id)
            return last == UNUSED_DAY or day - last > 1
        return True

    def _best(self,
              candidates: List[Recipe],
              pantry: Collection[PantryItem],
              state: PlanState) -> Optional[Tuple[Recipe, CalculatedScore]]:
        """Highest total score; the first candidate seen wins ties."""
        best: Optional[Tuple[Recipe, CalculatedScore]] = None
        for recipe in candidates:
            score = self.scorer.score(recipe, pantry, state)
            if best is None or score.total_score > best[1].total_score:
                best = (recipe, score)
        return best
