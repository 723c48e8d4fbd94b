"""Planning run orchestration.

One run moves through these stages:

    START -> BUILD_CANDIDATE_POOL -> TRY_ASSISTED
          -> ASSISTED_OK -> COMMIT_ASSISTED (-> RUN_GREEDY for any gaps)
          -> ASSISTED_FAILED -> RUN_GREEDY
          -> DONE

The assisted planner is tried once. Any failure sends the run to the greedy
allocator, which always terminates. The caller only sees the result once the
run reaches DONE.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence

from pantryplan.data_layer.exceptions import (
    AssistedPlannerError,
    NoRecipesError,
    RecipeFetchError,
)
from pantryplan.data_layer.models import (
    DAYS_IN_WEEK,
    FillReport,
    MealPlanItem,
    MealType,
    PantryItem,
    PlanningPreferences,
    Recipe,
    ScoredRecipe,
    SlotAssignment,
)
from pantryplan.planning.assisted_planner import AssistedPlanner
from pantryplan.planning.greedy_allocator import GreedyAllocator
from pantryplan.planning.plan_state import PlanState
from pantryplan.planning.reporting import fill_warning, synthesize_explanation, variety_note
from pantryplan.planning.wire_format import AssistedPlan, build_request
from pantryplan.providers.recipe_provider import RecipeCatalogProvider
from pantryplan.scoring.expiry import sort_by_urgency
from pantryplan.scoring.recipe_scorer import RecipeScorer

logger = logging.getLogger(__name__)


class PlanningStage(Enum):
    START = "START"
    BUILD_CANDIDATE_POOL = "BUILD_CANDIDATE_POOL"
    TRY_ASSISTED = "TRY_ASSISTED"
    ASSISTED_OK = "ASSISTED_OK"
    ASSISTED_FAILED = "ASSISTED_FAILED"
    COMMIT_ASSISTED = "COMMIT_ASSISTED"
    RUN_GREEDY = "RUN_GREEDY"
    DONE = "DONE"


STRATEGY_ASSISTED = "assisted"
STRATEGY_ASSISTED_WITH_GREEDY_FILL = "assisted+greedy"
STRATEGY_GREEDY = "greedy"


@dataclass
class PlanningRequest:
    """Inputs of one run, kept for regenerate."""

    pantry: List[PantryItem]
    selected_recipes: List[Recipe]
    preferences: PlanningPreferences
    pinned: List[SlotAssignment] = field(default_factory=list)


@dataclass
class PlanningResult:
    """Result of a planning run."""

    meals: List[MealPlanItem]
    fill_report: FillReport
    explanation: str
    strategy: str
    explanations: Dict[str, str] = field(default_factory=dict)
    stages: List[PlanningStage] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    pool: List[Recipe] = field(default_factory=list)
    request: Optional[PlanningRequest] = field(default=None, repr=False)
    state: Optional[PlanState] = field(default=None, repr=False)

    @property
    def recipes_by_id(self) -> Dict[str, Recipe]:
        return {r.id: r for r in self.pool}


class PlannerOrchestrator:
    """Runs the assisted planner with a greedy fallback."""

    def __init__(self,
                 scorer: RecipeScorer,
                 allocator: Optional[GreedyAllocator] = None,
                 catalog: Optional[RecipeCatalogProvider] = None,
                 assisted: Optional[AssistedPlanner] = None,
                 max_supplementary: Optional[int] = None):
        """Initialize orchestrator.

        Args:
            scorer: RecipeScorer shared by every stage
            allocator: GreedyAllocator (built from scorer if None)
            catalog: Optional provider of supplementary recipes
            assisted: Optional assisted planner (greedy only if None)
            max_supplementary: Cap on recipes taken from the catalog
        """
        self.scorer = scorer
        self.allocator = allocator or GreedyAllocator(scorer)
        self.catalog = catalog
        self.assisted = assisted
        self.max_supplementary = max_supplementary

    def plan(self,
             pantry: Sequence[PantryItem],
             selected_recipes: Sequence[Recipe],
             preferences: PlanningPreferences,
             pinned: Sequence[SlotAssignment] = ()) -> PlanningResult:
        """Produce a weekly plan.

        Args:
            pantry: Pantry snapshot
            selected_recipes: Recipes the user picked (always in the pool, first)
            preferences: Planning preferences
            pinned: (day_index, meal_type, recipe_id) slots to keep as-is

        Returns:
            PlanningResult

        Raises:
            NoRecipesError: If the candidate pool is empty
        """
        request = PlanningRequest(
            pantry=list(pantry),
            selected_recipes=list(selected_recipes),
            preferences=preferences,
            pinned=list(pinned),
        )
        stages = [PlanningStage.START]
        warnings: List[str] = []

        stages.append(PlanningStage.BUILD_CANDIDATE_POOL)
        pool = self.build_candidate_pool(request.pantry, request.selected_recipes, preferences, warnings)
        if not pool:
            raise NoRecipesError()
        logger.info("Candidate pool: %d recipes (%d selected)", len(pool), len(request.selected_recipes))

        pantry_snapshot = list(request.pantry)
        selected_ids = {r.id for r in request.selected_recipes}
        state = self._seed_pinned(request.pinned, pool, pantry_snapshot, preferences, warnings)

        stages.append(PlanningStage.TRY_ASSISTED)
        assisted_plan = self._try_assisted(pool, pantry_snapshot, preferences, state, selected_ids)

        strategy = STRATEGY_GREEDY
        relaxed = 0
        if assisted_plan is not None:
            stages.append(PlanningStage.ASSISTED_OK)
            stages.append(PlanningStage.COMMIT_ASSISTED)
            committed = self._commit_assisted(assisted_plan, pool, pantry_snapshot, preferences, state, warnings)
            strategy = STRATEGY_ASSISTED
            if committed == 0:
                warnings.append("Assisted plan had no usable assignments; used rule-based planning.")
                strategy = STRATEGY_GREEDY
        else:
            stages.append(PlanningStage.ASSISTED_FAILED)

        filled = len(self._meals_in_scope(state, preferences))
        if filled < preferences.slots_needed:
            stages.append(PlanningStage.RUN_GREEDY)
            allocation = self.allocator.allocate(pool, pantry_snapshot, preferences, state)
            relaxed = len(allocation.relaxed_slots)
            if strategy == STRATEGY_ASSISTED and allocation.relaxations:
                strategy = STRATEGY_ASSISTED_WITH_GREEDY_FILL

        meals = self._meals_in_scope(state, preferences)
        fill_report = FillReport(slots_filled=len(meals), slots_needed=preferences.slots_needed)

        explanations: Dict[str, str] = {}
        explanation = ""
        if assisted_plan is not None and strategy != STRATEGY_GREEDY:
            explanations = dict(assisted_plan.explanations)
            explanation = assisted_plan.explanation_text()
            note = variety_note(len(pool), fill_report.slots_needed)
            if explanation and note:
                explanation = f"{explanation} {note}"
        if not explanation:
            explanation = synthesize_explanation(
                meals, pantry_snapshot, self.scorer.now, len(pool), fill_report,
                relaxed_slots=relaxed, matcher=self.scorer.matcher,
            )

        warning = fill_warning(fill_report)
        if warning:
            warnings.append(warning)

        stages.append(PlanningStage.DONE)
        logger.info(
            "Plan done: strategy=%s, %d/%d slots filled",
            strategy, fill_report.slots_filled, fill_report.slots_needed,
        )
        return PlanningResult(
            meals=meals,
            fill_report=fill_report,
            explanation=explanation,
            strategy=strategy,
            explanations=explanations,
            stages=stages,
            warnings=warnings,
            pool=pool,
            request=request,
            state=state,
        )

    def regenerate(self, result: PlanningResult, pinned_ids: Sequence[str] = ()) -> PlanningResult:
        """Re-plan from scratch, keeping the original pinned slots plus ``pinned_ids``.

        Raises:
            ValueError: If result carries no request
            KeyError: If a pinned id is not a meal of ``result``
        """
        if result.request is None:
            raise ValueError("Cannot regenerate a result without its planning request")
        by_id = {m.id: m for m in result.meals}
        pinned = list(result.request.pinned)
        pinned_slots = {(day, meal_type) for day, meal_type, _ in pinned}
        for item_id in pinned_ids:
            meal = by_id[item_id]
            if meal.slot not in pinned_slots:
                pinned.append((meal.day_index, meal.meal_type, meal.recipe_id))
                pinned_slots.add(meal.slot)
        return self.plan(
            result.request.pantry,
            result.request.selected_recipes,
            result.request.preferences,
            pinned=pinned,
        )

    # --- Plan editing ---

    def add_meal(self,
                 state: PlanState,
                 recipe: Recipe,
                 day_index: int,
                 meal_type: MealType,
                 pantry: Sequence[PantryItem]) -> MealPlanItem:
        """Put a recipe into a slot (replacing its meal), scored against the plan."""
        existing = state.meal_for_slot(day_index, meal_type)
        if existing is not None:
            state.remove(existing.id)
        score = self.scorer.score(recipe, pantry, state)
        return state.commit(recipe, day_index, meal_type, calculated_score=score)

    def remove_meal(self,
                    state: PlanState,
                    item_id: str,
                    pool: Sequence[Recipe],
                    pantry: Sequence[PantryItem],
                    selected_ids: Sequence[str] = ()) -> List[ScoredRecipe]:
        """Remove a meal and return the pool re-scored against the remaining plan.

        Raises:
            KeyError: If no meal has this id
        """
        state.remove(item_id)
        return self.scorer.score_pool(pool, pantry, state, selected_ids)

    # --- Stages ---

    def build_candidate_pool(self,
                             pantry: Sequence[PantryItem],
                             selected_recipes: Sequence[Recipe],
                             preferences: PlanningPreferences,
                             warnings: Optional[List[str]] = None) -> List[Recipe]:
        """User-selected recipes first, then catalog recipes, de-duplicated by id."""
        pool: List[Recipe] = []
        seen = set()
        for recipe in selected_recipes:
            if recipe.id not in seen:
                seen.add(recipe.id)
                pool.append(recipe)

        if self.catalog is None:
            return pool

        search_terms: List[str] = []
        for item in sort_by_urgency(pantry, self.scorer.now):
            search_terms.append(item.name)
        for recipe in selected_recipes:
            search_terms.extend(recipe.ingredient_names())
        search_terms = list(dict.fromkeys(t.lower() for t in search_terms if t))

        try:
            supplementary = self.catalog.fetch_recipes(
                search_terms,
                preferences.dietary_preferences,
                preferences.cuisine_preferences,
            )
        except RecipeFetchError as e:
            logger.warning("Recipe catalog unavailable, using selected recipes only: %s", e)
            if warnings is not None:
                warnings.append("Could not fetch suggested recipes; planned with selected recipes only.")
            return pool

        added = 0
        for recipe in supplementary:
            if self.max_supplementary is not None and added >= self.max_supplementary:
                break
            if recipe.id not in seen:
                seen.add(recipe.id)
                pool.append(recipe)
                added += 1
        return pool

    def _seed_pinned(self,
                     pinned: Sequence[SlotAssignment],
                     pool: Sequence[Recipe],
                     pantry: Sequence[PantryItem],
                     preferences: PlanningPreferences,
                     warnings: List[str]) -> PlanState:
        state = PlanState()
        by_id = {r.id: r for r in pool}
        for day_index, meal_type, recipe_id in pinned:
            recipe = by_id.get(recipe_id)
            if recipe is None:
                warnings.append(f"Pinned recipe '{recipe_id}' is not in the candidate pool; slot replanned.")
                continue
            if meal_type not in preferences.meal_types or not 0 <= day_index < DAYS_IN_WEEK:
                warnings.append(f"Pinned slot day {day_index} / {meal_type.value} is outside the plan; ignored.")
                continue
            if state.is_occupied(day_index, meal_type):
                warnings.append(f"Slot day {day_index} / {meal_type.value} pinned twice; first pin kept.")
                continue
            score = self.scorer.score(recipe, pantry, state)
            state.commit(recipe, day_index, meal_type, calculated_score=score, pinned=True)
        return state

    def _try_assisted(self,
                      pool: Sequence[Recipe],
                      pantry: Sequence[PantryItem],
                      preferences: PlanningPreferences,
                      state: PlanState,
                      selected_ids: set) -> Optional[AssistedPlan]:
        if self.assisted is None:
            logger.info("No assisted planner configured; using rule-based planning")
            return None

        scored = self.scorer.score_pool(pool, pantry, state, selected_ids)
        request = build_request(scored, pantry, preferences, self.scorer.now, state.pinned_meals())
        try:
            return self.assisted.plan(request)
        except AssistedPlannerError as e:
            logger.warning("Assisted planner failed (%s); falling back to greedy allocation", e)
        except Exception:
            logger.warning("Assisted planner raised unexpectedly; falling back to greedy allocation", exc_info=True)
        return None

    def _commit_assisted(self,
                         plan: AssistedPlan,
                         pool: Sequence[Recipe],
                         pantry: Sequence[PantryItem],
                         preferences: PlanningPreferences,
                         state: PlanState,
                         warnings: List[str]) -> int:
        """Commit validated assisted assignments; returns how many were committed."""
        by_id = {r.id: r for r in pool}
        committed = 0
        dropped = 0
        for day_index, meal_type, recipe_id in plan.assignments:
            recipe = by_id.get(recipe_id)
            if recipe is None:
                logger.warning("Dropping assisted assignment with unknown recipe id '%s'", recipe_id)
                dropped += 1
                continue
            if meal_type not in preferences.meal_types:
                logger.warning("Dropping assisted assignment for unplanned meal type %s", meal_type.value)
                dropped += 1
                continue
            if state.is_occupied(day_index, meal_type):
                logger.debug("Assisted assignment for filled slot day %d %s ignored", day_index, meal_type.value)
                continue
            if state.used_near(recipe.id, day_index):
                logger.warning("Dropping assisted assignment: '%s' already planned next to day %d",
                               recipe.id, day_index)
                dropped += 1
                continue
            if state.uses_this_week(recipe.id) >= self.allocator.max_uses:
                logger.warning("Dropping assisted assignment: '%s' already used %d times",
                               recipe.id, self.allocator.max_uses)
                dropped += 1
                continue
            score = self.scorer.score(recipe, pantry, state)
            state.commit(recipe, day_index, meal_type, calculated_score=score)
            committed += 1

        if dropped:
            warnings.append(f"Dropped {dropped} invalid assignment(s) from the assisted plan.")
        return committed

    @staticmethod
    def _meals_in_scope(state: PlanState, preferences: PlanningPreferences) -> List[MealPlanItem]:
        return [m for m in state.ordered_meals() if m.meal_type in preferences.meal_types]
