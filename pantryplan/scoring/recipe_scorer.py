"""Recipe scoring against a pantry snapshot and an in-progress plan.

Score components for one recipe:
- expiry: sum of 10 / days_until_expiry over matched pantry items
- new ingredients: -2 for every ingredient the pantry cannot supply
- ingredient count bonus: 30 / max(1, n), fewer ingredients to buy is better
- repetition penalty: 3 * (k + 1)^2 where k = days the recipe is already planned
- overlap bonus: 20 * share of the recipe's ingredients already claimed by the plan

total = max(0, base + overlap). Deterministic for a fixed ``now``.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Collection, Iterable, List, Optional, Protocol, Set, Union

from pantryplan.data_layer.models import CalculatedScore, PantryItem, Recipe, ScoredRecipe
from pantryplan.scoring.expiry import days_until_expiry
from pantryplan.scoring.ingredient_matcher import IngredientMatcher

BASIS_NEW = "new"
BASIS_TOTAL = "total"


@dataclass
class ScoringWeights:
    """Configurable constants of the scoring formula."""

    expiry_numerator: float = 10.0
    new_ingredient_penalty: float = 2.0
    ingredient_count_numerator: float = 30.0
    repetition_factor: float = 3.0
    overlap_weight: float = 20.0
    # "new": divide by ingredients that must be bought; "total": by all ingredients
    ingredient_count_basis: str = BASIS_NEW

    def __post_init__(self):
        """Validate weights are non-negative and the basis is known."""
        weights = [
            self.expiry_numerator,
            self.new_ingredient_penalty,
            self.ingredient_count_numerator,
            self.repetition_factor,
            self.overlap_weight,
        ]
        if any(w < 0 for w in weights):
            raise ValueError("All scoring weights must be non-negative")
        if self.ingredient_count_basis not in (BASIS_NEW, BASIS_TOTAL):
            raise ValueError(
                f"ingredient_count_basis must be '{BASIS_NEW}' or '{BASIS_TOTAL}', "
                f"got {self.ingredient_count_basis!r}"
            )


class PlanStateView(Protocol):
    """Read-only view of the plan the scorer needs."""

    claimed_ingredients: Set[str]

    def days_used(self, recipe_id: str) -> int:
        ...


@dataclass(frozen=True)
class ScoreBreakdown:
    """Every intermediate value of one score computation."""

    pantry_items_used: int
    new_ingredients: int
    total_ingredients: int
    expiry_sum: float
    ingredient_count_bonus: float
    repetition_penalty: float
    overlap_count: int
    base_score: float
    overlap_bonus: float
    total_score: float

    def to_calculated_score(self) -> CalculatedScore:
        return CalculatedScore(
            base_score=self.base_score,
            overlap_bonus=self.overlap_bonus,
            total_score=self.total_score,
        )


class RecipeScorer:
    """Scores recipes by expiry urgency, shopping cost, repetition and overlap."""

    def __init__(self,
                 matcher: Optional[IngredientMatcher] = None,
                 weights: Optional[ScoringWeights] = None,
                 now: Optional[Union[date, datetime]] = None):
        """Initialize recipe scorer.

        Args:
            matcher: IngredientMatcher used to match recipe lines to pantry items
            weights: Optional custom scoring weights
            now: Reference moment for expiry calculations (defaults to current time)
        """
        self.matcher = matcher or IngredientMatcher()
        self.weights = weights or ScoringWeights()
        self.now = now if now is not None else datetime.now()

    def breakdown(self,
                  recipe: Recipe,
                  pantry: Collection[PantryItem],
                  plan_state: Optional[PlanStateView] = None) -> ScoreBreakdown:
        """Compute all score components for ``recipe``.

        Args:
            recipe: Recipe to score
            pantry: Pantry snapshot
            plan_state: Current plan (None means nothing is committed yet)

        Returns:
            ScoreBreakdown with base, overlap and total scores
        """
        w = self.weights
        names = recipe.ingredient_names()
        total = len(names)

        pantry_items_used = 0
        new_ingredients = 0
        matched: List[PantryItem] = []
        seen_items = set()
        for name in names:
            items = self.matcher.matching_items(name, pantry)
            if items:
                pantry_items_used += 1
                # A pantry item counts once even if several lines match it
                for item in items:
                    if id(item) not in seen_items:
                        seen_items.add(id(item))
                        matched.append(item)
            else:
                new_ingredients += 1

        expiry_sum = sum(
            w.expiry_numerator / days_until_expiry(item, self.now) for item in matched
        )

        count_basis = new_ingredients if w.ingredient_count_basis == BASIS_NEW else total
        ingredient_count_bonus = w.ingredient_count_numerator / max(1, count_basis)

        days_used = plan_state.days_used(recipe.id) if plan_state is not None else 0
        repetition_penalty = w.repetition_factor * (days_used + 1) ** 2

        base_score = (
            expiry_sum
            - w.new_ingredient_penalty * new_ingredients
            + ingredient_count_bonus
            - repetition_penalty
        )

        claimed = plan_state.claimed_ingredients if plan_state is not None else set()
        overlap_count = sum(1 for name in names if name in claimed)
        overlap_bonus = w.overlap_weight * (overlap_count / total) if total else 0.0

        return ScoreBreakdown(
            pantry_items_used=pantry_items_used,
            new_ingredients=new_ingredients,
            total_ingredients=total,
            expiry_sum=expiry_sum,
            ingredient_count_bonus=ingredient_count_bonus,
            repetition_penalty=repetition_penalty,
            overlap_count=overlap_count,
            base_score=base_score,
            overlap_bonus=overlap_bonus,
            total_score=max(0.0, base_score + overlap_bonus),
        )

    def score(self,
              recipe: Recipe,
              pantry: Collection[PantryItem],
              plan_state: Optional[PlanStateView] = None) -> CalculatedScore:
        """Score a recipe against the pantry and the current plan."""
        return self.breakdown(recipe, pantry, plan_state).to_calculated_score()

    def score_pool(self,
                   recipes: Iterable[Recipe],
                   pantry: Collection[PantryItem],
                   plan_state: Optional[PlanStateView] = None,
                   user_selected_ids: Collection[str] = ()) -> List[ScoredRecipe]:
        """Score every recipe and sort by total score, highest first.

        The sort is stable, so equal scores keep their input order.
        """
        selected = set(user_selected_ids)
        scored = [
            ScoredRecipe(
                recipe=recipe,
                calculated_score=self.score(recipe, pantry, plan_state),
                is_user_selected=recipe.id in selected,
            )
            for recipe in recipes
        ]
        scored.sort(key=lambda s: s.score, reverse=True)
        return scored
