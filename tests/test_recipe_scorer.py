"""Tests for recipe scoring against pantry and plan state."""

import pytest
from datetime import date, datetime

from pantryplan.data_layer.models import MealType, PantryItem, Recipe, RecipeIngredient
from pantryplan.planning.plan_state import PlanState
from pantryplan.scoring.recipe_scorer import (
    BASIS_TOTAL,
    RecipeScorer,
    ScoringWeights,
)

NOW = datetime(2026, 3, 10)


def _make_recipe(rid: str, ingredients: list, title: str = None) -> Recipe:
    return Recipe(
        id=rid,
        title=title or rid,
        ingredients=[RecipeIngredient(name) for name in ingredients],
    )


@pytest.fixture
def scorer():
    return RecipeScorer(now=NOW)


class TestScoringWeights:
    def test_defaults(self):
        w = ScoringWeights()
        assert (w.expiry_numerator, w.new_ingredient_penalty, w.ingredient_count_numerator) == (10.0, 2.0, 30.0)
        assert (w.repetition_factor, w.overlap_weight) == (3.0, 20.0)

    def test_negative_weight_rejected(self):
        with pytest.raises(ValueError, match="non-negative"):
            ScoringWeights(overlap_weight=-1)

    def test_unknown_basis_rejected(self):
        with pytest.raises(ValueError, match="ingredient_count_basis"):
            ScoringWeights(ingredient_count_basis="half")


class TestExpiryContribution:
    """An item expiring in 1 day contributes 10; in 10 days contributes 1."""

    def test_one_day_contributes_ten(self, scorer):
        pantry = [PantryItem("Spinach", date(2026, 3, 11))]
        breakdown = scorer.breakdown(_make_recipe("r", ["spinach"]), pantry)
        assert breakdown.expiry_sum == pytest.approx(10.0)

    def test_ten_days_contributes_one(self, scorer):
        pantry = [PantryItem("Spinach", date(2026, 3, 20))]
        breakdown = scorer.breakdown(_make_recipe("r", ["spinach"]), pantry)
        assert breakdown.expiry_sum == pytest.approx(1.0)

    def test_undated_item_contributes_sentinel(self, scorer):
        pantry = [PantryItem("Rice")]
        breakdown = scorer.breakdown(_make_recipe("r", ["rice"]), pantry)
        assert breakdown.expiry_sum == pytest.approx(0.1)

    def test_pantry_item_counted_once_per_recipe(self, scorer):
        pantry = [PantryItem("Cheese", date(2026, 3, 11))]
        recipe = _make_recipe("r", ["cheddar cheese", "parmesan cheese"])
        breakdown = scorer.breakdown(recipe, pantry)
        assert breakdown.pantry_items_used == 2
        assert breakdown.expiry_sum == pytest.approx(10.0)


class TestBaseScore:
    def test_components(self, scorer):
        pantry = [PantryItem("Spinach", date(2026, 3, 11))]
        breakdown = scorer.breakdown(_make_recipe("r", ["spinach", "egg"]), pantry)

        assert breakdown.pantry_items_used == 1
        assert breakdown.new_ingredients == 1
        assert breakdown.total_ingredients == 2
        assert breakdown.ingredient_count_bonus == pytest.approx(30.0)
        assert breakdown.repetition_penalty == pytest.approx(3.0)
        # 10 - 2*1 + 30 - 3
        assert breakdown.base_score == pytest.approx(35.0)

    def test_total_basis_divides_by_all_ingredients(self):
        scorer = RecipeScorer(weights=ScoringWeights(ingredient_count_basis=BASIS_TOTAL), now=NOW)
        pantry = [PantryItem("Spinach", date(2026, 3, 11))]
        breakdown = scorer.breakdown(_make_recipe("r", ["spinach", "egg"]), pantry)
        assert breakdown.ingredient_count_bonus == pytest.approx(15.0)
        assert breakdown.base_score == pytest.approx(20.0)

    def test_repetition_penalty_grows_with_days_used(self, scorer):
        recipe = _make_recipe("r", ["egg"])
        state = PlanState()
        state.commit(recipe, 0, MealType.BREAKFAST)
        state.commit(recipe, 0, MealType.LUNCH)
        state.commit(recipe, 2, MealType.BREAKFAST)

        breakdown = scorer.breakdown(recipe, [], state)
        # Two distinct days -> 3 * (2 + 1)^2
        assert breakdown.repetition_penalty == pytest.approx(27.0)

    def test_total_score_never_negative(self, scorer):
        recipe = _make_recipe("r", [f"exotic item {i}" for i in range(30)])
        score = scorer.score(recipe, [])
        assert score.base_score < 0
        assert score.total_score == 0.0

    def test_empty_recipe(self, scorer):
        breakdown = scorer.breakdown(_make_recipe("r", []), [])
        assert breakdown.total_ingredients == 0
        assert breakdown.overlap_bonus == 0.0
        assert breakdown.total_score >= 0


class TestOverlapBonus:
    def test_overlap_monotonicity(self, scorer):
        """Committing A with egg makes B (which uses egg) score a higher overlap bonus."""
        recipe_a = _make_recipe("A", ["egg", "flour"])
        recipe_b = _make_recipe("B", ["egg", "milk"])
        state = PlanState()

        before = scorer.score(recipe_b, [], state).overlap_bonus
        state.commit(recipe_a, 0, MealType.BREAKFAST)
        after = scorer.score(recipe_b, [], state).overlap_bonus

        assert before == 0.0
        assert after > before
        assert after == pytest.approx(10.0)

    def test_disjoint_recipe_not_above_overlapping_one(self, scorer):
        """With equal base scores, zero overlap never outranks shared ingredients."""
        r1 = _make_recipe("R1", ["flour", "sugar"])
        r2 = _make_recipe("R2", ["rice", "beans"])
        r3 = _make_recipe("R3", ["flour", "sugar"])
        state = PlanState()
        state.commit(r1, 0, MealType.BREAKFAST)

        s2 = scorer.score(r2, [], state)
        s3 = scorer.score(r3, [], state)

        assert s2.base_score == pytest.approx(s3.base_score)
        assert s2.total_score < s3.total_score
        assert s3.overlap_bonus == pytest.approx(20.0)


class TestScorePool:
    def test_sorted_descending_and_stable(self, scorer):
        pantry = [PantryItem("Spinach", date(2026, 3, 11))]
        recipes = [
            _make_recipe("tie1", ["egg"]),
            _make_recipe("best", ["spinach", "egg"]),
            _make_recipe("tie2", ["egg"]),
        ]
        pool = scorer.score_pool(recipes, pantry, user_selected_ids=["tie2"])

        assert [s.id for s in pool] == ["best", "tie1", "tie2"]
        assert [s.is_user_selected for s in pool] == [False, False, True]

    def test_deterministic_for_fixed_now(self):
        pantry = [PantryItem("Spinach", date(2026, 3, 12))]
        recipe = _make_recipe("r", ["spinach", "egg", "flour"])
        a = RecipeScorer(now=NOW).score(recipe, pantry)
        b = RecipeScorer(now=NOW).score(recipe, pantry)
        assert a == b
