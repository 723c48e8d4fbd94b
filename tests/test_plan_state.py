"""Tests for the per-run plan state."""

import pytest

from pantryplan.data_layer.exceptions import SlotOccupiedError
from pantryplan.data_layer.models import CalculatedScore, MealPlanItem, MealType, Recipe, RecipeIngredient
from pantryplan.planning.plan_state import UNUSED_DAY, PlanState


def _make_recipe(rid: str, ingredients: list) -> Recipe:
    return Recipe(id=rid, title=rid.title(), ingredients=[RecipeIngredient(n) for n in ingredients])


@pytest.fixture
def omelette():
    return _make_recipe("omelette", ["eggs", "spinach"])


@pytest.fixture
def pasta():
    return _make_recipe("pasta", ["spaghetti", "tomatoes", "garlic"])


class TestCommit:
    """Commit updates counters and the claimed ingredient set."""

    def test_commit_creates_item(self, omelette):
        state = PlanState()
        score = CalculatedScore(10.0, 2.0, 12.0)
        item = state.commit(omelette, 1, MealType.LUNCH, calculated_score=score)

        assert item.recipe_id == "omelette"
        assert item.title == "Omelette"
        assert item.slot == (1, MealType.LUNCH)
        assert item.score == 12.0
        assert item.calculated_score == score
        assert item.ingredients == frozenset({"eggs", "spinach"})
        assert state.committed_meals == [item]

    def test_counters(self, omelette):
        state = PlanState()
        assert state.last_used("omelette") == UNUSED_DAY
        state.commit(omelette, 0, MealType.BREAKFAST)
        state.commit(omelette, 3, MealType.DINNER)

        assert state.uses("omelette") == 2
        assert state.uses_this_week("omelette") == 2
        assert state.last_used("omelette") == 3
        assert state.days_used("omelette") == 2
        assert state.claimed_ingredients == {"eggs", "spinach"}

    def test_fresh_ids_per_commit(self, omelette):
        state = PlanState()
        first = state.commit(omelette, 0, MealType.BREAKFAST)
        second = state.commit(omelette, 2, MealType.BREAKFAST)
        assert first.id != second.id

    def test_occupied_slot_raises(self, omelette, pasta):
        state = PlanState()
        state.commit(omelette, 0, MealType.DINNER)
        with pytest.raises(SlotOccupiedError) as exc_info:
            state.commit(pasta, 0, MealType.DINNER)
        assert exc_info.value.slot == (0, "dinner")
        assert state.slots_filled == 1

    @pytest.mark.parametrize("day", [-1, 7])
    def test_day_out_of_range(self, omelette, day):
        with pytest.raises(ValueError, match="day_index"):
            PlanState().commit(omelette, day, MealType.BREAKFAST)


class TestQueries:
    def test_meals_for_day_in_meal_order(self, omelette, pasta):
        state = PlanState()
        state.commit(pasta, 2, MealType.DINNER)
        state.commit(omelette, 2, MealType.BREAKFAST)
        state.commit(pasta, 4, MealType.LUNCH)

        assert [m.meal_type for m in state.meals_for_day(2)] == [MealType.BREAKFAST, MealType.DINNER]
        assert state.meal_for_slot(4, MealType.LUNCH).recipe_id == "pasta"
        assert state.meal_for_slot(4, MealType.DINNER) is None
        assert state.is_occupied(2, MealType.DINNER)

    def test_ordered_meals(self, omelette, pasta):
        state = PlanState()
        state.commit(pasta, 3, MealType.LUNCH)
        state.commit(omelette, 0, MealType.DINNER)
        state.commit(pasta, 0, MealType.BREAKFAST)
        assert [m.slot for m in state.ordered_meals()] == [
            (0, MealType.BREAKFAST), (0, MealType.DINNER), (3, MealType.LUNCH)
        ]


class TestRemove:
    """Removal recomputes counters from the remaining meals."""

    def test_remove_recomputes(self, omelette, pasta):
        state = PlanState()
        state.commit(omelette, 0, MealType.BREAKFAST)
        late = state.commit(omelette, 4, MealType.BREAKFAST)
        pasta_item = state.commit(pasta, 1, MealType.DINNER)

        state.remove(late.id)
        assert state.uses("omelette") == 1
        assert state.last_used("omelette") == 0

        state.remove(pasta_item.id)
        assert state.claimed_ingredients == {"eggs", "spinach"}
        assert state.last_used("pasta") == UNUSED_DAY

    def test_remove_unknown_id(self):
        with pytest.raises(KeyError):
            PlanState().remove("nope")


class TestSwap:
    def test_swap_exchanges_slots(self, omelette, pasta):
        state = PlanState()
        a = state.commit(omelette, 0, MealType.BREAKFAST)
        b = state.commit(pasta, 5, MealType.DINNER)

        state.swap(a.id, b.id)

        assert state.meal_for_slot(0, MealType.BREAKFAST).recipe_id == "pasta"
        assert state.meal_for_slot(5, MealType.DINNER).recipe_id == "omelette"
        assert state.last_used("omelette") == 5
        assert state.get(a.id).slot == (5, MealType.DINNER)

    def test_swap_unknown(self, omelette):
        state = PlanState()
        a = state.commit(omelette, 0, MealType.BREAKFAST)
        with pytest.raises(KeyError):
            state.swap(a.id, "missing")


class TestClearAndReset:
    def test_clear_all(self, omelette):
        state = PlanState()
        state.commit(omelette, 0, MealType.BREAKFAST, pinned=True)
        state.clear()
        assert state.committed_meals == []
        assert state.claimed_ingredients == set()

    def test_clear_keeps_pinned(self, omelette, pasta):
        state = PlanState()
        state.commit(omelette, 0, MealType.BREAKFAST, pinned=True)
        state.commit(pasta, 1, MealType.BREAKFAST)
        state.clear(keep_pinned=True)

        assert [m.recipe_id for m in state.committed_meals] == ["omelette"]
        assert state.claimed_ingredients == {"eggs", "spinach"}
        assert state.uses("pasta") == 0

    def test_reset_usage_keeps_meals(self, omelette):
        state = PlanState()
        state.commit(omelette, 0, MealType.BREAKFAST)
        state.reset_usage("omelette")
        assert state.uses("omelette") == 0
        assert state.uses_this_week("omelette") == 1


class TestConstruction:
    def test_from_assignments_pins(self, omelette, pasta):
        recipes = {"omelette": omelette, "pasta": pasta}
        state = PlanState.from_assignments(
            [(0, MealType.DINNER, "pasta"), (2, MealType.BREAKFAST, "omelette")], recipes
        )
        assert [m.recipe_id for m in state.ordered_meals()] == ["pasta", "omelette"]
        assert all(m.pinned for m in state.committed_meals)

    def test_from_assignments_unknown_recipe(self, omelette):
        with pytest.raises(KeyError):
            PlanState.from_assignments([(0, MealType.DINNER, "ghost")], {"omelette": omelette})

    def test_from_meals_rejects_duplicate_slot(self, omelette, pasta):
        source = PlanState()
        a = source.commit(omelette, 0, MealType.LUNCH)
        other = PlanState()
        b = other.commit(pasta, 0, MealType.LUNCH)
        with pytest.raises(SlotOccupiedError):
            PlanState.from_meals([a, b])

    def test_from_meals_continues_ids(self, omelette, pasta):
        source = PlanState()
        a = source.commit(omelette, 0, MealType.LUNCH)
        state = PlanState.from_meals([a])
        b = state.commit(pasta, 1, MealType.LUNCH)
        assert a.id != b.id
        assert state.claimed_ingredients == {"eggs", "spinach", "spaghetti", "tomatoes", "garlic"}

    def test_from_meals_ids_never_collide(self, omelette):
        seeded = MealPlanItem(
            id="meal-002-omelette", recipe_id="omelette", title="Omelette",
            day_index=0, meal_type=MealType.LUNCH, score=0.0,
        )
        state = PlanState.from_meals([seeded])
        item = state.commit(omelette, 3, MealType.LUNCH)
        assert item.id == "meal-003-omelette"

    def test_from_meals_foreign_ids(self, pasta):
        seeded = MealPlanItem(
            id="custom", recipe_id="omelette", title="Omelette",
            day_index=0, meal_type=MealType.LUNCH, score=0.0,
        )
        state = PlanState.from_meals([seeded])
        assert state.commit(pasta, 1, MealType.LUNCH).id == "meal-001-pasta"


class TestUsedNear:
    def test_neighbouring_days(self, omelette):
        state = PlanState()
        state.commit(omelette, 3, MealType.BREAKFAST)

        assert state.used_near("omelette", 2)
        assert state.used_near("omelette", 3)
        assert state.used_near("omelette", 4)
        assert not state.used_near("omelette", 1)
        assert not state.used_near("omelette", 5)
        assert not state.used_near("pasta", 3)
