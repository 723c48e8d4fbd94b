"""Tests for plan explanations and shopping summaries."""

import pytest
from datetime import date, datetime

from pantryplan.data_layer.models import FillReport, MealType, PantryItem, Recipe, RecipeIngredient
from pantryplan.planning.plan_state import PlanState
from pantryplan.planning.reporting import (
    fill_warning,
    pantry_items_used,
    shared_ingredients,
    shopping_needs,
    synthesize_explanation,
    variety_note,
)

NOW = datetime(2026, 3, 10)


def _make_recipe(rid: str, ingredients: list) -> Recipe:
    return Recipe(id=rid, title=rid, ingredients=[RecipeIngredient(n) for n in ingredients])


@pytest.fixture
def pantry():
    return [
        PantryItem("Spinach", date(2026, 3, 11)),
        PantryItem("Rice"),
        PantryItem("Mustard", date(2026, 3, 12)),
    ]


@pytest.fixture
def meals():
    state = PlanState()
    state.commit(_make_recipe("omelette", ["eggs", "spinach"]), 0, MealType.BREAKFAST)
    state.commit(_make_recipe("stir-fry", ["chicken breast", "rice", "eggs"]), 0, MealType.LUNCH)
    state.commit(_make_recipe("omelette", ["eggs", "spinach"]), 2, MealType.BREAKFAST)
    return state.ordered_meals()


class TestShoppingSummaries:
    def test_shopping_needs(self, meals, pantry):
        assert shopping_needs(meals, pantry) == ["chicken breast", "eggs"]

    def test_shopping_needs_empty_plan(self, pantry):
        assert shopping_needs([], pantry) == []

    def test_pantry_items_used_in_pantry_order(self, meals, pantry):
        assert [item.name for item in pantry_items_used(meals, pantry)] == ["Spinach", "Rice"]

    def test_shared_ingredients_counts_distinct_recipes(self, meals):
        # omelette twice does not make spinach shared
        assert shared_ingredients(meals) == {"eggs": 2}


class TestNotes:
    def test_variety_note_only_for_small_pools(self):
        assert variety_note(21, 21) is None
        note = variety_note(2, 14)
        assert "Only 2 recipe(s)" in note
        assert "14 slots" in note

    def test_fill_warning(self):
        assert fill_warning(FillReport(slots_filled=7, slots_needed=7)) is None
        assert fill_warning(FillReport(slots_filled=3, slots_needed=21)).startswith("Filled 3 of 21")


class TestSynthesizeExplanation:
    def test_names_urgent_items(self, meals, pantry):
        text = synthesize_explanation(meals, pantry, NOW, pool_size=10,
                                      fill_report=FillReport(3, 3))

        assert "expire soon first (Spinach)" in text
        assert "1 ingredient(s) are shared" in text
        assert "2 different recipe(s) fill 3 of 3 slots" in text
        assert "Only" not in text

    def test_no_pantry_usage(self, meals):
        text = synthesize_explanation(meals, [PantryItem("Flour")], NOW, pool_size=2,
                                      fill_report=FillReport(3, 7), relaxed_slots=1)

        assert "None of the planned recipes use items" in text
        assert "relaxed for 1 slot(s)" in text
        assert "Only 2 recipe(s) were available for 7 slots" in text

    def test_pantry_used_without_urgency(self, meals):
        text = synthesize_explanation(meals, [PantryItem("Rice")], NOW, pool_size=5,
                                      fill_report=FillReport(3, 3))
        assert "uses 1 item(s) already in your pantry" in text
