#!/usr/bin/env python3
"""Benchmark GreedyAllocator.allocate: run time and output summary.

Run from repo root:
  python scripts/benchmark_greedy_allocator.py

Optional: pool size and meals per day via env or edit below.
"""
from __future__ import annotations

import os
import sys
import time
from datetime import date, datetime, timedelta

# Allow importing pantryplan when run from repo root without installing
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from pantryplan.data_layer.models import PantryItem, PlanningPreferences, Recipe, RecipeIngredient
from pantryplan.planning.greedy_allocator import GreedyAllocator
from pantryplan.scoring.recipe_scorer import RecipeScorer

NOW = datetime(2026, 3, 10)


def make_pantry(size: int) -> list:
    return [
        PantryItem(f"ingredient {i}", date(2026, 3, 11) + timedelta(days=i % 10))
        for i in range(size)
    ]


def make_recipe(index: int, ingredient_count: int = 6) -> Recipe:
    return Recipe(
        id=f"r{index}",
        title=f"Recipe {index}",
        ingredients=[
            RecipeIngredient(f"ingredient {(index * 3 + j) % 60}") for j in range(ingredient_count)
        ],
    )


def main() -> None:
    pool_size = int(os.environ.get("PANTRYPLAN_POOL_SIZE", "100"))
    meals_per_day = int(os.environ.get("PANTRYPLAN_MEALS_PER_DAY", "3"))

    pool = [make_recipe(i) for i in range(pool_size)]
    pantry = make_pantry(40)
    preferences = PlanningPreferences(meals_per_day=meals_per_day)
    allocator = GreedyAllocator(RecipeScorer(now=NOW))

    t0 = time.perf_counter()
    result = allocator.allocate(pool, pantry, preferences)
    t1 = time.perf_counter()

    print("--- Greedy allocator benchmark ---")
    print(f"Pool size: {pool_size}")
    print(f"Wall time: {t1 - t0:.3f}s")
    print(f"Slots filled: {result.fill_report.slots_filled}/{result.fill_report.slots_needed}")
    print(f"Relaxed slots: {len(result.relaxed_slots)}")
    print(f"Distinct recipes: {len({m.recipe_id for m in result.meals})}")
    for meal in result.meals[:meals_per_day * 2]:
        print(f"  Day {meal.day_index + 1} {meal.meal_type.value}: {meal.recipe_id} ({meal.score:.1f})")
    print("----------------------------------")


if __name__ == "__main__":
    main()
