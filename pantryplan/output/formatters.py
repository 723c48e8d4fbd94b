"""Formatters for weekly plan output (JSON and Markdown)."""

import json
from typing import Any, Dict, List, Optional

from pantryplan.data_layer.models import DAYS_IN_WEEK, MealPlanItem, Recipe, RecipeIngredient
from pantryplan.planning.orchestrator import PlanningResult
from pantryplan.planning.reporting import shopping_needs

DAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


def format_ingredient_string(ingredient: RecipeIngredient) -> str:
    """Format an ingredient line (e.g. "2 cups spinach").

    Args:
        ingredient: RecipeIngredient object

    Returns:
        Amount text and name, or just the name when no amount is known
    """
    if ingredient.raw_amount_text:
        return f"{ingredient.raw_amount_text} {ingredient.name}"
    return ingredient.name


def format_meal_json(meal: MealPlanItem) -> Dict[str, Any]:
    """Serialize one planned meal."""
    score = meal.calculated_score
    return {
        "id": meal.id,
        "recipe_id": meal.recipe_id,
        "title": meal.title,
        "day_index": meal.day_index,
        "meal_type": meal.meal_type.value,
        "score": round(meal.score, 2),
        "calculated_score": {
            "base_score": round(score.base_score, 2),
            "overlap_bonus": round(score.overlap_bonus, 2),
            "total_score": round(score.total_score, 2),
        } if score else None,
        "ingredients": sorted(meal.ingredients),
        "image_url": meal.image_url,
        "pinned": meal.pinned,
    }


def format_plan_json(result: PlanningResult) -> Dict[str, Any]:
    """Format a PlanningResult as JSON (for API usage).

    Args:
        result: PlanningResult from the orchestrator

    Returns:
        Dictionary ready for JSON serialization
    """
    pantry = result.request.pantry if result.request is not None else []
    return {
        "strategy": result.strategy,
        "meals": [format_meal_json(meal) for meal in result.meals],
        "fill_report": {
            "slots_filled": result.fill_report.slots_filled,
            "slots_needed": result.fill_report.slots_needed,
        },
        "explanation": result.explanation,
        "explanations": dict(result.explanations),
        "warnings": list(result.warnings),
        "shopping_list": shopping_needs(result.meals, pantry),
        "stages": [stage.value for stage in result.stages],
    }


def format_plan_json_string(result: PlanningResult, indent: int = 2) -> str:
    """Format a PlanningResult as a JSON string."""
    return json.dumps(format_plan_json(result), indent=indent)


def format_plan_markdown(result: PlanningResult,
                         recipes_by_id: Optional[Dict[str, Recipe]] = None) -> str:
    """Format a PlanningResult as Markdown.

    Args:
        result: PlanningResult from the orchestrator
        recipes_by_id: Recipes for ingredient listings (defaults to the result's pool)

    Returns:
        Formatted Markdown string
    """
    recipes_by_id = recipes_by_id if recipes_by_id is not None else result.recipes_by_id
    report = result.fill_report
    lines: List[str] = []

    lines.append("# Weekly Meal Plan\n")
    if report.is_complete:
        lines.append(f"✅ **All {report.slots_needed} meal slots filled**\n")
    else:
        lines.append(f"⚠️ **{report.slots_filled} of {report.slots_needed} meal slots filled**\n")

    if result.warnings:
        lines.append("## Warnings\n")
        for warning in result.warnings:
            lines.append(f"- {warning}")
        lines.append("")

    for day_index in range(DAYS_IN_WEEK):
        day_meals = [m for m in result.meals if m.day_index == day_index]
        lines.append(f"## {DAY_NAMES[day_index]}")
        if not day_meals:
            lines.append("_No meals planned_")
            lines.append("")
            continue
        for meal in day_meals:
            pin = " 📌" if meal.pinned else ""
            lines.append(f"### {meal.meal_type.value.capitalize()}: {meal.title}{pin}")
            lines.append(f"**Score:** {meal.score:.1f}")
            recipe = recipes_by_id.get(meal.recipe_id)
            if recipe is not None and recipe.ingredients:
                for ingredient in recipe.ingredients:
                    lines.append(f"- {format_ingredient_string(ingredient)}")
            lines.append("")

    pantry = result.request.pantry if result.request is not None else []
    needs = shopping_needs(result.meals, pantry)
    lines.append("## Shopping List")
    if needs:
        for name in needs:
            lines.append(f"- {name}")
    else:
        lines.append("_Everything is already in your pantry_")
    lines.append("")

    lines.append("## Why this plan")
    lines.append(result.explanation)
    lines.append("")

    return "\n".join(lines)
