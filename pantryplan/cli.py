#!/usr/bin/env python3
"""Command-line interface for the pantry-aware weekly meal planner."""

import argparse
import logging
import sys
from datetime import date, datetime
from pathlib import Path
from typing import List, Optional

from pantryplan.data_layer.exceptions import NoRecipesError
from pantryplan.data_layer.models import PlanningPreferences, Recipe
from pantryplan.data_layer.pantry_db import PantryDB
from pantryplan.data_layer.preferences import PreferencesLoader
from pantryplan.data_layer.recipe_db import RecipeDB
from pantryplan.output.formatters import format_plan_json_string, format_plan_markdown
from pantryplan.planning.assisted_planner import AssistedPlanner
from pantryplan.planning.orchestrator import PlannerOrchestrator
from pantryplan.providers.local_provider import LocalRecipeProvider
from pantryplan.providers.mealdb_provider import MealDBRecipeProvider
from pantryplan.scoring.recipe_scorer import RecipeScorer


def select_recipes(recipe_db: RecipeDB, selected: Optional[str]) -> List[Recipe]:
    """Recipes named in a comma-separated id list, or every recipe if None.

    Raises:
        ValueError: If an id is not in the recipe file
    """
    if not selected:
        return recipe_db.get_all_recipes()
    ids = [s.strip() for s in selected.split(",") if s.strip()]
    missing = [rid for rid in ids if recipe_db.get_recipe_by_id(rid) is None]
    if missing:
        raise ValueError(f"Unknown recipe id(s): {', '.join(missing)}")
    return recipe_db.get_recipes_by_ids(ids)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate a weekly meal plan that uses up your pantry before it expires"
    )
    parser.add_argument(
        "--pantry",
        type=str,
        default="data/pantry/pantry.json",
        help="Path to pantry JSON file (default: data/pantry/pantry.json)"
    )
    parser.add_argument(
        "--recipes",
        type=str,
        default="data/recipes/recipes.json",
        help="Path to recipes JSON file (default: data/recipes/recipes.json)"
    )
    parser.add_argument(
        "--preferences",
        type=str,
        default="config/preferences.yaml",
        help="Path to preferences YAML file (default: config/preferences.yaml)"
    )
    parser.add_argument(
        "--selected",
        type=str,
        help="Comma-separated recipe ids to plan with (default: every recipe in --recipes)"
    )
    parser.add_argument(
        "--catalog",
        choices=["none", "local", "mealdb"],
        default="none",
        help="Where to fetch supplementary recipes from (default: none)"
    )
    parser.add_argument(
        "--no-ai",
        action="store_true",
        help="Skip the assisted planner even if PANTRYPLAN_AI_API_KEY is set"
    )
    parser.add_argument(
        "--timeout",
        type=float,
        help="Assisted planner timeout in seconds (overrides PANTRYPLAN_AI_TIMEOUT)"
    )
    parser.add_argument(
        "--today",
        type=date.fromisoformat,
        help="Plan as of this date (YYYY-MM-DD, default: now)"
    )
    parser.add_argument(
        "--output",
        type=str,
        choices=["markdown", "json", "both"],
        default="markdown",
        help="Output format: markdown (default), json, or both"
    )
    parser.add_argument(
        "--output-file",
        type=str,
        help="Optional file path to save output (default: print to stdout)"
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log planning details to stderr"
    )
    return parser


def main(argv: Optional[List[str]] = None):
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    pantry_path = Path(args.pantry)
    if not pantry_path.exists():
        print(f"Error: Pantry file not found: {pantry_path}", file=sys.stderr)
        sys.exit(1)

    recipes_path = Path(args.recipes)
    if not recipes_path.exists():
        print(f"Error: Recipes file not found: {recipes_path}", file=sys.stderr)
        sys.exit(1)

    preferences_path = Path(args.preferences)
    if not preferences_path.exists():
        print(f"Error: Preferences file not found: {preferences_path}", file=sys.stderr)
        print(f"Hint: Copy config/preferences.yaml.example to {preferences_path} and customize it",
              file=sys.stderr)
        sys.exit(1)

    try:
        print(f"Loading preferences from {preferences_path}...", file=sys.stderr)
        loader = PreferencesLoader(str(preferences_path))
        preferences: PlanningPreferences = loader.load()
        pinned = loader.load_pinned()

        print(f"Loading pantry from {pantry_path}...", file=sys.stderr)
        pantry = PantryDB(str(pantry_path)).get_all_items()
        print(f"Found {len(pantry)} pantry items", file=sys.stderr)

        print(f"Loading recipes from {recipes_path}...", file=sys.stderr)
        recipe_db = RecipeDB(str(recipes_path))
        selected = select_recipes(recipe_db, args.selected)
        print(f"Planning with {len(selected)} selected recipes", file=sys.stderr)

        catalog = None
        if args.catalog == "local":
            catalog = LocalRecipeProvider(recipe_db)
        elif args.catalog == "mealdb":
            catalog = MealDBRecipeProvider()

        assisted = None
        if not args.no_ai:
            try:
                assisted = AssistedPlanner.from_env()
                if args.timeout is not None:
                    assisted.timeout = args.timeout
            except ValueError as e:
                print(f"Assisted planner disabled ({e}); using rule-based planning", file=sys.stderr)

        now = datetime.combine(args.today, datetime.min.time()) if args.today else None
        scorer = RecipeScorer(now=now)
        orchestrator = PlannerOrchestrator(scorer, catalog=catalog, assisted=assisted)

        print("Planning meals...", file=sys.stderr)
        result = orchestrator.plan(pantry, selected, preferences, pinned=pinned)

        if args.output in ["markdown", "both"]:
            markdown_output = format_plan_markdown(result)
            if args.output_file:
                output_path = Path(args.output_file)
                if args.output == "both":
                    output_path = output_path.with_suffix(".md")
                output_path.write_text(markdown_output)
                print(f"Markdown output saved to {output_path}", file=sys.stderr)
            else:
                print(markdown_output)

        if args.output in ["json", "both"]:
            json_output = format_plan_json_string(result, indent=2)
            if args.output_file:
                output_path = Path(args.output_file)
                if args.output == "both":
                    output_path = output_path.with_suffix(".json")
                output_path.write_text(json_output)
                print(f"JSON output saved to {output_path}", file=sys.stderr)
            else:
                if args.output == "both":
                    print("\n" + "=" * 80 + "\n", file=sys.stdout)
                print(json_output)

        report = result.fill_report
        if report.is_complete:
            print(f"\n✅ Meal plan generated ({result.strategy})", file=sys.stderr)
        else:
            print(f"\n⚠️  Filled {report.slots_filled} of {report.slots_needed} slots:", file=sys.stderr)
            for warning in result.warnings:
                print(f"   - {warning}", file=sys.stderr)

    except NoRecipesError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        import traceback
        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
