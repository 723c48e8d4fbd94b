"""FastAPI server for the pantry-aware weekly meal planner."""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import uvicorn
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from pantryplan.data_layer.exceptions import NoRecipesError
from pantryplan.data_layer.models import MealType, PlanningPreferences
from pantryplan.data_layer.pantry_db import parse_pantry_item
from pantryplan.data_layer.recipe_db import RecipeDB, parse_recipe
from pantryplan.output.formatters import format_plan_json
from pantryplan.planning.assisted_planner import AssistedPlanner
from pantryplan.planning.orchestrator import PlannerOrchestrator
from pantryplan.providers.local_provider import LocalRecipeProvider
from pantryplan.scoring.expiry import parse_expiry_date
from pantryplan.scoring.recipe_scorer import RecipeScorer

logger = logging.getLogger(__name__)

recipes_path = "data/recipes/recipes.json"

app = FastAPI(title="Pantry Meal Planner API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Local development
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class PantryItemIn(BaseModel):
    name: str
    expiry_date: Optional[str] = None
    category: str = "other"


class RecipeIngredientIn(BaseModel):
    name: str
    amount: str = ""


class RecipeIn(BaseModel):
    id: str
    title: str
    ingredients: List[RecipeIngredientIn] = Field(default_factory=list)
    cuisines: List[str] = Field(default_factory=list)
    popularity: int = 0
    image_url: str = ""


class PinnedSlotIn(BaseModel):
    day: int = Field(ge=0, le=6)
    meal_type: MealType
    recipe_id: str


class PlanRequest(BaseModel):
    pantry: List[PantryItemIn] = Field(default_factory=list)
    recipes: List[RecipeIn] = Field(default_factory=list)
    selected_ids: List[str] = Field(default_factory=list)
    meals_per_day: int = Field(default=3, ge=1, le=3)
    dietary_preferences: List[str] = Field(default_factory=list)
    cuisine_preferences: List[str] = Field(default_factory=list)
    pinned: List[PinnedSlotIn] = Field(default_factory=list)
    use_catalog: bool = False
    use_ai: bool = False
    now: Optional[str] = None  # ISO date; defaults to today


def _build_orchestrator(request: PlanRequest) -> PlannerOrchestrator:
    now = parse_expiry_date(request.now) if request.now else None
    scorer = RecipeScorer(now=datetime.combine(now, datetime.min.time()) if now else None)

    catalog = LocalRecipeProvider(RecipeDB(recipes_path)) if request.use_catalog else None

    assisted = None
    if request.use_ai:
        try:
            assisted = AssistedPlanner.from_env()
        except ValueError as exc:
            logger.info("Assisted planner disabled: %s", exc)
    return PlannerOrchestrator(scorer, catalog=catalog, assisted=assisted)


@app.post("/api/plan")
def plan_meals(request: PlanRequest) -> Dict[str, Any]:
    recipes = [parse_recipe(r.model_dump()) for r in request.recipes]
    if request.selected_ids:
        by_id = {r.id: r for r in recipes}
        recipes = [by_id[rid] for rid in request.selected_ids if rid in by_id]
    pantry = [parse_pantry_item(item.model_dump()) for item in request.pantry]
    preferences = PlanningPreferences(
        meals_per_day=request.meals_per_day,
        dietary_preferences=request.dietary_preferences,
        cuisine_preferences=[c.lower() for c in request.cuisine_preferences],
    )
    pinned = [(p.day, p.meal_type, p.recipe_id) for p in request.pinned]

    try:
        orchestrator = _build_orchestrator(request)
        result = orchestrator.plan(pantry, recipes, preferences, pinned=pinned)
        return format_plan_json(result)
    except NoRecipesError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception("Planning request failed")
        raise HTTPException(status_code=500, detail=str(exc)) from exc


@app.get("/api/recipes")
def list_recipes() -> List[Dict[str, Any]]:
    try:
        recipe_db = RecipeDB(recipes_path)
        return [
            {"id": r.id, "title": r.title, "cuisines": sorted(r.cuisines)}
            for r in recipe_db.get_all_recipes()
        ]
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    uvicorn.run(app, host="0.0.0.0", port=8000)
