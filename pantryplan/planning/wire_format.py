"""JSON wire format shared with the assisted planner.

Request and response bodies use camelCase keys. Responses are validated with
pydantic; anything that does not fit is reported as an AssistedPlannerError so
the orchestrator can fall back to the greedy allocator.
"""

import json
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, Field, ValidationError, field_validator

from pantryplan.data_layer.exceptions import AssistedPlannerError
from pantryplan.data_layer.models import (
    DAYS_IN_WEEK,
    MealPlanItem,
    MealType,
    PantryItem,
    PlanningPreferences,
    ScoredRecipe,
    SlotAssignment,
)
from pantryplan.scoring.expiry import days_until_expiry, sort_by_urgency

SOON_TO_EXPIRE_LIMIT = 10

EXPLANATION_KEYS = (
    "pantryUsage",
    "expiryOptimization",
    "varietyStrategy",
    "suggestedRecipesUsage",
)


# --- Request ---

class WireRecipe(BaseModel):
    id: str
    title: str
    isUserSelected: bool = False
    ingredients: List[str] = Field(default_factory=list)
    cuisines: List[str] = Field(default_factory=list)


class WirePantryItem(BaseModel):
    name: str
    expiryDate: Optional[str] = None
    daysUntilExpiry: int
    category: str


class WireInitialScore(BaseModel):
    id: str
    score: float
    isUserSelected: bool = False


class PlanRequestPayload(BaseModel):
    recipes: List[WireRecipe]
    pantryItems: List[WirePantryItem]
    soonToExpireItems: List[WirePantryItem]
    dietaryPreferences: List[str] = Field(default_factory=list)
    cuisinePreferences: List[str] = Field(default_factory=list)
    mealsPerDay: int
    daysInWeek: int = DAYS_IN_WEEK
    initialScores: List[WireInitialScore] = Field(default_factory=list)
    # day index (as string) -> meal type -> recipe id
    existingAssignments: Dict[str, Dict[str, str]] = Field(default_factory=dict)


# --- Response ---

class WireMealAssignment(BaseModel):
    dayIndex: int = Field(ge=0, le=DAYS_IN_WEEK - 1)
    mealType: MealType
    recipeId: str
    reasoning: str = ""

    @field_validator("mealType", mode="before")
    @classmethod
    def _normalize_meal_type(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("recipeId", mode="before")
    @classmethod
    def _recipe_id_as_string(cls, value: Any) -> Any:
        # Catalog ids are numeric strings; models sometimes send bare numbers
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("reasoning", mode="before")
    @classmethod
    def _reasoning_default(cls, value: Any) -> Any:
        return "" if value is None else value


class WireExplanations(BaseModel):
    pantryUsage: str = ""
    expiryOptimization: str = ""
    varietyStrategy: str = ""
    suggestedRecipesUsage: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class PlanResponsePayload(BaseModel):
    mealPlan: List[WireMealAssignment]
    explanations: WireExplanations = Field(default_factory=WireExplanations)


@dataclass
class AssistedPlan:
    """A validated assisted-planner response."""

    assignments: List[SlotAssignment]
    explanations: Dict[str, str] = field(default_factory=dict)
    reasoning: Dict[Tuple[int, MealType], str] = field(default_factory=dict)

    def explanation_text(self) -> str:
        """Non-empty explanations joined in a fixed order."""
        parts = [self.explanations.get(key, "") for key in EXPLANATION_KEYS]
        return " ".join(p.strip() for p in parts if p and p.strip())


def _wire_pantry_item(item: PantryItem, now: Union[date, datetime]) -> WirePantryItem:
    return WirePantryItem(
        name=item.name,
        expiryDate=item.expiry_date.isoformat() if item.expiry_date else None,
        daysUntilExpiry=days_until_expiry(item, now),
        category=item.category.value,
    )


def build_request(scored_pool: Sequence[ScoredRecipe],
                  pantry: Iterable[PantryItem],
                  preferences: PlanningPreferences,
                  now: Union[date, datetime],
                  existing_meals: Iterable[MealPlanItem] = ()) -> PlanRequestPayload:
    """Serialize one planning run for the assisted planner.

    Args:
        scored_pool: Candidate pool with initial scores
        pantry: Pantry snapshot
        preferences: Planning preferences
        now: Reference moment for days-until-expiry
        existing_meals: Already committed (pinned) meals

    Returns:
        PlanRequestPayload ready for ``model_dump()``
    """
    urgent = sort_by_urgency(pantry, now)
    pantry_items = [_wire_pantry_item(item, now) for item in urgent]
    soon = [
        _wire_pantry_item(item, now) for item in urgent if item.expiry_date is not None
    ][:SOON_TO_EXPIRE_LIMIT]

    existing: Dict[str, Dict[str, str]] = {}
    for meal in existing_meals:
        existing.setdefault(str(meal.day_index), {})[meal.meal_type.value] = meal.recipe_id

    return PlanRequestPayload(
        recipes=[
            WireRecipe(
                id=s.recipe.id,
                title=s.recipe.title,
                isUserSelected=s.is_user_selected,
                ingredients=s.recipe.ingredient_names(),
                cuisines=sorted(s.recipe.cuisines),
            )
            for s in scored_pool
        ],
        pantryItems=pantry_items,
        soonToExpireItems=soon,
        dietaryPreferences=list(preferences.dietary_preferences),
        cuisinePreferences=list(preferences.cuisine_preferences),
        mealsPerDay=preferences.meals_per_day,
        initialScores=[
            WireInitialScore(id=s.id, score=round(s.score, 4), isUserSelected=s.is_user_selected)
            for s in scored_pool
        ],
        existingAssignments=existing,
    )


def parse_response(payload: Any) -> AssistedPlan:
    """Validate an assisted-planner response.

    Args:
        payload: Decoded JSON object, or the raw JSON text

    Returns:
        AssistedPlan with (day, meal type, recipe id) triples in response order

    Raises:
        AssistedPlannerError: MALFORMED_RESPONSE if the text is not a JSON object,
            SCHEMA_MISMATCH if the object does not match the response schema
    """
    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except ValueError as exc:
            raise AssistedPlannerError(
                AssistedPlannerError.MALFORMED_RESPONSE, f"Response is not valid JSON: {exc}"
            ) from exc
    if not isinstance(payload, dict):
        raise AssistedPlannerError(
            AssistedPlannerError.MALFORMED_RESPONSE,
            f"Expected a JSON object, got {type(payload).__name__}",
        )

    try:
        parsed = PlanResponsePayload.model_validate(payload)
    except ValidationError as exc:
        raise AssistedPlannerError(
            AssistedPlannerError.SCHEMA_MISMATCH, f"Response does not match plan schema: {exc}"
        ) from exc

    return AssistedPlan(
        assignments=[(a.dayIndex, a.mealType, a.recipeId) for a in parsed.mealPlan],
        explanations=parsed.explanations.model_dump(),
        reasoning={(a.dayIndex, a.mealType): a.reasoning for a in parsed.mealPlan if a.reasoning},
    )


def plan_to_wire(meals: Iterable[MealPlanItem],
                 explanations: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    """Serialize committed meals in the response shape."""
    explanations = explanations or {}
    ordered = sorted(meals, key=lambda m: (m.day_index, m.meal_type.order))
    return {
        "mealPlan": [
            {
                "dayIndex": m.day_index,
                "mealType": m.meal_type.value,
                "recipeId": m.recipe_id,
                "reasoning": "",
            }
            for m in ordered
        ],
        "explanations": {key: explanations.get(key, "") for key in EXPLANATION_KEYS},
    }


def plan_from_wire(payload: Any) -> List[SlotAssignment]:
    """(day_index, meal_type, recipe_id) triples from a response-shaped payload."""
    return parse_response(payload).assignments
