"""Custom exceptions for the meal planner."""
from typing import Optional, Tuple


class PlanningError(Exception):
    """Base class for planning errors."""


class NoRecipesError(PlanningError):
    """Raised when the candidate recipe pool is empty."""

    def __init__(self, message: str = "No recipes available. Please select recipes first."):
        super().__init__(message)


class SlotOccupiedError(PlanningError):
    """Raised when committing into a (day, meal type) slot that is already filled."""

    def __init__(self, day_index: int, meal_type: str, existing_recipe_id: Optional[str] = None):
        """Initialize exception with the conflicting slot.

        Args:
            day_index: Day of the occupied slot (0-6)
            meal_type: Meal type value of the occupied slot
            existing_recipe_id: Recipe already committed there, if known
        """
        self.slot: Tuple[int, str] = (day_index, meal_type)
        self.existing_recipe_id = existing_recipe_id
        super().__init__(
            f"Slot day {day_index} / {meal_type} is already assigned"
            + (f" to recipe '{existing_recipe_id}'" if existing_recipe_id else "")
        )


class AssistedPlannerError(PlanningError):
    """Failure of the external assisted planner.

    The orchestrator treats every code the same way (fall back to the
    greedy allocator); the code is kept for logging.
    """

    TIMEOUT = "TIMEOUT"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    API_ERROR = "API_ERROR"
    MALFORMED_RESPONSE = "MALFORMED_RESPONSE"
    SCHEMA_MISMATCH = "SCHEMA_MISMATCH"
    NOT_CONFIGURED = "NOT_CONFIGURED"

    def __init__(self, error_code: str, message: str):
        self.error_code = error_code
        self.message = message
        super().__init__(f"{error_code}: {message}")


class RecipeFetchError(PlanningError):
    """Raised when a recipe catalog cannot be reached or returns garbage."""
