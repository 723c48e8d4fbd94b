"""Planning preferences loader for YAML configuration."""
import yaml
from pathlib import Path
from typing import List

from pantryplan.data_layer.models import MealType, PlanningPreferences, SlotAssignment


class PreferencesLoader:
    """Loader for planning preferences (and pinned slots) from YAML."""

    def __init__(self, yaml_path: str):
        """Initialize preferences loader from YAML file.

        Args:
            yaml_path: Path to YAML file containing preferences
        """
        self.yaml_path = Path(yaml_path)
        self._data = None

    def _read(self) -> dict:
        if self._data is None:
            with open(self.yaml_path, "r") as f:
                self._data = yaml.safe_load(f) or {}
        return self._data

    def load(self) -> PlanningPreferences:
        """Load planning preferences from YAML file.

        Returns:
            PlanningPreferences object

        Raises:
            FileNotFoundError: If YAML file doesn't exist
            ValueError: If meals_per_day is outside [1, 3]
        """
        data = self._read()
        return PlanningPreferences(
            meals_per_day=int(data.get("meals_per_day", 3)),
            dietary_preferences=[str(p) for p in data.get("dietary_preferences", []) or []],
            cuisine_preferences=[str(c).lower() for c in data.get("cuisine_preferences", []) or []],
        )

    def load_pinned(self) -> List[SlotAssignment]:
        """Load pinned slots as (day_index, meal_type, recipe_id) triples.

        Raises:
            KeyError: If an entry is missing day, meal_type or recipe_id
            ValueError: If a meal type is unknown
        """
        pinned = []
        for entry in self._read().get("pinned", []) or []:
            pinned.append((
                int(entry["day"]),
                MealType.from_string(entry["meal_type"]),
                str(entry["recipe_id"]),
            ))
        return pinned
