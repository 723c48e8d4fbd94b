"""Pantry snapshot loading from JSON."""
import json
from pathlib import Path
from typing import Any, Dict, List

from pantryplan.data_layer.models import FoodCategory, PantryItem
from pantryplan.scoring.expiry import parse_expiry_date


def parse_pantry_item(item_data: Dict[str, Any]) -> PantryItem:
    """Parse one pantry record.

    Accepts both ``expiryDate`` and ``expiry_date`` keys. Missing or
    unparseable dates become None (treated as non-urgent).

    Raises:
        KeyError: If name is missing
    """
    expiry_raw = item_data.get("expiryDate", item_data.get("expiry_date"))
    return PantryItem(
        name=str(item_data["name"]).strip(),
        expiry_date=parse_expiry_date(expiry_raw),
        category=FoodCategory.from_string(item_data.get("category")),
    )


def parse_pantry(data: Any) -> List[PantryItem]:
    """Parse a pantry payload: a list of items or {"pantry": [...]}."""
    if isinstance(data, dict):
        data = data.get("pantry", [])
    return [parse_pantry_item(item) for item in data]


class PantryDB:
    """Pantry snapshot loaded from a JSON file."""

    def __init__(self, json_path: str):
        """Initialize pantry database from JSON file.

        Args:
            json_path: Path to JSON file containing pantry items
        """
        self.json_path = Path(json_path)
        with open(self.json_path, "r") as f:
            self._items = parse_pantry(json.load(f))

    def get_all_items(self) -> List[PantryItem]:
        return self._items.copy()

    def item_names(self) -> List[str]:
        return [item.name for item in self._items]
