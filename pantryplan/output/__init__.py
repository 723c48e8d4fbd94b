"""Output formatting for weekly meal plans."""

from pantryplan.output.formatters import (
    format_plan_json,
    format_plan_json_string,
    format_plan_markdown,
    format_ingredient_string
)

__all__ = [
    "format_plan_json",
    "format_plan_json_string",
    "format_plan_markdown",
    "format_ingredient_string"
]
