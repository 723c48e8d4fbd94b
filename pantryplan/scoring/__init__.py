"""Scoring module for ranking recipes against the pantry and the plan."""

from .expiry import days_until_expiry, parse_expiry_date
from .ingredient_matcher import IngredientMatcher, ingredients_match
from .recipe_scorer import RecipeScorer, ScoringWeights

__all__ = [
    "days_until_expiry",
    "parse_expiry_date",
    "IngredientMatcher",
    "ingredients_match",
    "RecipeScorer",
    "ScoringWeights",
]
