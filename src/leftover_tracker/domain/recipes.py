"""Domain models for recipe suggestions."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class Recipe:
    """Recipe candidate stored remotely."""

    id: str
    name: str
    ingredients: list[str]
    categories: list[str]
    description: str | None = None
    instructions: str | None = None
    prep_time_minutes: int | None = None
    difficulty: str | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class RecipeRating:
    """A device's rating of a recipe."""

    id: str
    recipe_id: str
    device_id: str
    rating: int
    leftover_items: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class RecipeMatch:
    """How well a recipe matches the current inventory."""

    score: int
    matched_categories: list[str]
    matched_ingredients: list[str]


@dataclass(frozen=True)
class RecipeSuggestion:
    """Recipe ranked against the inventory."""

    recipe: Recipe
    match_score: int
    matched_categories: list[str]
    matched_ingredients: list[str]
    user_rating: int | None = None
    average_rating: float | None = None
    rating_count: int = 0
