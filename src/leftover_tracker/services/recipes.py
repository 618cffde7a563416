"""Recipe matching against the current inventory."""

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol

from leftover_tracker.domain.inventory import InventoryItem
from leftover_tracker.domain.recipes import (
    Recipe,
    RecipeMatch,
    RecipeRating,
    RecipeSuggestion,
)

MIN_RATING = 1
MAX_RATING = 5

_logger = logging.getLogger(__name__)


class RecipeRepository(Protocol):
    """Persistence interface for recipes and ratings."""

    def list_recipes(self) -> list[Recipe]:
        """Return all recipes, newest first."""

    def list_ratings(self, device_id: str | None = None) -> list[RecipeRating]:
        """Return ratings, optionally only those of one device."""

    def find_rating(self, recipe_id: str, device_id: str) -> RecipeRating | None:
        """Return the device's rating row for a recipe, if present."""

    def create_rating(
        self,
        recipe_id: str,
        device_id: str,
        rating: int,
        leftover_items: list[str],
    ) -> None:
        """Insert a rating row."""

    def update_rating(
        self, rating_id: str, rating: int, leftover_items: list[str]
    ) -> None:
        """Update an existing rating row."""


def score_recipe(recipe: Recipe, items: Iterable[InventoryItem]) -> RecipeMatch:
    """Score a recipe 0-100 by category and fuzzy ingredient overlap."""
    inventory = list(items)
    item_categories = {item.category.lower() for item in inventory if item.category}
    item_names = [item.name.lower() for item in inventory if item.name]
    recipe_categories = [category.lower() for category in recipe.categories]
    recipe_ingredients = [ingredient.lower() for ingredient in recipe.ingredients]

    matched_categories = [c for c in recipe_categories if c in item_categories]
    matched_ingredients = [
        ingredient
        for ingredient in recipe_ingredients
        if any(
            ingredient in name or name in ingredient or name == ingredient
            for name in item_names
        )
    ]

    category_score = len(matched_categories) / max(len(recipe_categories), 1) * 50
    ingredient_score = len(matched_ingredients) / max(len(recipe_ingredients), 1) * 50
    # Half-up rounding; round() would send 12.5 to 12.
    score = math.floor(category_score + ingredient_score + 0.5)
    return RecipeMatch(
        score=score,
        matched_categories=matched_categories,
        matched_ingredients=matched_ingredients,
    )


@dataclass
class RecipeService:
    """Ranks recipes for the inventory and records device ratings."""

    repository: RecipeRepository
    device_id: str

    def get_suggestions(self, items: list[InventoryItem]) -> list[RecipeSuggestion]:
        """Return matching recipes, best match first."""
        if not items:
            return []
        try:
            recipes = self.repository.list_recipes()
            ratings = self.repository.list_ratings()
        except Exception:
            _logger.exception("Failed to fetch recipes")
            return []

        own_ratings = {
            rating.recipe_id: rating.rating
            for rating in ratings
            if rating.device_id == self.device_id
        }
        aggregates = _aggregate_ratings(ratings)
        suggestions: list[RecipeSuggestion] = []
        for recipe in recipes:
            match = score_recipe(recipe, items)
            if match.score == 0:
                continue
            average, count = aggregates.get(recipe.id, (None, 0))
            suggestions.append(
                RecipeSuggestion(
                    recipe=recipe,
                    match_score=match.score,
                    matched_categories=match.matched_categories,
                    matched_ingredients=match.matched_ingredients,
                    user_rating=own_ratings.get(recipe.id),
                    average_rating=average,
                    rating_count=count,
                )
            )
        # sorted() is stable, so equal scores keep the fetch order.
        return sorted(suggestions, key=lambda s: s.match_score, reverse=True)

    def rate_recipe(
        self, recipe_id: str, rating: int, leftover_items: list[str]
    ) -> bool:
        """Create or replace this device's rating for a recipe."""
        if not MIN_RATING <= rating <= MAX_RATING:
            raise ValueError(f"Rating must be between {MIN_RATING} and {MAX_RATING}")
        try:
            existing = self.repository.find_rating(recipe_id, self.device_id)
            if existing:
                self.repository.update_rating(existing.id, rating, leftover_items)
            else:
                self.repository.create_rating(
                    recipe_id, self.device_id, rating, leftover_items
                )
        except Exception:
            _logger.exception("Failed to rate recipe %s", recipe_id)
            return False
        return True

    def get_user_rating(self, recipe_id: str) -> int | None:
        """Return this device's rating for a recipe, if any."""
        try:
            existing = self.repository.find_rating(recipe_id, self.device_id)
        except Exception:
            _logger.exception("Failed to load rating for recipe %s", recipe_id)
            return None
        return existing.rating if existing else None


def _aggregate_ratings(
    ratings: list[RecipeRating],
) -> dict[str, tuple[float, int]]:
    totals: dict[str, list[int]] = {}
    for rating in ratings:
        totals.setdefault(rating.recipe_id, []).append(rating.rating)
    return {
        recipe_id: (round(sum(values) / len(values), 1), len(values))
        for recipe_id, values in totals.items()
    }
