"""Supabase repository for recipes and ratings."""

from dataclasses import dataclass
from datetime import datetime

from supabase import Client

from leftover_tracker.domain.recipes import Recipe, RecipeRating
from leftover_tracker.services.recipes import RecipeRepository


@dataclass
class SupabaseRecipeRepository(RecipeRepository):
    """Supabase-backed repository for ``recipes`` and ``recipe_ratings``."""

    client: Client

    def list_recipes(self) -> list[Recipe]:
        """Return all recipes, newest first."""
        response = (
            self.client.table("recipes")
            .select("*")
            .order("created_at", desc=True)
            .execute()
        )
        return [_parse_recipe(row) for row in response.data or []]

    def list_ratings(self, device_id: str | None = None) -> list[RecipeRating]:
        """Return ratings, optionally filtered to one device."""
        query = self.client.table("recipe_ratings").select("*")
        if device_id is not None:
            query = query.eq("device_id", device_id)
        response = query.execute()
        return [_parse_rating(row) for row in response.data or []]

    def find_rating(self, recipe_id: str, device_id: str) -> RecipeRating | None:
        """Return the device's rating for a recipe, if present."""
        response = (
            self.client.table("recipe_ratings")
            .select("*")
            .eq("recipe_id", recipe_id)
            .eq("device_id", device_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_rating(response.data[0])

    def create_rating(
        self,
        recipe_id: str,
        device_id: str,
        rating: int,
        leftover_items: list[str],
    ) -> None:
        """Insert a rating row."""
        response = (
            self.client.table("recipe_ratings")
            .insert(
                {
                    "recipe_id": recipe_id,
                    "device_id": device_id,
                    "rating": rating,
                    "leftover_items": leftover_items,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create recipe rating")

    def update_rating(
        self, rating_id: str, rating: int, leftover_items: list[str]
    ) -> None:
        """Update an existing rating row."""
        response = (
            self.client.table("recipe_ratings")
            .update({"rating": rating, "leftover_items": leftover_items})
            .eq("id", rating_id)
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to update recipe rating")


def _parse_recipe(row: dict[str, object]) -> Recipe:
    """Parse a recipe row into a domain model."""
    created_raw = row.get("created_at")
    return Recipe(
        id=str(row["id"]),
        name=str(row.get("name", "")),
        ingredients=[str(value) for value in row.get("ingredients") or []],
        categories=[str(value) for value in row.get("categories") or []],
        description=row.get("description"),
        instructions=row.get("instructions"),
        prep_time_minutes=row.get("prep_time_minutes"),
        difficulty=row.get("difficulty"),
        created_at=(
            datetime.fromisoformat(created_raw)
            if isinstance(created_raw, str) and created_raw
            else None
        ),
    )


def _parse_rating(row: dict[str, object]) -> RecipeRating:
    """Parse a rating row into a domain model."""
    return RecipeRating(
        id=str(row["id"]),
        recipe_id=str(row["recipe_id"]),
        device_id=str(row["device_id"]),
        rating=int(row.get("rating", 0)),
        leftover_items=[str(value) for value in row.get("leftover_items") or []],
    )
