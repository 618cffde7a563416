"""Tests for recipe matching and ratings."""

import pytest

from leftover_tracker.domain.recipes import Recipe, RecipeRating
from leftover_tracker.services.recipes import RecipeService, score_recipe
from tests.conftest import DEVICE_ID, InMemoryRecipeRepository, make_item


def _recipe(recipe_id: str, ingredients: list[str], categories: list[str]) -> Recipe:
    return Recipe(
        id=recipe_id,
        name=f"Recipe {recipe_id}",
        ingredients=ingredients,
        categories=categories,
    )


def test_score_blends_category_and_ingredient_overlap() -> None:
    recipe = _recipe("r1", ["milk", "egg"], ["Dairy"])
    items = [make_item("milk", category="Dairy")]

    match = score_recipe(recipe, items)

    assert match.matched_categories == ["dairy"]
    assert match.matched_ingredients == ["milk"]
    assert match.score == 75


def test_score_matches_substrings_in_both_directions() -> None:
    recipe = _recipe("r1", ["Egg", "roast chicken", "rice"], [])
    items = [make_item("Eggplant parmesan"), make_item("Chicken")]

    match = score_recipe(recipe, items)

    assert match.matched_ingredients == ["egg", "roast chicken"]
    assert match.score == 33


def test_score_rounds_half_up() -> None:
    recipe = _recipe("r1", [], ["Meat", "Dairy", "Dessert", "Other"])
    items = [make_item("steak", category="meat")]

    assert score_recipe(recipe, items).score == 13


def test_score_without_overlap_is_zero() -> None:
    recipe = _recipe("r1", ["tofu"], ["Vegetables"])

    assert score_recipe(recipe, [make_item("Pizza", category="Other")]).score == 0


def test_suggestions_for_empty_inventory_skip_repository() -> None:
    repository = InMemoryRecipeRepository(recipes=[_recipe("r1", ["milk"], [])])
    service = RecipeService(repository, device_id=DEVICE_ID)

    assert service.get_suggestions([]) == []
    assert repository.calls == 0


def test_suggestions_are_filtered_sorted_and_stable() -> None:
    repository = InMemoryRecipeRepository(
        recipes=[
            _recipe("half-a", ["milk", "flour"], []),
            _recipe("none", ["tofu"], ["Vegetables"]),
            _recipe("full", ["milk"], ["Dairy"]),
            _recipe("half-b", ["milk", "sugar"], []),
        ]
    )
    service = RecipeService(repository, device_id=DEVICE_ID)

    suggestions = service.get_suggestions([make_item("Milk", category="Dairy")])

    assert [s.recipe.id for s in suggestions] == ["full", "half-a", "half-b"]
    assert [s.match_score for s in suggestions] == [100, 25, 25]


def test_suggestions_attach_user_and_aggregate_ratings() -> None:
    repository = InMemoryRecipeRepository(
        recipes=[_recipe("r1", ["milk"], [])],
        ratings=[
            RecipeRating(id="a", recipe_id="r1", device_id=DEVICE_ID, rating=4),
            RecipeRating(id="b", recipe_id="r1", device_id="other", rating=5),
        ],
    )
    service = RecipeService(repository, device_id=DEVICE_ID)

    [suggestion] = service.get_suggestions([make_item("milk")])

    assert suggestion.user_rating == 4
    assert suggestion.average_rating == 4.5
    assert suggestion.rating_count == 2


def test_suggestions_degrade_to_empty_on_fetch_failure() -> None:
    repository = InMemoryRecipeRepository(
        recipes=[_recipe("r1", ["milk"], [])], fail=True
    )
    service = RecipeService(repository, device_id=DEVICE_ID)

    assert service.get_suggestions([make_item("milk")]) == []


def test_rate_recipe_twice_keeps_one_row() -> None:
    repository = InMemoryRecipeRepository()
    service = RecipeService(repository, device_id=DEVICE_ID)

    assert service.rate_recipe("r1", 3, ["milk"]) is True
    assert service.rate_recipe("r1", 5, ["milk", "rice"]) is True

    assert len(repository.ratings) == 1
    row = repository.ratings[0]
    assert (row.recipe_id, row.device_id, row.rating) == ("r1", DEVICE_ID, 5)
    assert row.leftover_items == ["milk", "rice"]
    assert service.get_user_rating("r1") == 5


def test_rate_recipe_reports_repository_failure() -> None:
    service = RecipeService(InMemoryRecipeRepository(fail=True), device_id=DEVICE_ID)

    assert service.rate_recipe("r1", 4, []) is False
    assert service.get_user_rating("r1") is None


def test_rate_recipe_rejects_out_of_range() -> None:
    service = RecipeService(InMemoryRecipeRepository(), device_id=DEVICE_ID)

    with pytest.raises(ValueError):
        service.rate_recipe("r1", 6, [])
