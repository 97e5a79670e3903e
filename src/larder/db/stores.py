"""
Store Capability Protocols.

Each tool and dispatcher branch declares the capabilities it needs
(pantry, recipes, meal plans, grocery lists) instead of reaching for a
shared database object. Implementations:

- InMemoryKitchenStore (larder.db.memory): tests and the offline CLI
- SupabaseKitchenStore (larder.db.supabase_store): PostgREST-backed

Every method takes the caller's `user_id`. Implementations must scope both
reads and writes by it: no method may return or change another user's
rows. Rows are plain dicts; dates are ISO strings ("YYYY-MM-DD").
"""

from datetime import date
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class PantryStore(Protocol):
    """Pantry items: {id, user_id, name, quantity, unit, category, expiration_date, notes}."""

    async def list_pantry_items(
        self, user_id: str, category: str | None = None, sort_by: str = "name"
    ) -> list[dict]: ...

    async def add_pantry_item(self, user_id: str, item: dict[str, Any]) -> dict: ...

    async def update_pantry_item(
        self, user_id: str, item_id: str, updates: dict[str, Any]
    ) -> dict | None: ...

    async def remove_pantry_item(self, user_id: str, item_id: str) -> dict | None: ...

    async def expiring_pantry_items(self, user_id: str, start: date, end: date) -> list[dict]: ...


@runtime_checkable
class RecipeStore(Protocol):
    """
    Recipes visible to a user: their own plus public ones.

    Recipe rows carry an "ingredients" list of {name, amount, unit}.
    Only the owner may delete a recipe.
    """

    async def list_recipes(self, user_id: str) -> list[dict]: ...

    async def get_recipe(self, user_id: str, recipe_id: str) -> dict | None: ...

    async def create_recipe(
        self, user_id: str, recipe: dict[str, Any], ingredients: list[dict[str, Any]]
    ) -> dict: ...

    async def delete_recipe(self, user_id: str, recipe_id: str) -> bool: ...


@runtime_checkable
class MealPlanStore(Protocol):
    """
    Meal plans and their entries.

    Plan: {id, user_id, name, start_date, end_date, notes}.
    Entry: {id, meal_plan_id, recipe_id, recipe_name, meal_date, meal_type, notes}.
    """

    async def list_meal_plans(self, user_id: str) -> list[dict]: ...

    async def get_meal_plan(self, user_id: str, plan_id: str) -> dict | None: ...

    async def create_meal_plan(self, user_id: str, plan: dict[str, Any]) -> dict: ...

    async def add_meal_entry(
        self, user_id: str, plan_id: str, entry: dict[str, Any]
    ) -> dict | None: ...

    async def remove_meal_entry(self, user_id: str, entry_id: str) -> bool: ...

    async def list_meal_entries(
        self, user_id: str, start: date, end: date, meal_type: str | None = None
    ) -> list[dict]: ...

    async def delete_meal_entries(self, user_id: str, entry_ids: list[str]) -> int: ...


@runtime_checkable
class GroceryStore(Protocol):
    """
    Grocery lists and their items.

    List: {id, user_id, name, created_at}.
    Item: {id, list_id, item_name, quantity, unit, category, is_purchased}.
    """

    async def list_grocery_lists(self, user_id: str) -> list[dict]: ...

    async def get_grocery_list(self, user_id: str, list_id: str) -> dict | None: ...

    async def create_grocery_list(self, user_id: str, name: str) -> dict: ...

    async def add_grocery_item(
        self, user_id: str, list_id: str, item: dict[str, Any]
    ) -> dict | None: ...

    async def list_grocery_items(self, user_id: str, list_id: str) -> list[dict]: ...

    async def remove_grocery_items(self, user_id: str, list_id: str, item_ids: list[str]) -> int: ...


class KitchenStore(PantryStore, RecipeStore, MealPlanStore, GroceryStore, Protocol):
    """All four capabilities from one backend."""
