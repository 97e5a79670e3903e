"""
Larder - Supabase-backed kitchen store.

Every query on a user-owned table is filtered with `.eq("user_id", ...)`.
Child tables (recipe ingredients, meal plan entries, grocery items) have no
user column, so their parent row's ownership is checked first.
"""

import logging
from datetime import date
from typing import Any

from supabase import Client

from larder.db.client import get_client

logger = logging.getLogger(__name__)

_SORTABLE_PANTRY_COLUMNS = {"name", "quantity", "expiration_date", "created_at"}
_NUTRITION_COLUMNS = ("calories", "protein", "carbohydrates", "fat")
_RECIPE_COLUMNS = "*, recipe_ingredients(*), nutrition_info(*)"


def _ingredient_rows(rows: list[dict] | None) -> list[dict]:
    return [
        {"name": r.get("name"), "amount": r.get("amount"), "unit": r.get("unit")}
        for r in rows or []
    ]


class SupabaseKitchenStore:
    """Pantry, recipe, meal plan and grocery storage over PostgREST."""

    def __init__(self, client: Client | None = None):
        self._client = client

    @property
    def client(self) -> Client:
        if self._client is None:
            self._client = get_client()
        return self._client

    # =========================================================================
    # Pantry
    # =========================================================================

    async def list_pantry_items(
        self, user_id: str, category: str | None = None, sort_by: str = "name"
    ) -> list[dict]:
        query = self.client.table("pantry_items").select("*").eq("user_id", user_id)
        if category:
            query = query.eq("category", category)

        column = sort_by if sort_by in _SORTABLE_PANTRY_COLUMNS else "name"
        response = query.order(column).execute()
        return response.data or []

    async def add_pantry_item(self, user_id: str, item: dict[str, Any]) -> dict:
        data = {**item, "user_id": user_id}
        response = self.client.table("pantry_items").insert(data).execute()
        return response.data[0]

    async def update_pantry_item(
        self, user_id: str, item_id: str, updates: dict[str, Any]
    ) -> dict | None:
        changes = {k: v for k, v in updates.items() if v is not None and k not in ("id", "user_id")}
        response = (
            self.client.table("pantry_items")
            .update(changes)
            .eq("id", item_id)
            .eq("user_id", user_id)
            .execute()
        )
        return response.data[0] if response.data else None

    async def remove_pantry_item(self, user_id: str, item_id: str) -> dict | None:
        response = (
            self.client.table("pantry_items")
            .delete()
            .eq("id", item_id)
            .eq("user_id", user_id)
            .execute()
        )
        return response.data[0] if response.data else None

    async def expiring_pantry_items(self, user_id: str, start: date, end: date) -> list[dict]:
        response = (
            self.client.table("pantry_items")
            .select("*")
            .eq("user_id", user_id)
            .gte("expiration_date", start.isoformat())
            .lte("expiration_date", end.isoformat())
            .order("expiration_date")
            .execute()
        )
        return response.data or []

    # =========================================================================
    # Recipes
    # =========================================================================

    def _with_ingredients(self, row: dict) -> dict:
        recipe = {k: v for k, v in row.items() if k not in ("recipe_ingredients", "nutrition_info")}
        recipe["ingredients"] = _ingredient_rows(row.get("recipe_ingredients"))

        nutrition = row.get("nutrition_info") or []
        if isinstance(nutrition, dict):
            nutrition = [nutrition]
        for key in _NUTRITION_COLUMNS:
            recipe[key] = nutrition[0].get(key) if nutrition else None
        return recipe

    async def list_recipes(self, user_id: str) -> list[dict]:
        response = (
            self.client.table("recipes")
            .select(_RECIPE_COLUMNS)
            .or_(f"user_id.eq.{user_id},is_public.eq.true")
            .order("created_at", desc=True)
            .execute()
        )
        return [self._with_ingredients(r) for r in response.data or []]

    async def get_recipe(self, user_id: str, recipe_id: str) -> dict | None:
        response = (
            self.client.table("recipes")
            .select(_RECIPE_COLUMNS)
            .eq("id", recipe_id)
            .or_(f"user_id.eq.{user_id},is_public.eq.true")
            .execute()
        )
        if not response.data:
            return None
        return self._with_ingredients(response.data[0])

    async def create_recipe(
        self, user_id: str, recipe: dict[str, Any], ingredients: list[dict[str, Any]]
    ) -> dict:
        data = {**recipe, "user_id": user_id}
        response = self.client.table("recipes").insert(data).execute()
        created = response.data[0]

        if ingredients:
            ingredient_data = [{"recipe_id": created["id"], **ing} for ing in ingredients]
            self.client.table("recipe_ingredients").insert(ingredient_data).execute()

        created["ingredients"] = _ingredient_rows(ingredients)
        return created

    async def delete_recipe(self, user_id: str, recipe_id: str) -> bool:
        response = (
            self.client.table("recipes")
            .delete()
            .eq("id", recipe_id)
            .eq("user_id", user_id)
            .execute()
        )
        return bool(response.data)

    # =========================================================================
    # Meal plans
    # =========================================================================

    def _owns_plan(self, user_id: str, plan_id: str) -> bool:
        response = (
            self.client.table("meal_plans")
            .select("id")
            .eq("id", plan_id)
            .eq("user_id", user_id)
            .execute()
        )
        return bool(response.data)

    async def list_meal_plans(self, user_id: str) -> list[dict]:
        response = (
            self.client.table("meal_plans")
            .select("*, meal_plan_entries(count)")
            .eq("user_id", user_id)
            .order("start_date", desc=True)
            .execute()
        )
        plans = []
        for row in response.data or []:
            counts = row.pop("meal_plan_entries", None) or [{}]
            plans.append({**row, "meal_count": counts[0].get("count", 0)})
        return plans

    async def get_meal_plan(self, user_id: str, plan_id: str) -> dict | None:
        response = (
            self.client.table("meal_plans")
            .select("*")
            .eq("id", plan_id)
            .eq("user_id", user_id)
            .execute()
        )
        if not response.data:
            return None

        plan = response.data[0]
        entries = (
            self.client.table("meal_plan_entries")
            .select("*")
            .eq("meal_plan_id", plan_id)
            .order("meal_date")
            .order("meal_type")
            .execute()
        )
        plan["entries"] = entries.data or []
        return plan

    async def create_meal_plan(self, user_id: str, plan: dict[str, Any]) -> dict:
        data = {**plan, "user_id": user_id}
        response = self.client.table("meal_plans").insert(data).execute()
        return response.data[0]

    async def add_meal_entry(
        self, user_id: str, plan_id: str, entry: dict[str, Any]
    ) -> dict | None:
        if not self._owns_plan(user_id, plan_id):
            logger.warning(f"Meal plan {plan_id} not found for user")
            return None
        data = {**entry, "meal_plan_id": plan_id}
        response = self.client.table("meal_plan_entries").insert(data).execute()
        return response.data[0]

    def _owned_entry_ids(self, user_id: str, entry_ids: list[str]) -> list[str]:
        if not entry_ids:
            return []
        response = (
            self.client.table("meal_plan_entries")
            .select("id, meal_plans!inner(user_id)")
            .in_("id", entry_ids)
            .eq("meal_plans.user_id", user_id)
            .execute()
        )
        return [r["id"] for r in response.data or []]

    async def remove_meal_entry(self, user_id: str, entry_id: str) -> bool:
        return await self.delete_meal_entries(user_id, [entry_id]) == 1

    async def list_meal_entries(
        self, user_id: str, start: date, end: date, meal_type: str | None = None
    ) -> list[dict]:
        query = (
            self.client.table("meal_plan_entries")
            .select("*, meal_plans!inner(user_id)")
            .eq("meal_plans.user_id", user_id)
            .gte("meal_date", start.isoformat())
            .lte("meal_date", end.isoformat())
        )
        if meal_type:
            query = query.eq("meal_type", meal_type)

        response = query.order("meal_date").order("meal_type").execute()
        return [
            {k: v for k, v in row.items() if k != "meal_plans"} for row in response.data or []
        ]

    async def delete_meal_entries(self, user_id: str, entry_ids: list[str]) -> int:
        owned = self._owned_entry_ids(user_id, entry_ids)
        if not owned:
            return 0
        response = self.client.table("meal_plan_entries").delete().in_("id", owned).execute()
        return len(response.data or [])

    # =========================================================================
    # Grocery lists
    # =========================================================================

    def _owns_list(self, user_id: str, list_id: str) -> bool:
        response = (
            self.client.table("grocery_lists")
            .select("id")
            .eq("id", list_id)
            .eq("user_id", user_id)
            .execute()
        )
        return bool(response.data)

    async def list_grocery_lists(self, user_id: str) -> list[dict]:
        response = (
            self.client.table("grocery_lists")
            .select("*, grocery_list_items(is_purchased)")
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .execute()
        )
        lists = []
        for row in response.data or []:
            items = row.pop("grocery_list_items", None) or []
            lists.append(
                {
                    **row,
                    "item_count": len(items),
                    "purchased_count": sum(1 for i in items if i.get("is_purchased")),
                }
            )
        return lists

    async def get_grocery_list(self, user_id: str, list_id: str) -> dict | None:
        response = (
            self.client.table("grocery_lists")
            .select("*")
            .eq("id", list_id)
            .eq("user_id", user_id)
            .execute()
        )
        return response.data[0] if response.data else None

    async def create_grocery_list(self, user_id: str, name: str) -> dict:
        response = (
            self.client.table("grocery_lists").insert({"user_id": user_id, "name": name}).execute()
        )
        return response.data[0]

    async def add_grocery_item(
        self, user_id: str, list_id: str, item: dict[str, Any]
    ) -> dict | None:
        if not self._owns_list(user_id, list_id):
            logger.warning(f"Grocery list {list_id} not found for user")
            return None
        data = {"category": "other", "is_purchased": False, **item, "list_id": list_id}
        response = self.client.table("grocery_list_items").insert(data).execute()
        return response.data[0]

    async def list_grocery_items(self, user_id: str, list_id: str) -> list[dict]:
        if not self._owns_list(user_id, list_id):
            return []
        response = (
            self.client.table("grocery_list_items")
            .select("*")
            .eq("list_id", list_id)
            .order("created_at")
            .execute()
        )
        return response.data or []

    async def remove_grocery_items(self, user_id: str, list_id: str, item_ids: list[str]) -> int:
        if not item_ids or not self._owns_list(user_id, list_id):
            return 0
        response = (
            self.client.table("grocery_list_items")
            .delete()
            .eq("list_id", list_id)
            .in_("id", item_ids)
            .execute()
        )
        return len(response.data or [])
