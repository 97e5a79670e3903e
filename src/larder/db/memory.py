"""
In-memory kitchen store.

Implements every store capability with plain dicts. Used by the tests and
by the CLI when no Supabase project is configured. Rows are copied on the
way in and out so callers can't mutate stored state by accident.
"""

import copy
import uuid
from datetime import date, datetime
from typing import Any

_SORTABLE_PANTRY_COLUMNS = {"name", "quantity", "expiration_date", "created_at"}


def _new_id() -> str:
    return str(uuid.uuid4())


def _now() -> str:
    return datetime.now().isoformat()


def _nulls_last(value: Any) -> tuple[bool, Any]:
    return (value is None, "" if value is None else value)


class InMemoryKitchenStore:
    """Pantry, recipe, meal plan and grocery storage keyed by user id."""

    def __init__(self) -> None:
        self.pantry_items: dict[str, dict] = {}
        self.recipes: dict[str, dict] = {}
        self.meal_plans: dict[str, dict] = {}
        self.meal_plan_entries: dict[str, dict] = {}
        self.grocery_lists: dict[str, dict] = {}
        self.grocery_list_items: dict[str, dict] = {}

    # =========================================================================
    # Pantry
    # =========================================================================

    async def list_pantry_items(
        self, user_id: str, category: str | None = None, sort_by: str = "name"
    ) -> list[dict]:
        rows = [r for r in self.pantry_items.values() if r["user_id"] == user_id]
        if category:
            rows = [r for r in rows if r.get("category") == category]

        column = sort_by if sort_by in _SORTABLE_PANTRY_COLUMNS else "name"
        rows.sort(key=lambda r: _nulls_last(r.get(column)))
        return copy.deepcopy(rows)

    async def add_pantry_item(self, user_id: str, item: dict[str, Any]) -> dict:
        row = {
            "category": None,
            "expiration_date": None,
            "notes": None,
            **item,
            "id": _new_id(),
            "user_id": user_id,
            "created_at": _now(),
        }
        self.pantry_items[row["id"]] = row
        return copy.deepcopy(row)

    async def update_pantry_item(
        self, user_id: str, item_id: str, updates: dict[str, Any]
    ) -> dict | None:
        row = self.pantry_items.get(item_id)
        if row is None or row["user_id"] != user_id:
            return None

        row.update({k: v for k, v in updates.items() if v is not None and k not in ("id", "user_id")})
        row["updated_at"] = _now()
        return copy.deepcopy(row)

    async def remove_pantry_item(self, user_id: str, item_id: str) -> dict | None:
        row = self.pantry_items.get(item_id)
        if row is None or row["user_id"] != user_id:
            return None
        return self.pantry_items.pop(item_id)

    async def expiring_pantry_items(self, user_id: str, start: date, end: date) -> list[dict]:
        rows = [
            r
            for r in self.pantry_items.values()
            if r["user_id"] == user_id
            and r.get("expiration_date")
            and start.isoformat() <= r["expiration_date"] <= end.isoformat()
        ]
        rows.sort(key=lambda r: r["expiration_date"])
        return copy.deepcopy(rows)

    # =========================================================================
    # Recipes
    # =========================================================================

    def _visible(self, row: dict, user_id: str) -> bool:
        return row.get("is_public", False) or row.get("user_id") == user_id

    async def list_recipes(self, user_id: str) -> list[dict]:
        rows = [r for r in self.recipes.values() if self._visible(r, user_id)]
        rows.sort(key=lambda r: r["created_at"], reverse=True)
        return copy.deepcopy(rows)

    async def get_recipe(self, user_id: str, recipe_id: str) -> dict | None:
        row = self.recipes.get(recipe_id)
        if row is None or not self._visible(row, user_id):
            return None
        return copy.deepcopy(row)

    async def create_recipe(
        self, user_id: str, recipe: dict[str, Any], ingredients: list[dict[str, Any]]
    ) -> dict:
        row = {
            "description": None,
            "instructions": "",
            "prep_time": None,
            "cook_time": None,
            "servings": None,
            "difficulty": None,
            "meal_type": None,
            "is_public": False,
            **recipe,
            "id": _new_id(),
            "user_id": user_id,
            "ingredients": [dict(i) for i in ingredients],
            "created_at": _now(),
        }
        self.recipes[row["id"]] = row
        return copy.deepcopy(row)

    async def delete_recipe(self, user_id: str, recipe_id: str) -> bool:
        row = self.recipes.get(recipe_id)
        if row is None or row.get("user_id") != user_id:
            return False
        del self.recipes[recipe_id]
        return True

    # =========================================================================
    # Meal plans
    # =========================================================================

    def _owned_plan(self, user_id: str, plan_id: str) -> dict | None:
        plan = self.meal_plans.get(plan_id)
        if plan is None or plan["user_id"] != user_id:
            return None
        return plan

    def _owned_entries(self, user_id: str) -> list[dict]:
        return [
            e
            for e in self.meal_plan_entries.values()
            if self._owned_plan(user_id, e["meal_plan_id"]) is not None
        ]

    async def list_meal_plans(self, user_id: str) -> list[dict]:
        plans = []
        for plan in self.meal_plans.values():
            if plan["user_id"] != user_id:
                continue
            count = sum(1 for e in self.meal_plan_entries.values() if e["meal_plan_id"] == plan["id"])
            plans.append({**plan, "meal_count": count})
        plans.sort(key=lambda p: p["start_date"], reverse=True)
        return copy.deepcopy(plans)

    async def get_meal_plan(self, user_id: str, plan_id: str) -> dict | None:
        plan = self._owned_plan(user_id, plan_id)
        if plan is None:
            return None
        entries = [e for e in self.meal_plan_entries.values() if e["meal_plan_id"] == plan_id]
        entries.sort(key=lambda e: (e["meal_date"], e["meal_type"]))
        return copy.deepcopy({**plan, "entries": entries})

    async def create_meal_plan(self, user_id: str, plan: dict[str, Any]) -> dict:
        row = {"notes": None, **plan, "id": _new_id(), "user_id": user_id, "created_at": _now()}
        self.meal_plans[row["id"]] = row
        return copy.deepcopy(row)

    async def add_meal_entry(
        self, user_id: str, plan_id: str, entry: dict[str, Any]
    ) -> dict | None:
        if self._owned_plan(user_id, plan_id) is None:
            return None
        row = {
            "recipe_id": None,
            "recipe_name": None,
            "notes": None,
            **entry,
            "id": _new_id(),
            "meal_plan_id": plan_id,
        }
        self.meal_plan_entries[row["id"]] = row
        return copy.deepcopy(row)

    async def remove_meal_entry(self, user_id: str, entry_id: str) -> bool:
        entry = self.meal_plan_entries.get(entry_id)
        if entry is None or self._owned_plan(user_id, entry["meal_plan_id"]) is None:
            return False
        del self.meal_plan_entries[entry_id]
        return True

    async def list_meal_entries(
        self, user_id: str, start: date, end: date, meal_type: str | None = None
    ) -> list[dict]:
        rows = [
            e
            for e in self._owned_entries(user_id)
            if start.isoformat() <= e["meal_date"] <= end.isoformat()
            and (meal_type is None or e["meal_type"] == meal_type)
        ]
        rows.sort(key=lambda e: (e["meal_date"], e["meal_type"]))
        return copy.deepcopy(rows)

    async def delete_meal_entries(self, user_id: str, entry_ids: list[str]) -> int:
        deleted = 0
        for entry_id in entry_ids:
            if await self.remove_meal_entry(user_id, entry_id):
                deleted += 1
        return deleted

    # =========================================================================
    # Grocery lists
    # =========================================================================

    def _owned_list(self, user_id: str, list_id: str) -> dict | None:
        row = self.grocery_lists.get(list_id)
        if row is None or row["user_id"] != user_id:
            return None
        return row

    async def list_grocery_lists(self, user_id: str) -> list[dict]:
        lists = []
        for row in self.grocery_lists.values():
            if row["user_id"] != user_id:
                continue
            items = [i for i in self.grocery_list_items.values() if i["list_id"] == row["id"]]
            lists.append(
                {
                    **row,
                    "item_count": len(items),
                    "purchased_count": sum(1 for i in items if i.get("is_purchased")),
                }
            )
        lists.sort(key=lambda r: r["created_at"], reverse=True)
        return copy.deepcopy(lists)

    async def get_grocery_list(self, user_id: str, list_id: str) -> dict | None:
        row = self._owned_list(user_id, list_id)
        return copy.deepcopy(row) if row else None

    async def create_grocery_list(self, user_id: str, name: str) -> dict:
        row = {"id": _new_id(), "user_id": user_id, "name": name, "created_at": _now()}
        self.grocery_lists[row["id"]] = row
        return copy.deepcopy(row)

    async def add_grocery_item(
        self, user_id: str, list_id: str, item: dict[str, Any]
    ) -> dict | None:
        if self._owned_list(user_id, list_id) is None:
            return None
        row = {
            "quantity": None,
            "unit": None,
            "category": "other",
            "is_purchased": False,
            **item,
            "id": _new_id(),
            "list_id": list_id,
            "created_at": _now(),
        }
        self.grocery_list_items[row["id"]] = row
        return copy.deepcopy(row)

    async def list_grocery_items(self, user_id: str, list_id: str) -> list[dict]:
        if self._owned_list(user_id, list_id) is None:
            return []
        rows = [i for i in self.grocery_list_items.values() if i["list_id"] == list_id]
        rows.sort(key=lambda i: i["created_at"])
        return copy.deepcopy(rows)

    async def remove_grocery_items(self, user_id: str, list_id: str, item_ids: list[str]) -> int:
        if self._owned_list(user_id, list_id) is None:
            return 0
        removed = 0
        for item_id in item_ids:
            item = self.grocery_list_items.get(item_id)
            if item is not None and item["list_id"] == list_id:
                del self.grocery_list_items[item_id]
                removed += 1
        return removed
