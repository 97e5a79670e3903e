"""
Larder - Pantry tool handlers.

All reads and writes go through the store with the caller's user id.
"""

from datetime import date, timedelta

from larder.errors import ToolExecutionError
from larder.models import UserContext
from larder.tools.handlers.deps import ToolDeps
from larder.tools.params import (
    AddPantryItemParams,
    GetExpiringItemsParams,
    GetPantryItemsParams,
    PantryItemIdParams,
    RecipeIdParams,
    UpdatePantryItemParams,
)


async def get_pantry_items(params: GetPantryItemsParams, ctx: UserContext, deps: ToolDeps) -> list[dict]:
    return await deps.pantry.list_pantry_items(ctx.user_id, params.category, params.sort_by)


async def add_pantry_item(params: AddPantryItemParams, ctx: UserContext, deps: ToolDeps) -> dict:
    item = params.model_dump(mode="json", by_alias=False)
    return await deps.pantry.add_pantry_item(ctx.user_id, item)


async def update_pantry_item(params: UpdatePantryItemParams, ctx: UserContext, deps: ToolDeps) -> dict:
    updates = params.model_dump(mode="json", by_alias=False, exclude={"item_id"}, exclude_none=True)
    row = await deps.pantry.update_pantry_item(ctx.user_id, params.item_id, updates)
    if row is None:
        raise ToolExecutionError("Pantry item not found")
    return row


async def remove_pantry_item(params: PantryItemIdParams, ctx: UserContext, deps: ToolDeps) -> dict:
    row = await deps.pantry.remove_pantry_item(ctx.user_id, params.item_id)
    return {"deleted": row is not None, "item": row["name"] if row else None}


async def get_expiring_items(params: GetExpiringItemsParams, ctx: UserContext, deps: ToolDeps) -> list[dict]:
    today = deps.today()
    rows = await deps.pantry.expiring_pantry_items(ctx.user_id, today, today + timedelta(days=params.days))
    for row in rows:
        expires = date.fromisoformat(str(row["expiration_date"])[:10])
        row["days_until_expiry"] = (expires - today).days
    return rows


async def check_pantry_for_recipe(params: RecipeIdParams, ctx: UserContext, deps: ToolDeps) -> dict:
    """
    Compare a recipe's ingredients with the pantry.

    Names match exactly, ignoring case. An ingredient is available when the
    pantry holds at least the required amount. A recipe with no ingredients
    has 0% completeness and can't be made.
    """
    recipe = await deps.recipes.get_recipe(ctx.user_id, params.recipe_id)
    if recipe is None:
        raise ToolExecutionError("Recipe not found")

    required = recipe.get("ingredients") or []
    pantry = {
        row["name"].lower(): row for row in await deps.pantry.list_pantry_items(ctx.user_id)
    }

    available: list[str] = []
    missing: list[dict] = []
    for ingredient in required:
        need = ingredient.get("amount") or 0
        held = pantry.get(ingredient["name"].lower())
        have = (held.get("quantity") or 0) if held else 0

        if held and have >= need:
            available.append(ingredient["name"])
        else:
            missing.append(
                {"name": ingredient["name"], "needed": need, "unit": ingredient.get("unit"), "have": have}
            )

    completeness = len(available) / len(required) * 100 if required else 0
    return {
        "can_make": bool(required) and not missing,
        "available": available,
        "missing": missing,
        "completeness": completeness,
    }
