"""
Larder - Grocery list tool handlers.

`generate_grocery_list_from_meal_plan` sums ingredient amounts across every
recipe in a plan, grouped by name (ignoring case) and unit. Different units
for the same ingredient stay on separate lines; no conversion is attempted.
"""

import logging

from larder.errors import ToolExecutionError
from larder.models import UserContext
from larder.tools.handlers.deps import ToolDeps
from larder.tools.params import (
    AddItemToGroceryListParams,
    CreateGroceryListParams,
    MealPlanIdParams,
    NoParams,
)

logger = logging.getLogger(__name__)

DEFAULT_ITEM_UNIT = "pieces"


async def get_grocery_lists(params: NoParams, ctx: UserContext, deps: ToolDeps) -> list[dict]:
    return await deps.grocery.list_grocery_lists(ctx.user_id)


async def create_grocery_list(params: CreateGroceryListParams, ctx: UserContext, deps: ToolDeps) -> dict:
    return await deps.grocery.create_grocery_list(ctx.user_id, params.name)


async def add_item_to_grocery_list(
    params: AddItemToGroceryListParams, ctx: UserContext, deps: ToolDeps
) -> dict:
    item = {
        "item_name": params.item_name,
        "quantity": params.quantity,
        "unit": params.unit or DEFAULT_ITEM_UNIT,
        "category": params.category,
    }
    row = await deps.grocery.add_grocery_item(ctx.user_id, params.list_id, item)
    if row is None:
        raise ToolExecutionError("Grocery list not found")
    return row


def aggregate_ingredients(recipes: list[dict]) -> list[dict]:
    """Sum amounts by (name, unit) over a list of recipes, sorted by name."""
    totals: dict[tuple[str, str | None], dict] = {}
    for recipe in recipes:
        for ing in recipe.get("ingredients") or []:
            key = (ing["name"].lower(), ing.get("unit"))
            line = totals.setdefault(key, {"name": ing["name"], "total_amount": 0, "unit": ing.get("unit")})
            line["total_amount"] += ing.get("amount") or 0
    return sorted(totals.values(), key=lambda line: line["name"].lower())


async def generate_grocery_list_from_meal_plan(
    params: MealPlanIdParams, ctx: UserContext, deps: ToolDeps
) -> dict:
    plan = await deps.meal_plans.get_meal_plan(ctx.user_id, params.meal_plan_id)
    if plan is None:
        raise ToolExecutionError("Meal plan not found")

    recipes = []
    for entry in plan.get("entries") or []:
        if not entry.get("recipe_id"):
            continue
        recipe = await deps.recipes.get_recipe(ctx.user_id, entry["recipe_id"])
        if recipe is None:
            logger.warning(f"Skipping missing recipe {entry['recipe_id']} in plan {plan['id']}")
            continue
        recipes.append(recipe)

    lines = aggregate_ingredients(recipes)

    list_name = f"Grocery List for {plan['name']}"
    grocery_list = await deps.grocery.create_grocery_list(ctx.user_id, list_name)
    for line in lines:
        await deps.grocery.add_grocery_item(
            ctx.user_id,
            grocery_list["id"],
            {"item_name": line["name"], "quantity": line["total_amount"], "unit": line["unit"]},
        )

    return {"list_id": grocery_list["id"], "list_name": list_name, "item_count": len(lines)}
