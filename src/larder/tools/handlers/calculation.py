"""
Larder - Calculation tool handlers.

Nutrition here is a flat per-unit estimate, not a lookup.
"""

from larder.errors import ToolExecutionError
from larder.models import UserContext
from larder.tools.handlers.deps import ToolDeps
from larder.tools.handlers.recipes import total_time
from larder.tools.params import (
    CalculateNutritionParams,
    ConvertUnitsParams,
    EstimateCookingTimeParams,
    ScaleRecipeParams,
)
from larder.tools.units import UnitHandler

# Per unit of ingredient amount
_ESTIMATE_PER_UNIT = {"calories": 50, "protein": 5, "carbohydrates": 10, "fat": 3}
NUTRITION_NOTE = "Estimated values from a flat per-unit rate, not a nutrition database"


async def calculate_nutrition(params: CalculateNutritionParams, ctx: UserContext, deps: ToolDeps) -> dict:
    total_amount = sum(ing.amount or 0 for ing in params.ingredients)
    result: dict = {key: round(total_amount * rate) for key, rate in _ESTIMATE_PER_UNIT.items()}
    result["note"] = NUTRITION_NOTE
    return result


async def convert_units(params: ConvertUnitsParams, ctx: UserContext, deps: ToolDeps) -> dict:
    return UnitHandler.convert(params.amount, params.from_unit, params.to_unit).to_dict()


async def scale_recipe(params: ScaleRecipeParams, ctx: UserContext, deps: ToolDeps) -> dict:
    recipe = await deps.recipes.get_recipe(ctx.user_id, params.recipe_id)
    if recipe is None:
        raise ToolExecutionError("Recipe not found")

    servings = recipe.get("servings")
    if not servings:
        raise ToolExecutionError("Recipe has no servings to scale from")

    factor = params.new_servings / servings
    ingredients = [
        {**ing, "amount": round(ing["amount"] * factor, 2) if ing.get("amount") is not None else None}
        for ing in recipe.get("ingredients") or []
    ]
    return {
        "original_servings": servings,
        "new_servings": params.new_servings,
        "scale_factor": factor,
        "ingredients": ingredients,
    }


async def estimate_cooking_time(
    params: EstimateCookingTimeParams, ctx: UserContext, deps: ToolDeps
) -> dict:
    recipes = []
    for recipe_id in params.recipe_ids:
        recipe = await deps.recipes.get_recipe(ctx.user_id, recipe_id)
        if recipe is None:
            continue
        recipes.append(
            {
                "id": recipe["id"],
                "name": recipe["name"],
                "prep_time": recipe.get("prep_time"),
                "cook_time": recipe.get("cook_time"),
                "total_time": total_time(recipe),
            }
        )

    total = sum(r["total_time"] for r in recipes)
    return {
        "total_time": total,
        "recipes": recipes,
        "average_time": round(total / len(recipes)) if recipes else 0,
    }
