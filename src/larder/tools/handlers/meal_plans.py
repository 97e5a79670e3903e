"""Larder - Meal plan tool handlers."""

from larder.errors import ToolExecutionError
from larder.models import UserContext
from larder.tools.handlers.deps import ToolDeps
from larder.tools.params import (
    AddMealToPlanParams,
    CreateMealPlanParams,
    MealPlanIdParams,
    NoParams,
    RemoveMealFromPlanParams,
)


async def get_meal_plans(params: NoParams, ctx: UserContext, deps: ToolDeps) -> list[dict]:
    return await deps.meal_plans.list_meal_plans(ctx.user_id)


async def get_meal_plan_details(params: MealPlanIdParams, ctx: UserContext, deps: ToolDeps) -> dict:
    plan = await deps.meal_plans.get_meal_plan(ctx.user_id, params.meal_plan_id)
    if plan is None:
        raise ToolExecutionError("Meal plan not found")
    return plan


async def create_meal_plan(params: CreateMealPlanParams, ctx: UserContext, deps: ToolDeps) -> dict:
    if params.end_date < params.start_date:
        raise ToolExecutionError("End date must not be before start date")
    plan = params.model_dump(mode="json", by_alias=False)
    return await deps.meal_plans.create_meal_plan(ctx.user_id, plan)


async def add_meal_to_plan(params: AddMealToPlanParams, ctx: UserContext, deps: ToolDeps) -> dict:
    recipe = await deps.recipes.get_recipe(ctx.user_id, params.recipe_id)
    if recipe is None:
        raise ToolExecutionError("Recipe not found")

    entry = params.model_dump(mode="json", by_alias=False, exclude={"meal_plan_id"})
    entry["recipe_name"] = recipe["name"]

    row = await deps.meal_plans.add_meal_entry(ctx.user_id, params.meal_plan_id, entry)
    if row is None:
        raise ToolExecutionError("Meal plan not found")
    return row


async def remove_meal_from_plan(params: RemoveMealFromPlanParams, ctx: UserContext, deps: ToolDeps) -> dict:
    return {"deleted": await deps.meal_plans.remove_meal_entry(ctx.user_id, params.entry_id)}
