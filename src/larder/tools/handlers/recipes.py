"""
Larder - Recipe tool handlers.

Recipes visible to a user are their own plus public ones; the store
enforces that, and search filters the visible set.
"""

from larder.errors import ToolExecutionError
from larder.models import UserContext
from larder.tools.handlers.analysis import DIETARY_RULES, dietary_issues
from larder.tools.handlers.deps import ToolDeps
from larder.tools.params import CreateRecipeParams, RecipeIdParams, SearchRecipesParams

_SUMMARY_FIELDS = (
    "id",
    "name",
    "description",
    "prep_time",
    "cook_time",
    "servings",
    "difficulty",
    "meal_type",
)


def total_time(recipe: dict) -> int:
    return (recipe.get("prep_time") or 0) + (recipe.get("cook_time") or 0)


def _matches(recipe: dict, params: SearchRecipesParams) -> bool:
    if params.query:
        needle = params.query.lower()
        haystack = f"{recipe.get('name') or ''}\n{recipe.get('instructions') or ''}".lower()
        if needle not in haystack:
            return False

    if params.ingredients:
        names = [(ing.get("name") or "").lower() for ing in recipe.get("ingredients") or []]
        wanted = [w.lower() for w in params.ingredients]
        if not any(w in name for w in wanted for name in names):
            return False

    if params.meal_type and recipe.get("meal_type") != params.meal_type:
        return False
    if params.difficulty and recipe.get("difficulty") != params.difficulty:
        return False
    if params.max_time is not None and total_time(recipe) > params.max_time:
        return False

    if params.diet and params.diet.lower() in DIETARY_RULES:
        if dietary_issues(recipe.get("ingredients") or [], [params.diet]):
            return False

    return True


async def search_recipes(params: SearchRecipesParams, ctx: UserContext, deps: ToolDeps) -> list[dict]:
    results = []
    for recipe in await deps.recipes.list_recipes(ctx.user_id):
        if not _matches(recipe, params):
            continue
        summary = {key: recipe.get(key) for key in _SUMMARY_FIELDS}
        summary["total_time"] = total_time(recipe)
        results.append(summary)
        if len(results) >= params.limit:
            break
    return results


async def get_recipe_details(params: RecipeIdParams, ctx: UserContext, deps: ToolDeps) -> dict:
    recipe = await deps.recipes.get_recipe(ctx.user_id, params.recipe_id)
    if recipe is None:
        raise ToolExecutionError("Recipe not found")
    return recipe


async def get_recipe_ingredients(params: RecipeIdParams, ctx: UserContext, deps: ToolDeps) -> list[dict]:
    recipe = await get_recipe_details(params, ctx, deps)
    return recipe.get("ingredients") or []


async def create_recipe(params: CreateRecipeParams, ctx: UserContext, deps: ToolDeps) -> dict:
    recipe = params.model_dump(mode="json", by_alias=False, exclude={"ingredients"})
    recipe["is_public"] = False
    ingredients = [ing.model_dump(by_alias=False) for ing in params.ingredients]

    created = await deps.recipes.create_recipe(ctx.user_id, recipe, ingredients)
    return {"id": created["id"], "name": created["name"]}
