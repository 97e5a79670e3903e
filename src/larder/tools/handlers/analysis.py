"""
Larder - Analysis tool handlers.

Dietary compliance and substitutions are keyword heuristics: advisory,
not authoritative.
"""

import re

from larder.errors import ToolExecutionError
from larder.models import UserContext
from larder.tools.handlers.deps import ToolDeps
from larder.tools.params import (
    AnalyzeDietaryComplianceParams,
    MealPlanIdParams,
    SuggestSubstitutionsParams,
)

# restriction -> (pattern over ingredient names, issue reported on a match)
DIETARY_RULES: dict[str, tuple[re.Pattern, str]] = {
    "vegetarian": (
        re.compile(r"meat|chicken|beef|pork|fish", re.IGNORECASE),
        "Contains meat products",
    ),
    "vegan": (
        re.compile(r"meat|chicken|beef|pork|fish|egg|milk|cheese|butter|cream", re.IGNORECASE),
        "Contains animal products",
    ),
    "gluten-free": (
        re.compile(r"wheat|flour|bread|pasta", re.IGNORECASE),
        "Contains gluten",
    ),
}

SUBSTITUTIONS: dict[str, list[str]] = {
    "butter": ["olive oil", "coconut oil", "margarine"],
    "milk": ["almond milk", "soy milk", "oat milk"],
    "egg": ["flax egg", "chia egg", "applesauce"],
    "flour": ["almond flour", "coconut flour", "gluten-free flour"],
    "sugar": ["honey", "maple syrup", "stevia"],
}

NO_SUBSTITUTIONS = "No substitutions available"

_NUTRIENTS = ("calories", "protein", "carbohydrates", "fat")
_MEALS_PER_DAY = 3


def dietary_issues(ingredients: list[dict], restrictions: list[str]) -> list[str]:
    """Issues found in an ingredient list; unknown restrictions are ignored."""
    issues = []
    for restriction in restrictions:
        rule = DIETARY_RULES.get(restriction.strip().lower())
        if rule is None:
            continue
        pattern, issue = rule
        if any(pattern.search(ing.get("name") or "") for ing in ingredients):
            issues.append(issue)
    return issues


async def analyze_dietary_compliance(
    params: AnalyzeDietaryComplianceParams, ctx: UserContext, deps: ToolDeps
) -> dict:
    recipe = await deps.recipes.get_recipe(ctx.user_id, params.recipe_id)
    if recipe is None:
        raise ToolExecutionError("Recipe not found")

    issues = dietary_issues(recipe.get("ingredients") or [], params.dietary_restrictions)
    return {
        "compliant": not issues,
        "issues": issues,
        "restrictions": params.dietary_restrictions,
    }


async def suggest_ingredient_substitutions(
    params: SuggestSubstitutionsParams, ctx: UserContext, deps: ToolDeps
) -> dict:
    ingredient = params.ingredient.lower()
    suggestions = [sub for key, subs in SUBSTITUTIONS.items() if key in ingredient for sub in subs]
    return {
        "original": params.ingredient,
        "suggestions": suggestions or [NO_SUBSTITUTIONS],
        "reason": params.reason,
    }


async def calculate_meal_plan_nutrition(
    params: MealPlanIdParams, ctx: UserContext, deps: ToolDeps
) -> dict:
    """
    Total nutrition over a plan's entries, with a per-day average.

    Days are estimated as three meals each. An empty plan reports zeros.
    """
    plan = await deps.meal_plans.get_meal_plan(ctx.user_id, params.meal_plan_id)
    if plan is None:
        raise ToolExecutionError("Meal plan not found")

    totals = dict.fromkeys(_NUTRIENTS, 0)
    entries = plan.get("entries") or []
    for entry in entries:
        recipe = await deps.recipes.get_recipe(ctx.user_id, entry["recipe_id"]) if entry.get("recipe_id") else None
        if recipe is None:
            continue
        for key in _NUTRIENTS:
            totals[key] += recipe.get(key) or 0

    days = len(entries) / _MEALS_PER_DAY
    daily = {key: round(totals[key] / days) if days else 0 for key in _NUTRIENTS}
    return {**totals, "daily_average": daily, "meal_count": len(entries)}
