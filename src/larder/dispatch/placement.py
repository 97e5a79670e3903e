"""
Larder - Meal placement.

Meal entries live inside a plan. A date with no covering plan gets a new
Sunday-to-Saturday plan named after its first day.
"""

import logging
from datetime import date, timedelta

from larder.db.stores import MealPlanStore
from larder.dispatch.dates import week_start

logger = logging.getLogger(__name__)


async def plan_for_date(meal_plans: MealPlanStore, user_id: str, day: date) -> dict:
    """Find the user's plan covering `day`, creating that week's plan if none does."""
    iso = day.isoformat()
    for plan in await meal_plans.list_meal_plans(user_id):
        if str(plan["start_date"]) <= iso <= str(plan["end_date"]):
            return plan

    start = week_start(day)
    logger.info(f"Creating meal plan for week of {start.isoformat()}")
    return await meal_plans.create_meal_plan(
        user_id,
        {
            "name": f"Week of {start.isoformat()}",
            "start_date": start.isoformat(),
            "end_date": (start + timedelta(days=6)).isoformat(),
        },
    )


async def find_slot(
    meal_plans: MealPlanStore, user_id: str, day: date, meal_type: str
) -> dict | None:
    """The first entry planned for a day and meal slot, if any."""
    entries = await meal_plans.list_meal_entries(user_id, day, day, meal_type)
    return entries[0] if entries else None


async def place_meal(
    meal_plans: MealPlanStore, user_id: str, day: date, meal_type: str, meal: dict
) -> dict | None:
    """
    Add a meal to the plan covering `day`.

    `meal` supplies recipe_id, recipe_name and notes; the slot comes from
    `day` and `meal_type`.
    """
    plan = await plan_for_date(meal_plans, user_id, day)
    entry = {
        "recipe_id": meal.get("recipe_id"),
        "recipe_name": meal.get("recipe_name"),
        "notes": meal.get("notes"),
        "meal_date": day.isoformat(),
        "meal_type": meal_type,
    }
    return await meal_plans.add_meal_entry(user_id, plan["id"], entry)
