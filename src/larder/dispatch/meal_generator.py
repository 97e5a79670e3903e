"""
Larder - Meal generation.

`generate_meals` fills empty breakfast, lunch and dinner slots over a
date range. The default generator rotates through the user's recipes,
preferring recipes tagged with the slot's meal type.
"""

import logging
from datetime import date, timedelta
from typing import Protocol, runtime_checkable

from larder.db.stores import MealPlanStore, RecipeStore
from larder.dispatch.placement import place_meal

logger = logging.getLogger(__name__)

DEFAULT_MEAL_TYPES = ("breakfast", "lunch", "dinner")


@runtime_checkable
class MealGenerator(Protocol):
    async def generate(self, user_id: str, start: date, end: date) -> list[dict]:
        """Create meal entries between start and end (inclusive); return them."""
        ...


class RecipeRotationGenerator:
    """Fill empty slots by cycling through the user's recipes."""

    def __init__(
        self,
        recipes: RecipeStore,
        meal_plans: MealPlanStore,
        meal_types: tuple[str, ...] = DEFAULT_MEAL_TYPES,
    ):
        self.recipes = recipes
        self.meal_plans = meal_plans
        self.meal_types = meal_types

    async def generate(self, user_id: str, start: date, end: date) -> list[dict]:
        recipes = await self.recipes.list_recipes(user_id)
        if not recipes:
            logger.info("No recipes to generate meals from")
            return []

        taken = {
            (str(e["meal_date"]), e["meal_type"])
            for e in await self.meal_plans.list_meal_entries(user_id, start, end)
        }

        created: list[dict] = []
        turn = 0
        day = start
        while day <= end:
            for meal_type in self.meal_types:
                if (day.isoformat(), meal_type) in taken:
                    continue

                candidates = [r for r in recipes if r.get("meal_type") == meal_type] or recipes
                recipe = candidates[turn % len(candidates)]
                turn += 1

                entry = await place_meal(
                    self.meal_plans,
                    user_id,
                    day,
                    meal_type,
                    {"recipe_id": recipe["id"], "recipe_name": recipe["name"]},
                )
                if entry is not None:
                    created.append(entry)
            day += timedelta(days=1)

        logger.info(f"Generated {len(created)} meals from {start} to {end}")
        return created
