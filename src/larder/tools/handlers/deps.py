"""Store capabilities handed to every tool handler."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date

from larder.db.stores import GroceryStore, MealPlanStore, PantryStore, RecipeStore


@dataclass(frozen=True)
class ToolDeps:
    pantry: PantryStore
    recipes: RecipeStore
    meal_plans: MealPlanStore
    grocery: GroceryStore
    today: Callable[[], date] = field(default=date.today)
