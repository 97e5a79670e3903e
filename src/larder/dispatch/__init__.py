"""
Larder - Intent dispatch.

- Keyword interpreter for common commands
- Intent set and per-intent command models
- Day and time range resolution
- The dispatcher that turns interpretations into effects
"""

from larder.dispatch.dates import resolve_day, resolve_time_range, week_start
from larder.dispatch.dispatcher import IntentDispatcher
from larder.dispatch.fallback import interpret as interpret_keywords
from larder.dispatch.intents import Intent, default_response, to_command
from larder.dispatch.meal_generator import MealGenerator, RecipeRotationGenerator

__all__ = [
    "Intent",
    "IntentDispatcher",
    "MealGenerator",
    "RecipeRotationGenerator",
    "default_response",
    "interpret_keywords",
    "resolve_day",
    "resolve_time_range",
    "to_command",
    "week_start",
]
