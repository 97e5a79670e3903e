"""
Larder - Data stores.

Capability protocols plus in-memory and Supabase implementations.
"""

from larder.db.memory import InMemoryKitchenStore
from larder.db.stores import GroceryStore, KitchenStore, MealPlanStore, PantryStore, RecipeStore

__all__ = [
    "GroceryStore",
    "InMemoryKitchenStore",
    "KitchenStore",
    "MealPlanStore",
    "PantryStore",
    "RecipeStore",
]
