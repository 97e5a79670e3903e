"""
Pytest configuration and fixtures for Larder tests.
"""

import asyncio
import os
from dataclasses import dataclass
from datetime import date
from unittest.mock import MagicMock

import pytest

# Set test environment before importing larder modules
os.environ["LARDER_ENV"] = "development"
os.environ["USE_MODEL_FALLBACK"] = "false"

from larder.db import InMemoryKitchenStore  # noqa: E402

USER_A = "user-a"
USER_B = "user-b"

# A Wednesday
TODAY = date(2024, 5, 15)


@dataclass
class SeededKitchen:
    store: InMemoryKitchenStore
    pancakes: dict
    stir_fry: dict
    public_salad: dict
    private_stew: dict
    flour: dict
    milk: dict


async def _seed() -> SeededKitchen:
    store = InMemoryKitchenStore()

    pancakes = await store.create_recipe(
        USER_A,
        {
            "name": "Pancakes",
            "instructions": "Mix and fry.",
            "meal_type": "breakfast",
            "servings": 4,
            "prep_time": 10,
            "cook_time": 15,
            "difficulty": "easy",
            "calories": 400,
            "protein": 10,
            "carbohydrates": 60,
            "fat": 12,
        },
        [
            {"name": "flour", "amount": 2, "unit": "cup"},
            {"name": "milk", "amount": 1.5, "unit": "cup"},
            {"name": "eggs", "amount": 2, "unit": "pieces"},
        ],
    )
    stir_fry = await store.create_recipe(
        USER_A,
        {
            "name": "Chicken Stir Fry",
            "instructions": "Stir fry the chicken with broccoli.",
            "meal_type": "dinner",
            "servings": 2,
            "prep_time": 15,
            "cook_time": 10,
            "difficulty": "medium",
            "calories": 550,
            "protein": 40,
            "carbohydrates": 30,
            "fat": 20,
        },
        [
            {"name": "chicken breast", "amount": 1, "unit": "lb"},
            {"name": "broccoli", "amount": 2, "unit": "cup"},
            {"name": "milk", "amount": 0.5, "unit": "cup"},
        ],
    )
    public_salad = await store.create_recipe(
        USER_B,
        {
            "name": "Garden Salad",
            "instructions": "Toss everything.",
            "meal_type": "lunch",
            "servings": 2,
            "prep_time": 5,
            "cook_time": 0,
            "is_public": True,
        },
        [
            {"name": "lettuce", "amount": 1, "unit": "heads"},
            {"name": "tomato", "amount": 2, "unit": "pieces"},
        ],
    )
    private_stew = await store.create_recipe(
        USER_B,
        {"name": "Secret Stew", "instructions": "Simmer.", "meal_type": "dinner", "servings": 6},
        [{"name": "beef", "amount": 2, "unit": "lb"}],
    )

    flour = await store.add_pantry_item(
        USER_A, {"name": "flour", "quantity": 5, "unit": "cup", "category": "dry_goods"}
    )
    milk = await store.add_pantry_item(
        USER_A,
        {"name": "Milk", "quantity": 1, "unit": "cup", "category": "dairy", "expiration_date": "2024-05-18"},
    )
    await store.add_pantry_item(
        USER_B, {"name": "eggs", "quantity": 12, "unit": "pieces", "expiration_date": "2024-05-16"}
    )

    return SeededKitchen(store, pancakes, stir_fry, public_salad, private_stew, flour, milk)


@pytest.fixture
def today():
    """Fixed 'today' provider (Wednesday 2024-05-15)."""
    return lambda: TODAY


@pytest.fixture
def store():
    """Empty in-memory store."""
    return InMemoryKitchenStore()


@pytest.fixture
def kitchen() -> SeededKitchen:
    """In-memory store seeded with recipes and pantry items for two users."""
    return asyncio.run(_seed())


@pytest.fixture
def mock_supabase():
    """Mock Supabase client with a fluent query builder."""
    mock_client = MagicMock()

    mock_table = MagicMock()
    for method in ("select", "insert", "update", "delete", "eq", "in_", "or_", "order", "gte", "lte", "limit"):
        getattr(mock_table, method).return_value = mock_table
    mock_table.execute.return_value = MagicMock(data=[])

    mock_client.table.return_value = mock_table

    return mock_client
