"""
Tests for the Supabase-backed store.

The Supabase client is a MagicMock with a fluent query builder; these
tests check which filters reach PostgREST and how rows are reshaped.
"""

import asyncio
from datetime import date
from unittest.mock import MagicMock, call

import pytest

from larder.db.supabase_store import SupabaseKitchenStore

from conftest import USER_A


def run(coro):
    """Run an async coroutine synchronously (no pytest-asyncio needed)."""
    return asyncio.run(coro)


@pytest.fixture
def table(mock_supabase):
    return mock_supabase.table.return_value


@pytest.fixture
def supabase_store(mock_supabase):
    return SupabaseKitchenStore(client=mock_supabase)


def returns(table, *payloads):
    """Queue `execute()` results, one per query."""
    table.execute.side_effect = [MagicMock(data=p) for p in payloads]


class TestOwnershipFilters:
    """Every user-owned query is scoped to the caller."""

    def test_pantry_is_scoped(self, supabase_store, mock_supabase, table):
        run(supabase_store.list_pantry_items(USER_A, category="dairy", sort_by="expiration_date"))

        mock_supabase.table.assert_called_with("pantry_items")
        assert call("user_id", USER_A) in table.eq.call_args_list
        assert call("category", "dairy") in table.eq.call_args_list
        table.order.assert_called_with("expiration_date")

    def test_unknown_sort_column_falls_back_to_name(self, supabase_store, table):
        run(supabase_store.list_pantry_items(USER_A, sort_by="user_id; drop table"))
        table.order.assert_called_with("name")

    def test_expiring_window(self, supabase_store, table):
        run(supabase_store.expiring_pantry_items(USER_A, date(2024, 5, 15), date(2024, 5, 22)))
        table.gte.assert_called_with("expiration_date", "2024-05-15")
        table.lte.assert_called_with("expiration_date", "2024-05-22")

    def test_recipes_include_public(self, supabase_store, table):
        run(supabase_store.list_recipes(USER_A))
        table.or_.assert_called_with("user_id.eq.user-a,is_public.eq.true")

    def test_delete_recipe_requires_owner(self, supabase_store, table):
        returns(table, [])
        assert run(supabase_store.delete_recipe(USER_A, "r1")) is False
        assert call("user_id", USER_A) in table.eq.call_args_list

    def test_add_pantry_item_sets_owner(self, supabase_store, table):
        returns(table, [{"id": "p1", "name": "rice", "user_id": USER_A}])
        run(supabase_store.add_pantry_item(USER_A, {"name": "rice", "user_id": "someone-else"}))
        table.insert.assert_called_with({"name": "rice", "user_id": USER_A})


class TestChildTables:
    """Items and entries are reached only through an owned parent."""

    def test_grocery_item_needs_owned_list(self, supabase_store, table):
        returns(table, [])
        assert run(supabase_store.add_grocery_item(USER_A, "list-1", {"item_name": "eggs"})) is None
        table.insert.assert_not_called()

    def test_grocery_item_defaults(self, supabase_store, table):
        returns(table, [{"id": "list-1"}], [{"id": "i1", "item_name": "eggs"}])
        run(supabase_store.add_grocery_item(USER_A, "list-1", {"item_name": "eggs"}))
        table.insert.assert_called_with(
            {"category": "other", "is_purchased": False, "item_name": "eggs", "list_id": "list-1"}
        )

    def test_items_of_foreign_list_are_hidden(self, supabase_store, table):
        returns(table, [])
        assert run(supabase_store.list_grocery_items(USER_A, "list-1")) == []

    def test_meal_entry_needs_owned_plan(self, supabase_store, table):
        returns(table, [])
        entry = {"meal_date": "2024-05-15", "meal_type": "dinner"}
        assert run(supabase_store.add_meal_entry(USER_A, "plan-1", entry)) is None

    def test_delete_entries_only_owned(self, supabase_store, table):
        returns(table, [{"id": "e1"}], [{"id": "e1"}])
        assert run(supabase_store.delete_meal_entries(USER_A, ["e1", "e2"])) == 1
        table.in_.assert_called_with("id", ["e1"])

    def test_delete_nothing(self, supabase_store, table):
        assert run(supabase_store.delete_meal_entries(USER_A, [])) == 0
        table.execute.assert_not_called()


class TestRowShapes:
    """Embedded PostgREST relations are flattened."""

    def test_recipe_ingredients_and_nutrition(self, supabase_store, table):
        returns(
            table,
            [
                {
                    "id": "r1",
                    "name": "Pancakes",
                    "recipe_ingredients": [
                        {"id": "x", "recipe_id": "r1", "name": "flour", "amount": 2, "unit": "cup"}
                    ],
                    "nutrition_info": [{"calories": 400, "protein": 10, "carbohydrates": 60, "fat": 12}],
                }
            ],
        )

        recipe = run(supabase_store.get_recipe(USER_A, "r1"))

        assert recipe["ingredients"] == [{"name": "flour", "amount": 2, "unit": "cup"}]
        assert recipe["calories"] == 400
        assert "recipe_ingredients" not in recipe
        assert "nutrition_info" not in recipe

    def test_recipe_without_nutrition(self, supabase_store, table):
        returns(table, [{"id": "r1", "name": "Toast", "recipe_ingredients": [], "nutrition_info": None}])
        recipe = run(supabase_store.list_recipes(USER_A))[0]
        assert recipe["ingredients"] == []
        assert recipe["fat"] is None

    def test_meal_plan_counts(self, supabase_store, table):
        returns(table, [{"id": "p1", "name": "Week", "meal_plan_entries": [{"count": 3}]}])
        assert run(supabase_store.list_meal_plans(USER_A)) == [{"id": "p1", "name": "Week", "meal_count": 3}]

    def test_grocery_list_counts(self, supabase_store, table):
        returns(
            table,
            [
                {
                    "id": "l1",
                    "name": "Shopping List",
                    "grocery_list_items": [{"is_purchased": True}, {"is_purchased": False}],
                }
            ],
        )
        (summary,) = run(supabase_store.list_grocery_lists(USER_A))
        assert summary["item_count"] == 2
        assert summary["purchased_count"] == 1
