"""
Tests for the intent dispatcher.

Tests cover:
- Shopping list intents, including partial batch failure
- Meal plan intents (staging, clear, generate, move, swap)
- Recipe intents
- Clarifications and the generic failure path
- User scoping
"""

import asyncio
from datetime import date, timedelta

import pytest

from larder.db import InMemoryKitchenStore
from larder.dispatch import IntentDispatcher
from larder.dispatch.dispatcher import GENERIC_APOLOGY, HELP_TEXT
from larder.dispatch.placement import find_slot, place_meal
from larder.models import Interpretation, UserContext

from conftest import TODAY, USER_A, USER_B


def run(coro):
    """Run an async coroutine synchronously (no pytest-asyncio needed)."""
    return asyncio.run(coro)


CTX_A = UserContext(user_id=USER_A)
CTX_B = UserContext(user_id=USER_B)


def interp(intent: str, response: str | None = None, **entities) -> Interpretation:
    return Interpretation(intent=intent, entities=entities, response=response)


class FlakyGroceryStore(InMemoryKitchenStore):
    """Refuses items whose name contains 'bad'; raises for 'boom'."""

    async def add_grocery_item(self, user_id, list_id, item):
        if "boom" in item["item_name"]:
            raise RuntimeError("connection reset")
        if "bad" in item["item_name"]:
            return None
        return await super().add_grocery_item(user_id, list_id, item)


class BrokenRecipeStore(InMemoryKitchenStore):
    async def list_recipes(self, user_id):
        raise RuntimeError("database down")


class RefusingMealStore(InMemoryKitchenStore):
    """Refuses new entries for meals named in `refused`; raises for those in `raising`."""

    def __init__(self):
        super().__init__()
        self.refused: set[str] = set()
        self.raising: set[str] = set()

    async def add_meal_entry(self, user_id, plan_id, entry):
        if entry.get("recipe_name") in self.raising:
            raise RuntimeError("connection reset")
        if entry.get("recipe_name") in self.refused:
            return None
        return await super().add_meal_entry(user_id, plan_id, entry)


@pytest.fixture
def dispatcher(kitchen, today):
    return IntentDispatcher.from_store(kitchen.store, today=today)


def shopping_items(store, user_id=USER_A) -> list[str]:
    async def _items():
        for grocery_list in await store.list_grocery_lists(user_id):
            if grocery_list["name"] == "Shopping List":
                return [i["item_name"] for i in await store.list_grocery_items(user_id, grocery_list["id"])]
        return []

    return run(_items())


def slot(store, day: date, meal_type: str, user_id=USER_A) -> dict | None:
    return run(find_slot(store, user_id, day, meal_type))


def plan(store, day: date, meal_type: str, recipe: dict, user_id=USER_A) -> dict:
    meal = {"recipe_id": recipe["id"], "recipe_name": recipe["name"]}
    return run(place_meal(store, user_id, day, meal_type, meal))


class TestShoppingList:
    """add / remove / clear / consolidate."""

    def test_add_item_end_to_end(self, dispatcher, kitchen):
        result = run(
            dispatcher.dispatch(
                interp("add_shopping_item", items=[{"name": "milk", "quantity": "1", "unit": "gallon"}]),
                CTX_A,
            )
        )
        assert result.message == "Added 1 gallon milk to your list."
        assert result.success is True
        assert result.actions[0].succeeded == 1
        assert shopping_items(kitchen.store) == ["1 gallon milk"]

    def test_add_items_in_order(self, dispatcher, kitchen):
        run(dispatcher.dispatch(interp("add_shopping_item", items=["eggs", {"name": "bread", "quantity": 2}]), CTX_A))
        assert shopping_items(kitchen.store) == ["eggs", "2 bread"]

    def test_reuses_existing_list(self, dispatcher, kitchen):
        run(dispatcher.dispatch(interp("add_shopping_item", items=["eggs"]), CTX_A))
        run(dispatcher.dispatch(interp("add_shopping_item", items=["bread"]), CTX_A))
        lists = run(kitchen.store.list_grocery_lists(USER_A))
        assert len(lists) == 1
        assert lists[0]["item_count"] == 2

    def test_partial_failure(self, today):
        store = FlakyGroceryStore()
        dispatcher = IntentDispatcher.from_store(store, today=today)
        result = run(
            dispatcher.dispatch(interp("add_shopping_item", items=["eggs", "bad apples", "boom box", "milk"]), CTX_A)
        )
        assert result.message == "Added eggs, milk to your list, but 2 items couldn't be added."
        report = result.actions[0]
        assert (report.succeeded, report.failed, report.success) == (2, 2, False)
        assert shopping_items(store) == ["eggs", "milk"]

    def test_total_failure(self, today):
        dispatcher = IntentDispatcher.from_store(FlakyGroceryStore(), today=today)
        result = run(dispatcher.dispatch(interp("add_shopping_item", items=["bad eggs"]), CTX_A))
        assert result.message == "Couldn't add items. Try again."
        assert result.actions[0].failed == 1

    def test_missing_items_asks(self, dispatcher, kitchen):
        result = run(dispatcher.dispatch(interp("add_shopping_item"), CTX_A))
        assert result.message == "What would you like me to add to your shopping list?"
        assert result.actions == []
        assert run(kitchen.store.list_grocery_lists(USER_A)) == []

    def test_remove_item(self, dispatcher, kitchen):
        run(dispatcher.dispatch(interp("add_shopping_item", items=["2 bananas", "bread"]), CTX_A))
        result = run(dispatcher.dispatch(interp("remove_shopping_item", itemName="Banana"), CTX_A))
        assert result.message == "Removed 2 bananas from your list."
        assert shopping_items(kitchen.store) == ["bread"]

    def test_remove_missing_item(self, dispatcher):
        result = run(dispatcher.dispatch(interp("remove_shopping_item", itemName="caviar"), CTX_A))
        assert result.message == '"caviar" isn\'t on your shopping list.'
        assert result.success is False

    def test_clear_checked_only(self, dispatcher, kitchen):
        run(dispatcher.dispatch(interp("add_shopping_item", items=["eggs", "bread"]), CTX_A))
        lists = run(kitchen.store.list_grocery_lists(USER_A))
        items = run(kitchen.store.list_grocery_items(USER_A, lists[0]["id"]))
        kitchen.store.grocery_list_items[items[0]["id"]]["is_purchased"] = True

        result = run(dispatcher.dispatch(interp("clear_shopping_list", checkedOnly=True), CTX_A))
        assert result.message == "Cleared 1 checked item from your list."
        assert shopping_items(kitchen.store) == ["bread"]

    def test_clear_nothing_is_success(self, dispatcher):
        result = run(dispatcher.dispatch(interp("clear_shopping_list", checkedOnly=True), CTX_A))
        assert result.message == "Cleared 0 checked items from your list."
        assert result.success is True

    def test_consolidate(self, dispatcher, kitchen):
        run(
            dispatcher.dispatch(
                interp("add_shopping_item", items=["2 cups flour", "milk", "1 cup Flour"]), CTX_A
            )
        )
        result = run(dispatcher.dispatch(interp("consolidate_shopping_list"), CTX_A))
        assert result.message == "Consolidated to 2 items."
        assert sorted(shopping_items(kitchen.store)) == ["3 cups flour", "milk"]

    def test_add_uses_response_when_all_added(self, dispatcher, kitchen):
        result = run(dispatcher.dispatch(interp("add_shopping_item", "Milk is on the list!", items=["milk"]), CTX_A))
        assert result.message == "Milk is on the list!"
        assert result.actions[0].succeeded == 1

    def test_partial_failure_ignores_response(self, today):
        dispatcher = IntentDispatcher.from_store(FlakyGroceryStore(), today=today)
        result = run(
            dispatcher.dispatch(interp("add_shopping_item", "All added!", items=["eggs", "bad apples"]), CTX_A)
        )
        assert result.message == "Added eggs to your list, but 1 item couldn't be added."

    def test_consolidate_keeps_parsed_quantity(self, dispatcher, kitchen):
        run(dispatcher.dispatch(interp("add_shopping_item", items=["saffron", "2 saffron"]), CTX_A))
        result = run(dispatcher.dispatch(interp("consolidate_shopping_list"), CTX_A))
        assert result.message == "Consolidated to 1 item."
        assert shopping_items(kitchen.store) == ["2 saffron"]

    def test_lists_are_per_user(self, dispatcher, kitchen):
        run(dispatcher.dispatch(interp("add_shopping_item", items=["eggs"]), CTX_A))
        result = run(dispatcher.dispatch(interp("remove_shopping_item", itemName="eggs"), CTX_B))
        assert result.success is False
        assert shopping_items(kitchen.store) == ["eggs"]


class TestNavigationAndHandOffs:
    """navigate / add_meal / import_recipe / create_recipe."""

    def test_navigate(self, dispatcher):
        result = run(dispatcher.dispatch(interp("navigate", destination="Meal Planning"), CTX_A))
        assert result.navigate_to == "/meal-planning"
        assert result.message == "Taking you to Meal Planning!"

    def test_navigate_uses_response(self, dispatcher):
        result = run(dispatcher.dispatch(interp("navigate", "Here's your list!", destination="shopping_list"), CTX_A))
        assert result.message == "Here's your list!"
        assert result.navigate_to == "/shopping-lists"

    def test_navigate_unknown_destination_asks(self, dispatcher):
        result = run(dispatcher.dispatch(interp("navigate", destination="garage"), CTX_A))
        assert result.navigate_to is None
        assert result.message.startswith("Where would you like to go")

    def test_add_meal_is_staged(self, dispatcher, kitchen):
        result = run(dispatcher.dispatch(interp("add_meal", food="tacos", mealType="Dinner", day="Friday"), CTX_A))
        assert result.staged == {
            "type": "pending_meal",
            "food": "tacos",
            "meal_type": "dinner",
            "date": "2024-05-17",
        }
        assert result.navigate_to == "/meal-planning"
        assert run(kitchen.store.list_meal_plans(USER_A)) == []

    def test_add_meal_defaults_to_today(self, dispatcher):
        result = run(dispatcher.dispatch(interp("add_meal", food="soup", mealType="lunch"), CTX_A))
        assert result.staged["date"] == TODAY.isoformat()

    def test_import_recipe(self, dispatcher):
        result = run(dispatcher.dispatch(interp("import_recipe", url="https://example.com/pie"), CTX_A))
        assert result.staged == {"type": "pending_import", "url": "https://example.com/pie", "category": "Dinner"}
        assert result.navigate_to == "/recipes"

    def test_import_requires_url(self, dispatcher):
        result = run(dispatcher.dispatch(interp("import_recipe", url="not a link"), CTX_A))
        assert result.staged is None
        assert result.message == "What's the link to the recipe you want to import?"

    def test_create_recipe(self, dispatcher):
        result = run(dispatcher.dispatch(interp("create_recipe", recipeName="lasagna"), CTX_A))
        assert result.staged == {"type": "open_recipe_form", "recipe_name": "lasagna"}


class TestMealPlans:
    """clear / generate / move / swap."""

    def test_clear_meals_today(self, dispatcher, kitchen):
        plan(kitchen.store, TODAY, "breakfast", kitchen.pancakes)
        plan(kitchen.store, TODAY, "dinner", kitchen.stir_fry)
        plan(kitchen.store, TODAY + timedelta(days=1), "dinner", kitchen.stir_fry)

        result = run(dispatcher.dispatch(interp("clear_meals", timeRange="today"), CTX_A))
        assert result.message == "Cleared 2 meals."
        assert slot(kitchen.store, TODAY + timedelta(days=1), "dinner") is not None

    def test_clear_meals_by_type(self, dispatcher, kitchen):
        plan(kitchen.store, TODAY, "breakfast", kitchen.pancakes)
        plan(kitchen.store, TODAY, "dinner", kitchen.stir_fry)

        result = run(dispatcher.dispatch(interp("clear_meals", timeRange="this_week", mealType="dinner"), CTX_A))
        assert result.message == "Cleared 1 meal."
        assert slot(kitchen.store, TODAY, "breakfast") is not None

    def test_clear_meals_nothing_planned(self, dispatcher):
        result = run(dispatcher.dispatch(interp("clear_meals", timeRange="tomorrow"), CTX_A))
        assert result.message == "Cleared 0 meals."
        assert result.success is True

    def test_generate_meals_this_week(self, dispatcher, kitchen):
        plan(kitchen.store, TODAY, "breakfast", kitchen.pancakes)

        result = run(dispatcher.dispatch(interp("generate_meals", timeRange="this_week"), CTX_A))
        # Sunday 12th to Saturday 18th, three slots a day, one already taken
        assert result.message == "Created 20 meals!"
        dinner = slot(kitchen.store, date(2024, 5, 12), "dinner")
        assert dinner["recipe_name"] == "Chicken Stir Fry"

    def test_generate_meals_is_clamped(self, dispatcher, kitchen):
        result = run(dispatcher.dispatch(interp("generate_meals", timeRange="all"), CTX_A))
        assert result.message == "Created 42 meals!"
        assert slot(kitchen.store, TODAY + timedelta(days=13), "lunch") is not None
        assert slot(kitchen.store, TODAY + timedelta(days=14), "lunch") is None

    def test_generate_without_recipes(self, store, today):
        dispatcher = IntentDispatcher.from_store(store, today=today)
        result = run(dispatcher.dispatch(interp("generate_meals", timeRange="today"), CTX_A))
        assert result.message == "Created 0 meals!"

    def test_move_meal(self, dispatcher, kitchen):
        plan(kitchen.store, TODAY, "breakfast", kitchen.pancakes)

        result = run(
            dispatcher.dispatch(
                interp("move_meal", fromDay="wednesday", fromMealType="breakfast", toDay="friday", toMealType="lunch"),
                CTX_A,
            )
        )
        assert result.message == "Moved Pancakes to friday lunch."
        assert slot(kitchen.store, TODAY, "breakfast") is None
        assert slot(kitchen.store, date(2024, 5, 17), "lunch")["recipe_name"] == "Pancakes"

    def test_move_missing_meal(self, dispatcher):
        result = run(
            dispatcher.dispatch(
                interp("move_meal", fromDay="monday", fromMealType="dinner", toDay="tuesday", toMealType="dinner"),
                CTX_A,
            )
        )
        assert result.message == "No meal found for monday dinner."
        assert result.success is False

    def test_move_across_weeks_creates_plan(self, dispatcher, kitchen):
        plan(kitchen.store, TODAY, "dinner", kitchen.stir_fry)
        run(
            dispatcher.dispatch(
                interp("move_meal", fromDay="today", fromMealType="dinner", toDay="monday", toMealType="dinner"),
                CTX_A,
            )
        )
        plans = run(kitchen.store.list_meal_plans(USER_A))
        assert {p["name"] for p in plans} == {"Week of 2024-05-12", "Week of 2024-05-19"}

    def test_swap_meals(self, dispatcher, kitchen):
        thursday = date(2024, 5, 16)
        plan(kitchen.store, TODAY, "dinner", kitchen.stir_fry)
        plan(kitchen.store, thursday, "breakfast", kitchen.pancakes)

        result = run(
            dispatcher.dispatch(
                interp("swap_meals", day1="Wednesday", mealType1="dinner", day2="thursday", mealType2="breakfast"),
                CTX_A,
            )
        )
        assert result.message == "Swapped Chicken Stir Fry and Pancakes!"
        assert slot(kitchen.store, TODAY, "dinner")["recipe_name"] == "Pancakes"
        assert slot(kitchen.store, thursday, "breakfast")["recipe_name"] == "Chicken Stir Fry"
        assert len(run(kitchen.store.list_meal_entries(USER_A, TODAY, thursday))) == 2

    @pytest.mark.parametrize(
        "failure, unplaced",
        [("refused", "Tacos"), ("refused", "Soup"), ("raising", "Tacos"), ("raising", "Soup")],
    )
    def test_swap_failed_placement_changes_nothing(self, today, failure, unplaced):
        store = RefusingMealStore()
        thursday = date(2024, 5, 16)
        plan(store, TODAY, "dinner", {"id": "r1", "name": "Tacos"})
        plan(store, thursday, "dinner", {"id": "r2", "name": "Soup"})
        getattr(store, failure).add(unplaced)

        dispatcher = IntentDispatcher.from_store(store, today=today)
        result = run(
            dispatcher.dispatch(
                interp("swap_meals", day1="wednesday", mealType1="dinner", day2="thursday", mealType2="dinner"),
                CTX_A,
            )
        )

        assert result.success is False
        assert result.message.startswith(f"Couldn't swap: {unplaced} couldn't be placed")
        assert [e["recipe_name"] for e in run(store.list_meal_entries(USER_A, TODAY, TODAY))] == ["Tacos"]
        assert [e["recipe_name"] for e in run(store.list_meal_entries(USER_A, thursday, thursday))] == ["Soup"]

    def test_swap_reports_every_missing_side(self, dispatcher):
        result = run(
            dispatcher.dispatch(
                interp("swap_meals", day1="monday", mealType1="dinner", day2="tuesday", mealType2="dinner"),
                CTX_A,
            )
        )
        assert result.message == (
            "Couldn't find meals for: monday dinner and tuesday dinner. "
            "Check the Meal Planning page to see your scheduled meals."
        )

    def test_swap_one_missing_side(self, dispatcher, kitchen):
        plan(kitchen.store, TODAY, "dinner", kitchen.stir_fry)
        result = run(
            dispatcher.dispatch(
                interp("swap_meals", day1="wednesday", mealType1="dinner", day2="friday", mealType2="dinner"),
                CTX_A,
            )
        )
        assert result.message.startswith("Couldn't find meals for: friday dinner.")
        assert slot(kitchen.store, TODAY, "dinner") is not None

    def test_swap_same_slot(self, dispatcher, kitchen):
        plan(kitchen.store, TODAY, "dinner", kitchen.stir_fry)
        result = run(
            dispatcher.dispatch(
                interp("swap_meals", day1="today", mealType1="dinner", day2="wednesday", mealType2="dinner"),
                CTX_A,
            )
        )
        assert result.message == "Those are the same meal slot, so there's nothing to swap."
        assert slot(kitchen.store, TODAY, "dinner") is not None

    def test_swap_missing_entities_asks(self, dispatcher):
        result = run(dispatcher.dispatch(interp("swap_meals", day1="monday"), CTX_A))
        assert result.message.startswith("Which two meals should I swap?")


class TestRecipes:
    """search / delete / add_recipe_to_shopping_list."""

    def test_search(self, dispatcher):
        result = run(dispatcher.dispatch(interp("search_recipes", query="pan"), CTX_A))
        assert result.message == "Found 1 recipe:\n• Pancakes"

    def test_search_alias_and_recipe_name(self, dispatcher):
        result = run(dispatcher.dispatch(interp("search_recipe", recipeName="salad"), CTX_A))
        assert result.message == "Found 1 recipe:\n• Garden Salad"

    def test_search_no_results(self, dispatcher):
        result = run(dispatcher.dispatch(interp("search_recipes", query="sushi"), CTX_A))
        assert result.message == 'No recipes found for "sushi".'

    def test_search_ignores_private_recipes_of_others(self, dispatcher):
        result = run(dispatcher.dispatch(interp("search_recipes", query="stew"), CTX_A))
        assert result.message == 'No recipes found for "stew".'

    def test_delete_own_recipe(self, dispatcher, kitchen):
        result = run(dispatcher.dispatch(interp("delete_recipe", recipeName="pancakes"), CTX_A))
        assert result.message == 'Deleted "Pancakes".'
        assert run(kitchen.store.get_recipe(USER_A, kitchen.pancakes["id"])) is None

    def test_delete_public_recipe_of_other_user(self, dispatcher, kitchen):
        result = run(dispatcher.dispatch(interp("delete_recipe", recipeName="garden"), CTX_A))
        assert result.message == '"Garden Salad" isn\'t one of your recipes, so I can\'t delete it.'
        assert run(kitchen.store.get_recipe(USER_A, kitchen.public_salad["id"])) is not None

    def test_delete_missing_recipe(self, dispatcher):
        result = run(dispatcher.dispatch(interp("delete_recipe", recipeName="sushi"), CTX_A))
        assert result.message == 'Couldn\'t find "sushi".'

    def test_add_recipe_ingredients(self, dispatcher, kitchen):
        result = run(dispatcher.dispatch(interp("add_recipe_to_shopping_list", recipeName="Pancakes"), CTX_A))
        assert result.message == 'Added 3 ingredients from "Pancakes".'
        assert shopping_items(kitchen.store) == ["2 cup flour", "1.5 cup milk", "2 pieces eggs"]

    def test_add_recipe_ingredients_from_text(self, dispatcher, kitchen):
        run(
            kitchen.store.create_recipe(
                USER_A, {"name": "Shortbread", "instructions": "2 cups flour\n1 cup butter\nBake until golden"}, []
            )
        )
        result = run(dispatcher.dispatch(interp("add_recipe_to_shopping_list", recipeName="shortbread"), CTX_A))
        assert result.message == 'Added 2 ingredients from "Shortbread".'
        assert shopping_items(kitchen.store) == ["2 cups flour", "1 cup butter"]


class TestConversation:
    """help / greeting / unknown / failures."""

    def test_help(self, dispatcher):
        assert run(dispatcher.dispatch(interp("help"), CTX_A)).message == HELP_TEXT

    def test_greeting_uses_response(self, dispatcher):
        result = run(dispatcher.dispatch(interp("greeting", "Hey there!"), CTX_A))
        assert result.message == "Hey there!"

    def test_unrecognized_intent_is_unknown(self, dispatcher):
        result = run(dispatcher.dispatch(interp("dance"), CTX_A))
        assert result.message == "I'm not sure what you mean. Try 'help'."
        assert result.actions == []

    def test_unexpected_error_apologizes(self, today):
        dispatcher = IntentDispatcher.from_store(BrokenRecipeStore(), today=today)
        result = run(dispatcher.dispatch(interp("search_recipes", query="soup"), CTX_A))
        assert result.message == GENERIC_APOLOGY
