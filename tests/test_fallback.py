"""
Tests for the keyword interpreter.
"""

import pytest

from larder.dispatch.fallback import interpret
from larder.dispatch.intents import to_command


class TestShoppingRules:
    """Shopping list phrases."""

    def test_add_item(self):
        result = interpret("add milk")
        assert result.intent == "add_shopping_item"
        assert result.entities == {"items": [{"name": "milk"}]}
        assert result.response == 'I\'ll add "milk" to your shopping list.'

    def test_add_item_strips_list_suffix(self):
        result = interpret("Add 2 gallons of milk to my shopping list please")
        assert result.entities == {"items": [{"name": "2 gallons of milk"}]}

    @pytest.mark.parametrize("text", ["buy bread", "need eggs", "pick up bananas"])
    def test_other_add_verbs(self, text):
        assert interpret(text).intent == "add_shopping_item"

    def test_add_with_meal_word_is_not_shopping(self):
        assert interpret("add chicken for dinner on friday").intent != "add_shopping_item"

    def test_help_request_is_not_an_item(self):
        assert interpret("need help").intent == "help"

    def test_recipe_request_is_not_an_item(self):
        result = interpret("get me a recipe for pasta")
        assert result.intent == "navigate"
        assert result.entities == {"destination": "recipes"}

    def test_recipe_ingredients(self):
        result = interpret("add the lasagna ingredients to my list")
        assert result.intent == "add_recipe_to_shopping_list"
        assert result.entities == {"recipeName": "lasagna"}

    def test_remove_item(self):
        result = interpret("remove eggs from my shopping list")
        assert result.intent == "remove_shopping_item"
        assert result.entities == {"itemName": "eggs"}

    def test_clear_checked(self):
        result = interpret("clear checked items")
        assert result.intent == "clear_shopping_list"
        assert result.entities == {"checkedOnly": True}

    def test_clear_list(self):
        result = interpret("clear the shopping list")
        assert result.intent == "clear_shopping_list"
        assert result.entities == {"checkedOnly": False}

    @pytest.mark.parametrize("text", ["consolidate my list", "merge duplicates on my list"])
    def test_consolidate(self, text):
        assert interpret(text).intent == "consolidate_shopping_list"


class TestMealRules:
    """Meal plan phrases."""

    def test_swap(self):
        result = interpret("swap monday dinner with tuesday dinner")
        assert result.intent == "swap_meals"
        assert result.entities == {"day1": "monday", "mealType1": "dinner", "day2": "tuesday", "mealType2": "dinner"}

    def test_swap_single_meal_type(self):
        result = interpret("swap monday and wednesday lunch")
        assert result.entities["mealType1"] == result.entities["mealType2"] == "lunch"

    def test_move(self):
        result = interpret("Move Tuesday breakfast to Friday")
        assert result.intent == "move_meal"
        assert result.entities == {
            "fromDay": "tuesday",
            "fromMealType": "breakfast",
            "toDay": "friday",
            "toMealType": "breakfast",
        }

    def test_move_without_days_falls_through(self):
        assert interpret("move dinner").intent != "move_meal"

    def test_clear_meals(self):
        result = interpret("clear meals for tomorrow")
        assert result.intent == "clear_meals"
        assert result.entities == {"timeRange": "tomorrow"}

    def test_clear_meal_type(self):
        result = interpret("clear dinner from the meal plan this week")
        assert result.entities == {"timeRange": "this_week", "mealType": "dinner"}

    def test_generate(self):
        result = interpret("plan meals for this week")
        assert result.intent == "generate_meals"
        assert result.entities == {"timeRange": "this_week"}


class TestRecipeRules:
    """Recipe phrases."""

    def test_import(self):
        result = interpret("import https://Example.com/Pie-Recipe")
        assert result.intent == "import_recipe"
        assert result.entities == {"url": "https://Example.com/Pie-Recipe"}

    @pytest.mark.parametrize(
        "text,query",
        [("find recipes for chicken", "chicken"), ("search for pasta recipes", "pasta")],
    )
    def test_search(self, text, query):
        result = interpret(text)
        assert result.intent == "search_recipes"
        assert result.entities == {"query": query}

    def test_delete(self):
        result = interpret("delete the pancake recipe")
        assert result.intent == "delete_recipe"
        assert result.entities == {"recipeName": "pancake"}


class TestNavigationAndChat:
    """Navigation, help, greeting and unknown."""

    @pytest.mark.parametrize(
        "text,destination",
        [
            ("show me recipes", "recipes"),
            ("open my groceries", "shopping_list"),
            ("meal plan", "meal_planning"),
        ],
    )
    def test_navigate(self, text, destination):
        result = interpret(text)
        assert result.intent == "navigate"
        assert result.entities == {"destination": destination}

    def test_help(self):
        assert interpret("help").intent == "help"

    def test_greeting(self):
        result = interpret("Hello there")
        assert result.intent == "greeting"
        assert result.confidence == 0.9

    def test_unknown(self):
        result = interpret("what's the weather like?")
        assert result.intent == "unknown"
        assert result.confidence == 0.3
        assert '"what\'s the weather like?"' in result.response


class TestResolvable:
    """Keyword results always validate against their intent's command."""

    @pytest.mark.parametrize(
        "text",
        [
            "add milk",
            "remove eggs from my list",
            "clear checked items",
            "swap monday dinner with tuesday dinner",
            "move tuesday breakfast to friday lunch",
            "clear meals for today",
            "plan meals for this week",
            "find recipes for soup",
            "delete the pancake recipe",
            "import https://example.com/pie",
            "show me recipes",
            "hello",
        ],
    )
    def test_to_command(self, text):
        to_command(interpret(text))
