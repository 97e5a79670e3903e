"""
Larder - Intents and their commands.

The set of intents is closed. Each intent has exactly one command model
that validates the entities it needs; `to_command` turns a loosely shaped
interpretation into that model or raises `EntityResolutionError` with a
clarifying question.

Entity keys are camelCase on the wire (`mealType`, `recipeName`) and
snake_case here.
"""

from enum import Enum
from typing import Any, ClassVar, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel

from larder.errors import EntityResolutionError
from larder.models import Interpretation
from larder.tools.normalize import format_quantity


class Intent(str, Enum):
    ADD_SHOPPING_ITEM = "add_shopping_item"
    REMOVE_SHOPPING_ITEM = "remove_shopping_item"
    CLEAR_SHOPPING_LIST = "clear_shopping_list"
    CONSOLIDATE_SHOPPING_LIST = "consolidate_shopping_list"
    NAVIGATE = "navigate"
    ADD_MEAL = "add_meal"
    CLEAR_MEALS = "clear_meals"
    GENERATE_MEALS = "generate_meals"
    MOVE_MEAL = "move_meal"
    SWAP_MEALS = "swap_meals"
    SEARCH_RECIPES = "search_recipes"
    DELETE_RECIPE = "delete_recipe"
    ADD_RECIPE_TO_SHOPPING_LIST = "add_recipe_to_shopping_list"
    IMPORT_RECIPE = "import_recipe"
    CREATE_RECIPE = "create_recipe"
    HELP = "help"
    GREETING = "greeting"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: str | None) -> "Intent":
        """Map an intent string to an Intent; anything unrecognized is UNKNOWN."""
        key = (value or "").strip().lower()
        key = INTENT_ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            return cls.UNKNOWN


# The model sometimes names the singular form
INTENT_ALIASES = {"search_recipe": "search_recipes"}

MealType = Literal["breakfast", "lunch", "dinner", "snack"]
Destination = Literal["recipes", "shopping_list", "meal_planning"]
TimeRange = Literal["today", "tomorrow", "this_week", "all"]


# =============================================================================
# Command models
# =============================================================================


class Command(BaseModel):
    """Base for intent commands: camelCase entity keys, unknown keys ignored."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore", frozen=True
    )

    intent: ClassVar[Intent]

    @field_validator("*", mode="before")
    @classmethod
    def _lowercase_slots(cls, value, info):
        if info.field_name in _LOWERCASE_FIELDS and isinstance(value, str):
            return "_".join(value.lower().split())
        return value


_LOWERCASE_FIELDS = {
    "destination",
    "meal_type",
    "time_range",
    "from_day",
    "from_meal_type",
    "to_day",
    "to_meal_type",
    "day",
    "day1",
    "day2",
    "meal_type1",
    "meal_type2",
}


class ShoppingItem(BaseModel):
    name: str = Field(min_length=1)
    quantity: str | None = None
    unit: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _from_text(cls, value: Any) -> Any:
        if isinstance(value, str):
            return {"name": value}
        return value

    @field_validator("quantity", mode="before")
    @classmethod
    def _quantity_text(cls, value: Any) -> Any:
        if isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            return format_quantity(value)
        return value

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be blank")
        return value


class AddShoppingItem(Command):
    intent = Intent.ADD_SHOPPING_ITEM
    items: list[ShoppingItem] = Field(min_length=1)


class RemoveShoppingItem(Command):
    intent = Intent.REMOVE_SHOPPING_ITEM
    item_name: str = Field(min_length=1)


class ClearShoppingList(Command):
    intent = Intent.CLEAR_SHOPPING_LIST
    checked_only: bool = False


class ConsolidateShoppingList(Command):
    intent = Intent.CONSOLIDATE_SHOPPING_LIST


class Navigate(Command):
    intent = Intent.NAVIGATE
    destination: Destination


class AddMeal(Command):
    intent = Intent.ADD_MEAL
    food: str = Field(min_length=1)
    meal_type: MealType
    day: str = "today"


class ClearMeals(Command):
    intent = Intent.CLEAR_MEALS
    time_range: TimeRange
    meal_type: MealType | None = None


class GenerateMeals(Command):
    intent = Intent.GENERATE_MEALS
    time_range: TimeRange


class MoveMeal(Command):
    intent = Intent.MOVE_MEAL
    from_day: str = Field(min_length=1)
    from_meal_type: MealType
    to_day: str = Field(min_length=1)
    to_meal_type: MealType


class SwapMeals(Command):
    intent = Intent.SWAP_MEALS
    day1: str = Field(min_length=1)
    meal_type1: MealType
    day2: str = Field(min_length=1)
    meal_type2: MealType


class SearchRecipes(Command):
    intent = Intent.SEARCH_RECIPES
    query: str = Field(min_length=1)

    @model_validator(mode="before")
    @classmethod
    def _query_from_name(cls, value: Any) -> Any:
        if isinstance(value, dict) and not value.get("query") and value.get("recipeName"):
            return {**value, "query": value["recipeName"]}
        return value


class DeleteRecipe(Command):
    intent = Intent.DELETE_RECIPE
    recipe_name: str = Field(min_length=1)


class AddRecipeToShoppingList(Command):
    intent = Intent.ADD_RECIPE_TO_SHOPPING_LIST
    recipe_name: str = Field(min_length=1)


class ImportRecipe(Command):
    intent = Intent.IMPORT_RECIPE
    url: str = Field(pattern=r"^https?://\S+$")
    category: str | None = None


class CreateRecipe(Command):
    intent = Intent.CREATE_RECIPE
    recipe_name: str | None = None


class Help(Command):
    intent = Intent.HELP


class Greeting(Command):
    intent = Intent.GREETING


class Unknown(Command):
    intent = Intent.UNKNOWN


AnyCommand = Union[
    AddShoppingItem,
    RemoveShoppingItem,
    ClearShoppingList,
    ConsolidateShoppingList,
    Navigate,
    AddMeal,
    ClearMeals,
    GenerateMeals,
    MoveMeal,
    SwapMeals,
    SearchRecipes,
    DeleteRecipe,
    AddRecipeToShoppingList,
    ImportRecipe,
    CreateRecipe,
    Help,
    Greeting,
    Unknown,
]

COMMAND_MODELS: dict[Intent, type[Command]] = {
    model.intent: model for model in AnyCommand.__args__
}


# =============================================================================
# Clarifications and default responses
# =============================================================================

CLARIFICATIONS: dict[Intent, str] = {
    Intent.ADD_SHOPPING_ITEM: "What would you like me to add to your shopping list?",
    Intent.REMOVE_SHOPPING_ITEM: "Which item should I remove from your shopping list?",
    Intent.NAVIGATE: "Where would you like to go: recipes, your shopping list, or meal planning?",
    Intent.ADD_MEAL: "Which meal should I plan, and for breakfast, lunch, dinner or a snack?",
    Intent.CLEAR_MEALS: "Which meals should I clear: today, tomorrow, or this week?",
    Intent.GENERATE_MEALS: "Which days should I plan meals for: today, tomorrow, or this week?",
    Intent.MOVE_MEAL: "Which meal should I move, and where to? For example: "
    "\"move monday breakfast to tuesday lunch\".",
    Intent.SWAP_MEALS: "Which two meals should I swap? For example: "
    "\"swap tuesday dinner with wednesday dinner\".",
    Intent.SEARCH_RECIPES: "What should I search your recipes for?",
    Intent.DELETE_RECIPE: "Which recipe should I delete?",
    Intent.ADD_RECIPE_TO_SHOPPING_LIST: "Which recipe's ingredients should I add?",
    Intent.IMPORT_RECIPE: "What's the link to the recipe you want to import?",
}

DEFAULT_RESPONSES: dict[Intent, str] = {
    Intent.ADD_SHOPPING_ITEM: "I'll add that to your shopping list.",
    Intent.NAVIGATE: "Taking you there now!",
    Intent.ADD_MEAL: "I'll add that to your meal plan.",
    Intent.REMOVE_SHOPPING_ITEM: "I'll remove that from your list.",
    Intent.CLEAR_SHOPPING_LIST: "I'll clear your shopping list.",
    Intent.CLEAR_MEALS: "I'll clear those meals from your plan.",
    Intent.GENERATE_MEALS: "I'll generate a meal plan for you!",
    Intent.IMPORT_RECIPE: "I'll import that recipe for you!",
    Intent.CREATE_RECIPE: "I'll take you to the recipes page to create a new recipe!",
    Intent.ADD_RECIPE_TO_SHOPPING_LIST: "I'll add those ingredients to your shopping list!",
    Intent.CONSOLIDATE_SHOPPING_LIST: "I'll consolidate your shopping list and merge duplicates!",
    Intent.MOVE_MEAL: "I'll move that meal for you!",
    Intent.SWAP_MEALS: "I'll swap those meals!",
    Intent.DELETE_RECIPE: "I'll delete that recipe.",
    Intent.SEARCH_RECIPES: "Let me search your recipes!",
    Intent.HELP: "I can help you manage shopping lists, plan meals, import recipes, and more!",
    Intent.GREETING: "Hello! How can I help you in the kitchen today?",
    Intent.UNKNOWN: "I'm not sure what you mean. Try saying 'help' for options.",
}


def default_response(intent: str) -> str:
    return DEFAULT_RESPONSES[Intent.parse(intent)]


def to_command(interpretation: Interpretation) -> AnyCommand:
    """
    Validate an interpretation's entities against its intent's command.

    Raises:
        EntityResolutionError: A required entity is missing or not usable
    """
    intent = Intent.parse(interpretation.intent)
    model = COMMAND_MODELS[intent]

    try:
        return model.model_validate(interpretation.entities)
    except ValidationError as e:
        missing = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]}) or [intent.value]
        raise EntityResolutionError(intent.value, missing, CLARIFICATIONS.get(intent)) from e
