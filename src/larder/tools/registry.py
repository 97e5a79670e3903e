"""
Larder - Tool Registry.

The fixed catalog of domain operations the model may call. Each tool is a
name, a description, a pydantic parameter model (which doubles as the JSON
schema advertised to the model) and an async handler.

`execute` never raises: unknown tools, invalid arguments and handler
failures all come back as `ToolResult.fail(...)`.
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import date
from typing import Any

from pydantic import BaseModel, ValidationError

from larder.db.stores import GroceryStore, KitchenStore, MealPlanStore, PantryStore, RecipeStore
from larder.errors import ToolNotFoundError
from larder.models import ToolDefinition, ToolResult, UserContext
from larder.tools import params as p
from larder.tools.handlers import analysis, calculation, grocery, meal_plans, pantry, recipes, text
from larder.tools.handlers.deps import ToolDeps

logger = logging.getLogger(__name__)

Handler = Callable[[Any, UserContext, ToolDeps], Awaitable[Any]]


@dataclass(frozen=True)
class Tool:
    name: str
    description: str
    params: type[BaseModel]
    handler: Handler

    def definition(self) -> ToolDefinition:
        schema = self.params.model_json_schema()
        schema.pop("title", None)
        schema.pop("description", None)
        schema.setdefault("properties", {})
        return ToolDefinition(name=self.name, description=self.description, parameter_schema=schema)


CATALOG: tuple[Tool, ...] = (
    # Pantry
    Tool(
        "get_pantry_items",
        "Get all items from the user's pantry. Can filter by category.",
        p.GetPantryItemsParams,
        pantry.get_pantry_items,
    ),
    Tool("add_pantry_item", "Add a new item to the pantry", p.AddPantryItemParams, pantry.add_pantry_item),
    Tool(
        "update_pantry_item",
        "Update quantity, expiration date or notes of a pantry item",
        p.UpdatePantryItemParams,
        pantry.update_pantry_item,
    ),
    Tool("remove_pantry_item", "Remove an item from the pantry", p.PantryItemIdParams, pantry.remove_pantry_item),
    Tool(
        "check_pantry_for_recipe",
        "Check if the user has the ingredients for a recipe and identify missing items",
        p.RecipeIdParams,
        pantry.check_pantry_for_recipe,
    ),
    Tool(
        "get_expiring_items",
        "Get pantry items expiring within the next N days",
        p.GetExpiringItemsParams,
        pantry.get_expiring_items,
    ),
    # Recipes
    Tool("search_recipes", "Search for recipes based on criteria", p.SearchRecipesParams, recipes.search_recipes),
    Tool(
        "get_recipe_details",
        "Get full details of a specific recipe including ingredients and instructions",
        p.RecipeIdParams,
        recipes.get_recipe_details,
    ),
    Tool(
        "get_recipe_ingredients",
        "Get the ingredient list of a recipe",
        p.RecipeIdParams,
        recipes.get_recipe_ingredients,
    ),
    Tool("create_recipe", "Create a new private recipe", p.CreateRecipeParams, recipes.create_recipe),
    # Meal plans
    Tool("get_meal_plans", "List the user's meal plans", p.NoParams, meal_plans.get_meal_plans),
    Tool(
        "get_meal_plan_details",
        "Get a meal plan with its entries",
        p.MealPlanIdParams,
        meal_plans.get_meal_plan_details,
    ),
    Tool("create_meal_plan", "Create a new meal plan", p.CreateMealPlanParams, meal_plans.create_meal_plan),
    Tool(
        "add_meal_to_plan",
        "Add a meal (recipe) to a meal plan",
        p.AddMealToPlanParams,
        meal_plans.add_meal_to_plan,
    ),
    Tool(
        "remove_meal_from_plan",
        "Remove a meal entry from a meal plan",
        p.RemoveMealFromPlanParams,
        meal_plans.remove_meal_from_plan,
    ),
    # Grocery lists
    Tool("get_grocery_lists", "List the user's grocery lists", p.NoParams, grocery.get_grocery_lists),
    Tool(
        "create_grocery_list",
        "Create a new grocery list",
        p.CreateGroceryListParams,
        grocery.create_grocery_list,
    ),
    Tool(
        "add_item_to_grocery_list",
        "Add an item to a grocery list",
        p.AddItemToGroceryListParams,
        grocery.add_item_to_grocery_list,
    ),
    Tool(
        "generate_grocery_list_from_meal_plan",
        "Create a grocery list with every ingredient needed for a meal plan",
        p.MealPlanIdParams,
        grocery.generate_grocery_list_from_meal_plan,
    ),
    # Calculation
    Tool(
        "calculate_nutrition",
        "Estimate total nutrition for a list of ingredients",
        p.CalculateNutritionParams,
        calculation.calculate_nutrition,
    ),
    Tool(
        "convert_units",
        "Convert cooking measurements between units",
        p.ConvertUnitsParams,
        calculation.convert_units,
    ),
    Tool(
        "scale_recipe",
        "Scale a recipe's ingredient amounts to a new number of servings",
        p.ScaleRecipeParams,
        calculation.scale_recipe,
    ),
    Tool(
        "estimate_cooking_time",
        "Total and average preparation plus cooking time for recipes",
        p.EstimateCookingTimeParams,
        calculation.estimate_cooking_time,
    ),
    # Analysis
    Tool(
        "analyze_dietary_compliance",
        "Check a recipe against dietary restrictions (vegetarian, vegan, gluten-free)",
        p.AnalyzeDietaryComplianceParams,
        analysis.analyze_dietary_compliance,
    ),
    Tool(
        "suggest_ingredient_substitutions",
        "Suggest substitutes for an ingredient",
        p.SuggestSubstitutionsParams,
        analysis.suggest_ingredient_substitutions,
    ),
    Tool(
        "calculate_meal_plan_nutrition",
        "Total and daily average nutrition for a meal plan",
        p.MealPlanIdParams,
        analysis.calculate_meal_plan_nutrition,
    ),
    # Text
    Tool(
        "parse_ingredient_text",
        "Parse free text into ingredient quantity, unit and name",
        p.ParseIngredientTextParams,
        text.parse_ingredient_text,
    ),
)


class ToolRegistry:
    """
    Executes catalog tools against the injected store capabilities.

    The catalog is fixed when the registry is built. Definitions are
    rendered once and handed out as copies.
    """

    def __init__(
        self,
        pantry: PantryStore,
        recipes: RecipeStore,
        meal_plans: MealPlanStore,
        grocery: GroceryStore,
        today: Callable[[], date] = date.today,
    ):
        self._deps = ToolDeps(
            pantry=pantry, recipes=recipes, meal_plans=meal_plans, grocery=grocery, today=today
        )
        self._tools: dict[str, Tool] = {tool.name: tool for tool in CATALOG}
        self._definitions: tuple[ToolDefinition, ...] = tuple(t.definition() for t in CATALOG)

    @classmethod
    def from_store(cls, store: KitchenStore, today: Callable[[], date] = date.today) -> "ToolRegistry":
        """Build a registry whose capabilities all come from one backend."""
        return cls(store, store, store, store, today=today)

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    @property
    def names(self) -> list[str]:
        return list(self._tools)

    def get_definitions(self) -> list[ToolDefinition]:
        """Every tool's definition, in catalog order."""
        return [d.model_copy(deep=True) for d in self._definitions]

    def to_openai_tools(self) -> list[dict[str, Any]]:
        """Definitions in the OpenAI function-calling shape."""
        return [d.to_openai() for d in self._definitions]

    async def execute(self, name: str, args: dict[str, Any] | None, context: UserContext) -> ToolResult:
        """
        Run one tool for one user.

        Args:
            name: Tool name from the catalog
            args: Raw arguments (camelCase or snake_case keys)
            context: The calling user's context

        Returns:
            ToolResult with `data` on success or `error` on failure
        """
        tool = self._tools.get(name)
        if tool is None:
            error = ToolNotFoundError(name)
            logger.warning(str(error))
            return ToolResult.fail(str(error))

        logger.info(f"Executing tool: {name}")
        try:
            params = tool.params.model_validate(args or {})
        except ValidationError as e:
            logger.warning(f"Tool execution error ({name}): invalid arguments: {e}")
            return ToolResult.fail(f"Invalid arguments for {name}: {e}")

        try:
            data = await tool.handler(params, context, self._deps)
        except Exception as e:
            logger.warning(f"Tool execution error ({name}): {e}")
            return ToolResult.fail(str(e))

        return ToolResult.ok(data)
