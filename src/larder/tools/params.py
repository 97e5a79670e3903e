"""
Larder - Tool parameter models.

One pydantic model per tool. Field names are snake_case in Python and
camelCase on the wire (`recipeId`, `mealPlanId`), which is what the model
sees in each tool's JSON schema. Unknown keys are ignored.
"""

from datetime import date
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

MealType = Literal["breakfast", "lunch", "dinner", "snack", "dessert"]
Difficulty = Literal["easy", "medium", "hard"]
GroceryCategory = Literal[
    "produce",
    "dairy",
    "meat",
    "bakery",
    "frozen",
    "canned",
    "dry_goods",
    "beverages",
    "snacks",
    "household",
    "other",
]


class ToolParams(BaseModel):
    """Base for tool parameters: camelCase aliases, snake_case accepted too."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class NoParams(ToolParams):
    """Tools that take no arguments."""


class IngredientAmount(ToolParams):
    name: str
    amount: float | None = None
    unit: str | None = None


# =============================================================================
# Pantry
# =============================================================================


class GetPantryItemsParams(ToolParams):
    category: str | None = Field(default=None, description="Filter by category")
    sort_by: Literal["name", "quantity", "expiration_date", "created_at"] = "name"


class AddPantryItemParams(ToolParams):
    name: str = Field(min_length=1)
    quantity: float
    unit: str
    expiration_date: date | None = None
    category: str | None = None
    notes: str | None = None


class UpdatePantryItemParams(ToolParams):
    item_id: str
    quantity: float | None = None
    expiration_date: date | None = None
    notes: str | None = None


class PantryItemIdParams(ToolParams):
    item_id: str


class RecipeIdParams(ToolParams):
    recipe_id: str


class GetExpiringItemsParams(ToolParams):
    days: int = Field(default=7, ge=0, description="Look-ahead window in days")


# =============================================================================
# Recipes
# =============================================================================


class SearchRecipesParams(ToolParams):
    query: str | None = Field(default=None, description="Text to match in name or instructions")
    ingredients: list[str] = Field(default_factory=list, description="Ingredients to search for")
    meal_type: MealType | None = None
    difficulty: Difficulty | None = None
    max_time: int | None = Field(default=None, ge=0, description="Maximum cooking time in minutes")
    diet: str | None = Field(default=None, description="Dietary preference")
    limit: int = Field(default=10, ge=1, le=50)


class CreateRecipeParams(ToolParams):
    name: str = Field(min_length=1)
    description: str | None = None
    instructions: str = ""
    prep_time: int | None = Field(default=None, ge=0)
    cook_time: int | None = Field(default=None, ge=0)
    servings: int | None = Field(default=None, ge=1)
    difficulty: Difficulty | None = None
    meal_type: MealType | None = None
    ingredients: list[IngredientAmount] = Field(default_factory=list)


# =============================================================================
# Meal plans
# =============================================================================


class MealPlanIdParams(ToolParams):
    meal_plan_id: str


class CreateMealPlanParams(ToolParams):
    name: str = Field(min_length=1)
    start_date: date
    end_date: date
    notes: str | None = None


class AddMealToPlanParams(ToolParams):
    meal_plan_id: str
    recipe_id: str
    meal_date: date
    meal_type: MealType
    notes: str | None = None


class RemoveMealFromPlanParams(ToolParams):
    entry_id: str


# =============================================================================
# Grocery lists
# =============================================================================


class CreateGroceryListParams(ToolParams):
    name: str = Field(min_length=1)


class AddItemToGroceryListParams(ToolParams):
    list_id: str
    item_name: str = Field(min_length=1)
    quantity: float
    unit: str | None = None
    category: GroceryCategory = "other"


# =============================================================================
# Calculation and analysis
# =============================================================================


class CalculateNutritionParams(ToolParams):
    ingredients: list[IngredientAmount]


class ConvertUnitsParams(ToolParams):
    amount: float
    from_unit: str
    to_unit: str


class ScaleRecipeParams(ToolParams):
    recipe_id: str
    new_servings: int = Field(ge=1)


class EstimateCookingTimeParams(ToolParams):
    recipe_ids: list[str]


class AnalyzeDietaryComplianceParams(ToolParams):
    recipe_id: str
    dietary_restrictions: list[str]

    @field_validator("dietary_restrictions", mode="before")
    @classmethod
    def _one_or_many(cls, value):
        if isinstance(value, str):
            return [value]
        return value


class SuggestSubstitutionsParams(ToolParams):
    ingredient: str = Field(min_length=1)
    reason: str | None = None


class ParseIngredientTextParams(ToolParams):
    text: str = Field(description="Free text with one ingredient per line")
