"""
Larder - Intent Dispatcher.

Turns one interpretation into ordered domain effects and exactly one
acknowledgement. The dispatcher holds no per-turn state; everything
durable lives in the stores.

Failure policy:
- Missing or unusable entities -> a clarifying question, no effects
- Some items of a batch fail -> the rest still run; counts are reported
- Anything unexpected -> a generic apology, logged with its traceback
"""

import logging
from collections.abc import Callable
from datetime import date, timedelta
from typing import assert_never

from larder.db.stores import GroceryStore, KitchenStore, MealPlanStore, RecipeStore
from larder.dispatch.dates import resolve_day, resolve_time_range
from larder.dispatch.intents import (
    AddMeal,
    AddRecipeToShoppingList,
    AddShoppingItem,
    AnyCommand,
    ClearMeals,
    ClearShoppingList,
    ConsolidateShoppingList,
    CreateRecipe,
    DeleteRecipe,
    GenerateMeals,
    Greeting,
    Help,
    ImportRecipe,
    MoveMeal,
    Navigate,
    RemoveShoppingItem,
    SearchRecipes,
    SwapMeals,
    Unknown,
    to_command,
)
from larder.dispatch.meal_generator import MealGenerator, RecipeRotationGenerator
from larder.dispatch.placement import find_slot, place_meal
from larder.errors import EntityResolutionError
from larder.models import (
    ActionReport,
    DispatchResult,
    Interpretation,
    ParsedIngredientLine,
    UserContext,
)
from larder.tools.ingredient_parser import parse_batch, parse_line
from larder.tools.normalize import clean_unit, format_item_label, format_quantity, normalize_name

logger = logging.getLogger(__name__)

DESTINATIONS: dict[str, tuple[str, str]] = {
    "recipes": ("/recipes", "Recipes"),
    "shopping_list": ("/shopping-lists", "Shopping List"),
    "meal_planning": ("/meal-planning", "Meal Planning"),
}

DEFAULT_LIST_NAME = "Shopping List"
DEFAULT_IMPORT_CATEGORY = "Dinner"
SEARCH_RESULT_LIMIT = 5
MAX_GENERATION_DAYS = 14

GENERIC_APOLOGY = "Sorry, something went wrong on my end. Please try that again."

HELP_TEXT = (
    "I can help with:\n"
    "• Add items to shopping list\n"
    "• Generate/clear meals\n"
    "• Move/swap meals\n"
    "• Import recipes from URLs\n"
    "• Add recipe ingredients to list\n"
    "• Search your recipes\n"
    "• Navigate the app"
)


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}" if count == 1 else f"{count} {noun}s"


def _meal_name(entry: dict) -> str:
    return entry.get("recipe_name") or "that meal"


class IntentDispatcher:
    """
    Executes interpretations against the grocery, recipe and meal plan stores.

    Usage:
        dispatcher = IntentDispatcher.from_store(store)
        result = await dispatcher.dispatch(interpretation, UserContext(user_id=...))
    """

    def __init__(
        self,
        recipes: RecipeStore,
        meal_plans: MealPlanStore,
        grocery: GroceryStore,
        meal_generator: MealGenerator | None = None,
        today: Callable[[], date] = date.today,
    ):
        self.recipes = recipes
        self.meal_plans = meal_plans
        self.grocery = grocery
        self.meal_generator = meal_generator or RecipeRotationGenerator(recipes, meal_plans)
        self.today = today

    @classmethod
    def from_store(
        cls,
        store: KitchenStore,
        meal_generator: MealGenerator | None = None,
        today: Callable[[], date] = date.today,
    ) -> "IntentDispatcher":
        return cls(store, store, store, meal_generator=meal_generator, today=today)

    async def dispatch(self, interpretation: Interpretation, context: UserContext) -> DispatchResult:
        """Run one interpretation. Never raises."""
        try:
            command = to_command(interpretation)
        except EntityResolutionError as e:
            logger.info(f"Clarifying {e.intent}: missing {', '.join(e.missing)}")
            return DispatchResult(message=str(e))

        logger.info(f"Dispatching intent: {command.intent.value}")
        try:
            return await self._run(command, interpretation, context)
        except Exception:
            logger.exception(f"Dispatch failed for intent {command.intent.value}")
            return DispatchResult(message=GENERIC_APOLOGY)

    async def _run(
        self, command: AnyCommand, interpretation: Interpretation, ctx: UserContext
    ) -> DispatchResult:
        response = interpretation.response

        match command:
            case AddShoppingItem():
                return await self._add_shopping_items(command, ctx, response)
            case RemoveShoppingItem():
                return await self._remove_shopping_item(command, ctx)
            case ClearShoppingList():
                return await self._clear_shopping_list(command, ctx)
            case ConsolidateShoppingList():
                return await self._consolidate_shopping_list(ctx)
            case Navigate():
                path, label = DESTINATIONS[command.destination]
                return DispatchResult(
                    message=response or f"Taking you to {label}!",
                    actions=[ActionReport(type="navigate", details=label, success=True)],
                    navigate_to=path,
                )
            case AddMeal():
                return self._stage_meal(command, response)
            case ClearMeals():
                return await self._clear_meals(command, ctx)
            case GenerateMeals():
                return await self._generate_meals(command, ctx)
            case MoveMeal():
                return await self._move_meal(command, ctx)
            case SwapMeals():
                return await self._swap_meals(command, ctx)
            case SearchRecipes():
                return await self._search_recipes(command, ctx)
            case DeleteRecipe():
                return await self._delete_recipe(command, ctx)
            case AddRecipeToShoppingList():
                return await self._add_recipe_to_shopping_list(command, ctx)
            case ImportRecipe():
                return DispatchResult(
                    message=response or "I'll import that recipe for you!",
                    actions=[ActionReport(type="recipe", details=command.url, success=True)],
                    navigate_to=DESTINATIONS["recipes"][0],
                    staged={
                        "type": "pending_import",
                        "url": command.url,
                        "category": command.category or DEFAULT_IMPORT_CATEGORY,
                    },
                )
            case CreateRecipe():
                message = (
                    f"Let's create a recipe for {command.recipe_name}! I'll take you to the recipes page."
                    if command.recipe_name
                    else "I'll take you to the recipes page to create a new recipe!"
                )
                return DispatchResult(
                    message=message,
                    actions=[ActionReport(type="recipe", details="Create recipe", success=True)],
                    navigate_to=DESTINATIONS["recipes"][0],
                    staged={"type": "open_recipe_form", "recipe_name": command.recipe_name},
                )
            case Help():
                return DispatchResult(message=HELP_TEXT)
            case Greeting():
                return DispatchResult(message=response or "Hi! How can I help?")
            case Unknown():
                return DispatchResult(message=response or "I'm not sure what you mean. Try 'help'.")
            case _:
                assert_never(command)

    # =========================================================================
    # Shopping list
    # =========================================================================

    async def _find_shopping_list(self, ctx: UserContext) -> dict | None:
        for grocery_list in await self.grocery.list_grocery_lists(ctx.user_id):
            if grocery_list["name"].strip().lower() == DEFAULT_LIST_NAME.lower():
                return grocery_list
        return None

    async def _shopping_list(self, ctx: UserContext) -> dict:
        found = await self._find_shopping_list(ctx)
        if found is not None:
            return found
        logger.info("Creating default shopping list")
        return await self.grocery.create_grocery_list(ctx.user_id, DEFAULT_LIST_NAME)

    async def _add_labels(self, ctx: UserContext, labels: list[str]) -> tuple[list[str], int]:
        """Add entries one at a time, in order. Returns (added labels, failed count)."""
        grocery_list = await self._shopping_list(ctx)
        added: list[str] = []
        failed = 0
        for label in labels:
            try:
                row = await self.grocery.add_grocery_item(
                    ctx.user_id, grocery_list["id"], {"item_name": label}
                )
            except Exception as e:
                logger.warning(f"Failed to add '{label}' to shopping list: {e}")
                row = None
            if row is None:
                failed += 1
            else:
                added.append(label)
        return added, failed

    async def _add_shopping_items(
        self, command: AddShoppingItem, ctx: UserContext, response: str | None = None
    ) -> DispatchResult:
        labels = [format_item_label(item.name, item.quantity, item.unit) for item in command.items]
        added, failed = await self._add_labels(ctx, labels)

        if not added:
            message = "Couldn't add items. Try again."
            details = "Failed"
        elif failed:
            message = (
                f"Added {', '.join(added)} to your list, "
                f"but {_plural(failed, 'item')} couldn't be added."
            )
            details = f"Added: {', '.join(added)}"
        else:
            message = response or f"Added {', '.join(added)} to your list."
            details = f"Added: {', '.join(added)}"

        report = ActionReport(
            type="shopping_list",
            details=details,
            success=failed == 0,
            succeeded=len(added),
            failed=failed,
        )
        return DispatchResult(message=message, actions=[report])

    async def _remove_shopping_item(self, command: RemoveShoppingItem, ctx: UserContext) -> DispatchResult:
        grocery_list = await self._find_shopping_list(ctx)
        items = await self.grocery.list_grocery_items(ctx.user_id, grocery_list["id"]) if grocery_list else []

        needle = command.item_name.lower()
        matches = [i for i in items if needle in (i.get("item_name") or "").lower()]
        if not matches:
            return DispatchResult(
                message=f'"{command.item_name}" isn\'t on your shopping list.',
                actions=[ActionReport(type="shopping_list", details="Not found", success=False)],
            )

        removed = await self.grocery.remove_grocery_items(
            ctx.user_id, grocery_list["id"], [i["id"] for i in matches]
        )
        names = ", ".join(i["item_name"] for i in matches)
        return DispatchResult(
            message=f"Removed {names} from your list.",
            actions=[
                ActionReport(
                    type="shopping_list",
                    details=f"Removed {removed}",
                    success=removed == len(matches),
                    succeeded=removed,
                    failed=len(matches) - removed,
                )
            ],
        )

    async def _clear_shopping_list(self, command: ClearShoppingList, ctx: UserContext) -> DispatchResult:
        grocery_list = await self._find_shopping_list(ctx)
        items = await self.grocery.list_grocery_items(ctx.user_id, grocery_list["id"]) if grocery_list else []
        if command.checked_only:
            items = [i for i in items if i.get("is_purchased")]

        removed = 0
        if items:
            removed = await self.grocery.remove_grocery_items(
                ctx.user_id, grocery_list["id"], [i["id"] for i in items]
            )

        noun = "checked item" if command.checked_only else "item"
        return DispatchResult(
            message=f"Cleared {_plural(removed, noun)} from your list.",
            actions=[ActionReport(type="shopping_list", details=f"Cleared {removed}", success=True)],
        )

    async def _consolidate_shopping_list(self, ctx: UserContext) -> DispatchResult:
        """
        Merge entries that name the same ingredient in the same unit.

        Entries are re-parsed with the ingredient parser; quantities in a
        group are summed. Different units stay separate entries.
        """
        grocery_list = await self._find_shopping_list(ctx)
        items = await self.grocery.list_grocery_items(ctx.user_id, grocery_list["id"]) if grocery_list else []

        groups: dict[tuple[str, str], list[tuple[dict, ParsedIngredientLine | None]]] = {}
        for item in items:
            parsed = parse_line(item.get("item_name") or "")
            if parsed is None:
                key = (normalize_name(item.get("item_name") or ""), "")
            else:
                key = (normalize_name(parsed.name), clean_unit(parsed.unit or ""))
            groups.setdefault(key, []).append((item, parsed))

        merged = 0
        for members in groups.values():
            if len(members) < 2:
                continue

            first_item = members[0][0]
            parsed_members = [p for _, p in members if p is not None]
            values = [p.quantity_value for p in parsed_members if p.quantity_value is not None]
            if parsed_members:
                base = parsed_members[0]
                quantity = format_quantity(sum(values)) if values else None
                label = format_item_label(base.name, quantity, base.unit)
            else:
                label = first_item["item_name"]

            row = await self.grocery.add_grocery_item(
                ctx.user_id,
                grocery_list["id"],
                {"item_name": label, "category": first_item.get("category") or "other"},
            )
            if row is None:
                continue
            await self.grocery.remove_grocery_items(
                ctx.user_id, grocery_list["id"], [item["id"] for item, _ in members]
            )
            merged += 1

        return DispatchResult(
            message=f"Consolidated to {_plural(len(groups), 'item')}.",
            actions=[
                ActionReport(
                    type="shopping_list",
                    details=f"{len(groups)} items",
                    success=True,
                    succeeded=merged,
                    failed=0,
                )
            ],
        )

    # =========================================================================
    # Meal plans
    # =========================================================================

    def _stage_meal(self, command: AddMeal, response: str | None) -> DispatchResult:
        meal_date = resolve_day(command.day, self.today())
        return DispatchResult(
            message=response or f"Adding {command.food} for {command.meal_type}.",
            actions=[ActionReport(type="meal_plan", details=command.food, success=True)],
            navigate_to=DESTINATIONS["meal_planning"][0],
            staged={
                "type": "pending_meal",
                "food": command.food,
                "meal_type": command.meal_type,
                "date": meal_date.isoformat(),
            },
        )

    async def _clear_meals(self, command: ClearMeals, ctx: UserContext) -> DispatchResult:
        start, end = resolve_time_range(command.time_range, self.today())
        entries = await self.meal_plans.list_meal_entries(ctx.user_id, start, end, command.meal_type)
        deleted = await self.meal_plans.delete_meal_entries(ctx.user_id, [e["id"] for e in entries])

        return DispatchResult(
            message=f"Cleared {_plural(deleted, 'meal')}.",
            actions=[ActionReport(type="meal_plan", details=f"Cleared {deleted}", success=True)],
        )

    async def _generate_meals(self, command: GenerateMeals, ctx: UserContext) -> DispatchResult:
        today = self.today()
        start, end = resolve_time_range(command.time_range, today)
        if (end - start).days + 1 > MAX_GENERATION_DAYS:
            start = max(start, today)
            end = start + timedelta(days=MAX_GENERATION_DAYS - 1)

        created = await self.meal_generator.generate(ctx.user_id, start, end)
        return DispatchResult(
            message=f"Created {_plural(len(created), 'meal')}!",
            actions=[ActionReport(type="meal_plan", details=f"Generated {len(created)}", success=True)],
        )

    async def _move_meal(self, command: MoveMeal, ctx: UserContext) -> DispatchResult:
        today = self.today()
        from_date = resolve_day(command.from_day, today)
        to_date = resolve_day(command.to_day, today)

        entry = await find_slot(self.meal_plans, ctx.user_id, from_date, command.from_meal_type)
        if entry is None:
            return DispatchResult(
                message=f"No meal found for {command.from_day} {command.from_meal_type}.",
                actions=[ActionReport(type="meal_plan", details="Not found", success=False)],
            )

        placed = await place_meal(self.meal_plans, ctx.user_id, to_date, command.to_meal_type, entry)
        if placed is None:
            return DispatchResult(
                message=f"Couldn't move {_meal_name(entry)}.",
                actions=[ActionReport(type="meal_plan", details="Failed", success=False)],
            )
        await self.meal_plans.remove_meal_entry(ctx.user_id, entry["id"])

        return DispatchResult(
            message=f"Moved {_meal_name(entry)} to {command.to_day} {command.to_meal_type}.",
            actions=[ActionReport(type="meal_plan", details="Moved", success=True)],
        )

    async def _try_place(self, ctx: UserContext, day: date, meal_type: str, meal: dict) -> dict | None:
        try:
            return await place_meal(self.meal_plans, ctx.user_id, day, meal_type, meal)
        except Exception as e:
            logger.warning(f"Failed to place {_meal_name(meal)} on {day.isoformat()} {meal_type}: {e}")
            return None

    @staticmethod
    def _swap_failed(meal: dict, day: str, meal_type: str) -> DispatchResult:
        return DispatchResult(
            message=(
                f"Couldn't swap: {_meal_name(meal)} couldn't be placed on {day} {meal_type}. "
                "Nothing was changed."
            ),
            actions=[
                ActionReport(type="meal_plan", details=f"Failed to place {_meal_name(meal)}", success=False)
            ],
        )

    async def _swap_meals(self, command: SwapMeals, ctx: UserContext) -> DispatchResult:
        today = self.today()
        date1 = resolve_day(command.day1, today)
        date2 = resolve_day(command.day2, today)

        meal1 = await find_slot(self.meal_plans, ctx.user_id, date1, command.meal_type1)
        meal2 = await find_slot(self.meal_plans, ctx.user_id, date2, command.meal_type2)

        missing = []
        if meal1 is None:
            missing.append(f"{command.day1} {command.meal_type1}")
        if meal2 is None:
            missing.append(f"{command.day2} {command.meal_type2}")
        if missing:
            return DispatchResult(
                message=(
                    f"Couldn't find meals for: {' and '.join(missing)}. "
                    "Check the Meal Planning page to see your scheduled meals."
                ),
                actions=[ActionReport(type="meal_plan", details="Not found", success=False)],
            )

        if meal1["id"] == meal2["id"]:
            return DispatchResult(message="Those are the same meal slot, so there's nothing to swap.")

        # Originals are deleted only once both new entries exist
        placed1 = await self._try_place(ctx, date1, command.meal_type1, meal2)
        if placed1 is None:
            return self._swap_failed(meal2, command.day1, command.meal_type1)

        placed2 = await self._try_place(ctx, date2, command.meal_type2, meal1)
        if placed2 is None:
            await self.meal_plans.remove_meal_entry(ctx.user_id, placed1["id"])
            return self._swap_failed(meal1, command.day2, command.meal_type2)

        await self.meal_plans.delete_meal_entries(ctx.user_id, [meal1["id"], meal2["id"]])

        return DispatchResult(
            message=f"Swapped {_meal_name(meal1)} and {_meal_name(meal2)}!",
            actions=[ActionReport(type="meal_plan", details="Swapped", success=True)],
        )

    # =========================================================================
    # Recipes
    # =========================================================================

    async def _find_recipe(self, ctx: UserContext, name: str) -> dict | None:
        """First recipe whose name contains `name`, ignoring case."""
        needle = name.lower()
        for recipe in await self.recipes.list_recipes(ctx.user_id):
            if needle in (recipe.get("name") or "").lower():
                return recipe
        return None

    async def _search_recipes(self, command: SearchRecipes, ctx: UserContext) -> DispatchResult:
        needle = command.query.lower()
        matches = [
            r
            for r in await self.recipes.list_recipes(ctx.user_id)
            if needle in (r.get("name") or "").lower() or needle in (r.get("instructions") or "").lower()
        ]
        if not matches:
            return DispatchResult(message=f'No recipes found for "{command.query}".')

        listing = "\n".join(f"• {r['name']}" for r in matches[:SEARCH_RESULT_LIMIT])
        return DispatchResult(
            message=f"Found {_plural(len(matches), 'recipe')}:\n{listing}",
            actions=[ActionReport(type="recipe", details=f"{len(matches)} found", success=True)],
        )

    async def _delete_recipe(self, command: DeleteRecipe, ctx: UserContext) -> DispatchResult:
        recipe = await self._find_recipe(ctx, command.recipe_name)
        if recipe is None:
            return DispatchResult(message=f'Couldn\'t find "{command.recipe_name}".')

        if not await self.recipes.delete_recipe(ctx.user_id, recipe["id"]):
            return DispatchResult(
                message=f'"{recipe["name"]}" isn\'t one of your recipes, so I can\'t delete it.',
                actions=[ActionReport(type="recipe", details=recipe["name"], success=False)],
            )

        return DispatchResult(
            message=f'Deleted "{recipe["name"]}".',
            actions=[ActionReport(type="recipe", details=recipe["name"], success=True)],
        )

    async def _add_recipe_to_shopping_list(
        self, command: AddRecipeToShoppingList, ctx: UserContext
    ) -> DispatchResult:
        recipe = await self._find_recipe(ctx, command.recipe_name)
        if recipe is None:
            return DispatchResult(message=f'Couldn\'t find "{command.recipe_name}".')

        ingredients = recipe.get("ingredients") or []
        if ingredients:
            labels = [
                format_item_label(
                    ing["name"],
                    format_quantity(ing["amount"]) if ing.get("amount") is not None else None,
                    ing.get("unit"),
                )
                for ing in ingredients
            ]
        else:
            labels = [item.text for item in parse_batch(recipe.get("instructions") or "").items]

        if not labels:
            return DispatchResult(
                message=f'"{recipe["name"]}" has no ingredients to add.',
                actions=[ActionReport(type="shopping_list", details="0 items", success=True)],
            )

        added, failed = await self._add_labels(ctx, labels)
        message = f'Added {_plural(len(added), "ingredient")} from "{recipe["name"]}".'
        if failed:
            message += f" {_plural(failed, 'ingredient')} couldn't be added."

        return DispatchResult(
            message=message,
            actions=[
                ActionReport(
                    type="shopping_list",
                    details=f"{len(added)} items",
                    success=failed == 0,
                    succeeded=len(added),
                    failed=failed,
                )
            ],
        )
