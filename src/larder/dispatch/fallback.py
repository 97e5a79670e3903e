"""
Larder - Keyword interpreter.

Rule-based interpretation tried before the language model. Common,
unambiguous commands ("add milk", "swap monday dinner with tuesday
dinner") never need a model call; anything these rules can't place comes
back as "unknown" so the caller can ask the model instead.

Rules run in order, most specific first.
"""

import re

from larder.dispatch.dates import WEEKDAYS
from larder.models import Interpretation

MEAL_TYPES = ("breakfast", "lunch", "dinner", "snack")
_DAY_WORDS = WEEKDAYS + ("today", "tomorrow")

_ADD_VERB = re.compile(r"^(add|put|get|buy|need|pick up)\b", re.IGNORECASE)
_ADD_PREFIX = re.compile(r"^(add|put|get|buy|need|pick up)\s+", re.IGNORECASE)
_LIST_SUFFIX = re.compile(r"\s+(to|on|in)\s+(the\s+|my\s+)?(shopping\s+)?(list|cart).*$", re.IGNORECASE)
_PLEASE = re.compile(r"\s+please$", re.IGNORECASE)
_NOT_AN_ITEM = re.compile(r"\b(help|recipes?)\b", re.IGNORECASE)
_MEAL_WORD = re.compile(r"\b(breakfast|lunch|dinner|snack)\b", re.IGNORECASE)
_URL = re.compile(r"https?://\S+")
_RECIPE_INGREDIENTS = re.compile(r"add\s+(?:the\s+)?(.+?)\s+(?:ingredients|to)\b", re.IGNORECASE)
_SEARCH_QUERY = re.compile(r"(?:search|find)\s+(?:my\s+)?(?:recipes?\s+)?(?:for\s+)?(.+)", re.IGNORECASE)
_DELETE_RECIPE = re.compile(r"(?:delete|remove)\s+(?:the\s+|my\s+)?(.+?)\s+recipe", re.IGNORECASE)
_REMOVE_ITEM = re.compile(
    r"^(?:remove|delete|take)\s+(?:the\s+)?(.+?)\s+(?:off|from)\s+(?:the\s+|my\s+)?(?:shopping\s+)?list",
    re.IGNORECASE,
)
_CHECKED = re.compile(r"\b(checked|completed|purchased|done|bought)\b", re.IGNORECASE)
_GREETING = re.compile(r"^(hi|hello|hey|good morning|good afternoon|good evening)\b", re.IGNORECASE)


def _result(intent: str, entities: dict, confidence: float, response: str) -> Interpretation:
    return Interpretation(intent=intent, entities=entities, confidence=confidence, response=response)


def _time_range(text: str) -> str:
    if "today" in text:
        return "today"
    if "tomorrow" in text:
        return "tomorrow"
    return "this_week"


def _in_order(text: str, words: tuple[str, ...]) -> list[str]:
    """Every occurrence of any of `words` in `text`, in the order they appear."""
    pattern = re.compile(rf"\b({'|'.join(words)})\b")
    return pattern.findall(text)


def _swap(text: str) -> Interpretation | None:
    days = _in_order(text, WEEKDAYS)
    meals = _in_order(text, MEAL_TYPES)
    if len(meals) == 1:
        meals = meals * 2
    if len(days) < 2 or len(meals) < 2:
        return None

    (day1, day2), (meal1, meal2) = days[:2], meals[:2]
    return _result(
        "swap_meals",
        {"day1": day1, "mealType1": meal1, "day2": day2, "mealType2": meal2},
        0.7,
        f"I'll swap {day1} {meal1} with {day2} {meal2}!",
    )


def _move(text: str) -> Interpretation | None:
    days = _in_order(text, _DAY_WORDS)
    meals = _in_order(text, MEAL_TYPES)
    if len(meals) == 1:
        meals = meals * 2
    if len(days) < 2 or len(meals) < 2:
        return None

    (from_day, to_day), (from_meal, to_meal) = days[:2], meals[:2]
    return _result(
        "move_meal",
        {"fromDay": from_day, "fromMealType": from_meal, "toDay": to_day, "toMealType": to_meal},
        0.7,
        f"I'll move {from_day} {from_meal} to {to_day} {to_meal}!",
    )


def interpret(user_input: str) -> Interpretation:
    """Interpret a command by keyword rules. Returns intent "unknown" if no rule fits."""
    text = " ".join(user_input.strip().lower().split())

    # Import a recipe from a link (URL case preserved)
    url = _URL.search(user_input)
    if "import" in text and url:
        return _result("import_recipe", {"url": url.group(0)}, 0.8, "I'll import that recipe for you!")

    # A recipe's ingredients onto the list
    if "add" in text and ("ingredients" in text or ("shopping" in text and "recipe" in text)):
        match = _RECIPE_INGREDIENTS.search(text)
        if match:
            return _result(
                "add_recipe_to_shopping_list",
                {"recipeName": match.group(1).strip()},
                0.7,
                "I'll add those ingredients to your shopping list!",
            )

    # Plain shopping items
    if _ADD_VERB.match(text) and not _MEAL_WORD.search(text) and not _NOT_AN_ITEM.search(text):
        item_text = _PLEASE.sub("", _LIST_SUFFIX.sub("", _ADD_PREFIX.sub("", text))).strip()
        if item_text:
            return _result(
                "add_shopping_item",
                {"items": [{"name": item_text}]},
                0.6,
                f'I\'ll add "{item_text}" to your shopping list.',
            )

    if "swap" in text:
        swapped = _swap(text)
        if swapped:
            return swapped

    if "move" in text:
        moved = _move(text)
        if moved:
            return moved

    # Shopping list removals
    removing = any(w in text for w in ("clear", "remove", "delete"))
    if removing and ("list" in text or _CHECKED.search(text)):
        if _CHECKED.search(text):
            return _result(
                "clear_shopping_list", {"checkedOnly": True}, 0.7, "I'll clear the checked items from your list."
            )
        match = _REMOVE_ITEM.search(text)
        if match:
            name = match.group(1).strip()
            return _result("remove_shopping_item", {"itemName": name}, 0.7, f"I'll remove {name} from your list.")
        if "clear" in text and "meal" not in text:
            return _result("clear_shopping_list", {"checkedOnly": False}, 0.7, "I'll clear your shopping list.")

    # Meal plan bulk operations
    if removing and ("meal" in text or "plan" in text) and "recipe" not in text:
        time_range = _time_range(text)
        entities = {"timeRange": time_range}
        meal = _MEAL_WORD.search(text)
        if meal:
            entities["mealType"] = meal.group(1)
        return _result(
            "clear_meals", entities, 0.7, f"I'll clear the meals for {time_range.replace('_', ' ')}."
        )

    if any(w in text for w in ("generate", "create", "smart meal planner", "make meals", "plan meals")) and any(
        w in text for w in ("meal", "week", "plan")
    ):
        time_range = _time_range(text)
        return _result(
            "generate_meals", {"timeRange": time_range}, 0.7, f"I'll generate meals for {time_range.replace('_', ' ')}!"
        )

    if "consolidate" in text or ("merge" in text and "list" in text):
        return _result("consolidate_shopping_list", {}, 0.8, "I'll consolidate your shopping list!")

    # Recipe collection
    if ("search" in text or "find" in text) and "recipe" in text:
        match = _SEARCH_QUERY.search(text)
        if match:
            query = re.sub(r"recipes?", "", match.group(1)).strip()
            if query:
                return _result("search_recipes", {"query": query}, 0.7, "Let me search your recipes!")

    if ("delete" in text or "remove" in text) and "recipe" in text:
        match = _DELETE_RECIPE.search(text)
        if match:
            return _result("delete_recipe", {"recipeName": match.group(1).strip()}, 0.7, "I'll delete that recipe.")

    # Navigation
    if "recipe" in text:
        return _result("navigate", {"destination": "recipes"}, 0.7, "Taking you to recipes!")

    if "shopping" in text or "groceries" in text or "list" in text:
        return _result("navigate", {"destination": "shopping_list"}, 0.7, "Here's your shopping list!")

    if "meal" in text or "plan" in text:
        return _result("navigate", {"destination": "meal_planning"}, 0.7, "Let's work on your meal plan!")

    if "help" in text:
        return _result(
            "help",
            {},
            0.9,
            "I can help you add items to your shopping list, plan meals, or navigate the app. "
            "Just tell me what you need!",
        )

    if _GREETING.match(text):
        return _result("greeting", {}, 0.9, "Hello! I'm your kitchen assistant. How can I help you today?")

    return _result(
        "unknown",
        {},
        0.3,
        f'I\'m not sure how to help with "{user_input.strip()}". Try saying "help" to see what I can do!',
    )
