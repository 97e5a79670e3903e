"""
Larder - Name and unit normalization.

Utilities for normalizing user input for consistent matching and display.
"""

from typing import Any


def normalize_name(name: str) -> str:
    """
    Normalize a name for consistent matching.

    Examples:
        normalize_name("  Chicken Thighs  ") -> "chicken thighs"
        normalize_name("green   pepper") -> "green pepper"
    """
    return " ".join(name.lower().strip().split())


# Common unit aliases - map to standard form
UNIT_ALIASES = {
    "pounds": "lb",
    "pound": "lb",
    "lbs": "lb",
    "ounces": "oz",
    "ounce": "oz",
    "grams": "g",
    "gram": "g",
    "kilograms": "kg",
    "kilogram": "kg",
    "liters": "l",
    "liter": "l",
    "litres": "l",
    "litre": "l",
    "milliliters": "ml",
    "milliliter": "ml",
    "cups": "cup",
    "tablespoons": "tbsp",
    "tablespoon": "tbsp",
    "teaspoons": "tsp",
    "teaspoon": "tsp",
    "gallons": "gallon",
    "quarts": "quart",
    "pints": "pint",
    "cloves": "clove",
    "pieces": "piece",
    "items": "item",
}


def clean_unit(unit: str) -> str:
    """
    Clean and normalize a unit string.

    Args:
        unit: Raw unit input (e.g., "LBS", "Pounds", "lb")

    Returns:
        Normalized unit (lowercase, short singular form where known)
    """
    unit = unit.lower().strip()
    return UNIT_ALIASES.get(unit, unit)


def format_quantity(value: float) -> str:
    """Format a number without a trailing ".0" ("2", "1.5", "0.33")."""
    if value == int(value):
        return str(int(value))
    return f"{value:.2f}".rstrip("0").rstrip(".")


def format_item_label(name: str, quantity: Any = None, unit: str | None = None) -> str:
    """
    Format an item for a list entry.

    Preference order: "{quantity} {unit} {name}", "{quantity} {name}", "{name}".

    Examples:
        format_item_label("milk", "1", "gallon") -> "1 gallon milk"
        format_item_label("eggs", 12) -> "12 eggs"
        format_item_label("bread") -> "bread"
    """
    if isinstance(quantity, float):
        quantity = format_quantity(quantity)
    qty = str(quantity).strip() if quantity not in (None, "") else ""
    unit = (unit or "").strip()

    if qty and unit:
        return f"{qty} {unit} {name}"
    if qty:
        return f"{qty} {name}"
    return name
