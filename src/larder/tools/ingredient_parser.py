"""
Larder - Heuristic ingredient line parser.

Turns free text (a pasted ingredient list, recipe instructions, a shopping
entry) into structured quantity/unit/name triples without a model call.

Pipeline per line:
- Normalize unicode vulgar fractions ("½" -> "1/2")
- Strip list markers ("1.", "-", "•")
- Keep only ingredient-like lines (leading quantity, leading unit, or a
  food keyword anywhere)
- Consume quantity, then unit, then treat the rest as the name

Examples:
    parse_line("1 1/2 cups flour") -> quantity "1 1/2", value 1.5, unit "cups", name "flour"
    parse_line("2-3 cloves garlic, minced") -> value 2.5, unit "cloves", name "garlic, minced"
"""

import re

from larder.models.ingredients import ParseBatchResult, ParsedIngredientLine

FRACTION_MAP = {
    "½": "1/2",
    "⅓": "1/3",
    "⅔": "2/3",
    "¼": "1/4",
    "¾": "3/4",
    "⅛": "1/8",
    "⅜": "3/8",
    "⅝": "5/8",
    "⅞": "7/8",
}

UNITS = [
    "teaspoons?",
    "tsp",
    "tablespoons?",
    "tbsp",
    "cups?",
    "ounces?",
    "oz",
    "pints?",
    "quarts?",
    "gallons?",
    "liters?",
    "l",
    "milliliters?",
    "ml",
    "grams?",
    "g",
    "kilograms?",
    "kg",
    "pounds?",
    "lbs?",
    "sticks?",
    "cloves?",
    "heads?",
    "pieces?",
    "slices?",
    "cans?",
    "packages?",
    "bunch(?:es)?",
    "sprigs?",
    "lea(?:f|ves)",
    "handfuls?",
    "pinch(?:es)?",
    "dash(?:es)?",
]

INGREDIENT_KEYWORDS = [
    "salt", "pepper", "oil", "sugar", "flour", "butter", "onion", "garlic", "tomato", "cheese",
    "chicken", "beef", "pork", "fish", "egg", "milk", "cream", "herb", "spice", "lettuce",
    "apple", "spinach", "kale", "rice", "pasta", "bean", "broth", "stock", "vinegar", "juice",
    "honey", "maple", "mustard", "yogurt", "walnut", "pecan", "almond", "cashew", "berry",
]

_UNICODE_FRACTION = re.compile(rf"(\d)?([{''.join(FRACTION_MAP)}])")
_NUMBERED_LINE = re.compile(r"^\d+[.)](?!\d)\s*")
_BULLET = re.compile(r"^[-*•●◦]\s*")
_UNIT = re.compile(rf"^(?:{'|'.join(UNITS)})\b", re.IGNORECASE)
_KEYWORD = re.compile(rf"\b(?:{'|'.join(INGREDIENT_KEYWORDS)})\b", re.IGNORECASE)

_NUMBER = r"(?:\d+\s+\d+/\d+|\d+/\d+|\d*\.\d+|\d+)"
_QUANTITY = re.compile(rf"^{_NUMBER}(?:\s*-\s*{_NUMBER})?")
_MIXED = re.compile(r"^(\d+)\s+(\d+)/(\d+)$")
_FRACTION = re.compile(r"^(\d+)/(\d+)$")
_LEADING_OF = re.compile(r"^of\s+", re.IGNORECASE)


def normalize_fractions(text: str) -> str:
    """Replace unicode vulgar fractions with ASCII "n/d" ("1½" -> "1 1/2")."""

    def _swap(match: re.Match) -> str:
        whole, glyph = match.group(1), match.group(2)
        fraction = FRACTION_MAP[glyph]
        return f"{whole} {fraction}" if whole else fraction

    return _UNICODE_FRACTION.sub(_swap, text)


def clean_line(line: str) -> str:
    """Normalize fractions and strip numbering or bullet markers."""
    result = normalize_fractions(line.strip())
    result = _NUMBERED_LINE.sub("", result).strip()
    result = _BULLET.sub("", result).strip()
    return result


def looks_like_ingredient(line: str) -> bool:
    """A cleaned line is a candidate if it has a leading quantity or unit, or a food keyword."""
    if not line:
        return False
    return bool(_QUANTITY.match(line) or _UNIT.match(line) or _KEYWORD.search(line))


def _parse_number(part: str) -> float | None:
    mixed = _MIXED.match(part)
    if mixed:
        whole, num, den = (int(g) for g in mixed.groups())
        return whole + num / den if den else None

    fraction = _FRACTION.match(part)
    if fraction:
        num, den = (int(g) for g in fraction.groups())
        return num / den if den else None

    try:
        return float(part)
    except ValueError:
        return None


def quantity_to_number(quantity: str | None) -> float | None:
    """
    Convert a written quantity to a number.

    Ranges ("2-3") are averaged; the result is rounded to 3 decimals.
    """
    if not quantity:
        return None

    parts = [p.strip() for p in quantity.split("-") if p.strip()]
    values = [v for v in (_parse_number(p) for p in parts) if v is not None]
    if not values:
        return None

    return round(sum(values) / len(values), 3)


def parse_line(line: str) -> ParsedIngredientLine | None:
    """
    Parse one line into quantity, unit and name.

    Returns None for blank lines, lines that do not look like ingredients,
    and lines with nothing left for a name.
    """
    cleaned = clean_line(line)
    if not looks_like_ingredient(cleaned):
        return None

    remaining = cleaned
    quantity = None
    unit = None

    quantity_match = _QUANTITY.match(remaining)
    if quantity_match:
        quantity = " ".join(quantity_match.group(0).split())
        remaining = remaining[quantity_match.end() :].strip()

    unit_match = _UNIT.match(remaining)
    if unit_match:
        unit = unit_match.group(0)
        remaining = remaining[unit_match.end() :].strip()

    name = _LEADING_OF.sub("", remaining).strip()
    if not name:
        return None

    text = " ".join(part for part in (quantity, unit, name) if part)

    return ParsedIngredientLine(
        original=line.strip(),
        text=text,
        quantity=quantity,
        quantity_value=quantity_to_number(quantity),
        unit=unit,
        name=name,
    )


def parse_batch(free_text: str) -> ParseBatchResult:
    """
    Parse every ingredient-like line in a block of text.

    `confidence` is parsed items over candidate lines (falling back to the
    total line count, then 1). It tells the caller how far to trust the
    list, e.g. whether to ask the user to confirm it first.
    """
    lines = free_text.splitlines()
    items: list[ParsedIngredientLine] = []
    candidate_lines = 0

    for line in lines:
        cleaned = clean_line(line)
        if not cleaned or not looks_like_ingredient(cleaned):
            continue

        candidate_lines += 1
        parsed = parse_line(line)
        if parsed:
            items.append(parsed)

    denominator = candidate_lines or len(lines) or 1
    return ParseBatchResult(
        items=items,
        candidate_lines=candidate_lines,
        confidence=min(1.0, len(items) / denominator),
    )
