"""
Larder - Structured-data recovery from model text.

Language models are asked for JSON but often wrap it in prose, leave a
trailing comma, or keep talking after the closing brace. `extract` runs an
ordered list of strategies, cheapest and most common first, and returns
the first value that parses.

Each strategy is a pure `text -> value | None` function so it can be
tested on its own. Only syntax is repaired; the parsed value is returned
as-is.
"""

import json
import logging
import re
from typing import Any, Callable

from larder.errors import ExtractionError

logger = logging.getLogger(__name__)

Strategy = Callable[[str], Any | None]

_TRAILING_COMMA = re.compile(r",\s*([}\]])")
_OBJECT_ARRAY = re.compile(r"\[\s*\{[\s\S]*\}\s*\]")


def _loads(span: str) -> Any | None:
    try:
        return json.loads(span)
    except (json.JSONDecodeError, ValueError):
        return None


def greedy_object(text: str) -> Any | None:
    """Parse the span from the first '{' to the last '}'."""
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end < start:
        return None
    return _loads(text[start : end + 1])


def balanced_object(text: str) -> Any | None:
    """
    Parse the first complete object found by tracking brace depth.

    Braces inside JSON strings do not count. If the depth never returns
    to zero the text is truncated and nothing is returned.
    """
    start = text.find("{")
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue

        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return _loads(text[start : i + 1])

    return None


def trailing_comma_repair(text: str) -> Any | None:
    """Drop commas directly before a closing brace or bracket, then retry."""
    cleaned = _TRAILING_COMMA.sub(r"\1", text)
    if cleaned == text:
        return None
    return greedy_object(cleaned)


def object_array(text: str) -> Any | None:
    """Parse a `[ {...} ]` span when no bare object could be recovered."""
    match = _OBJECT_ARRAY.search(text)
    if not match or "{" in text[: match.start()]:
        return None
    return _loads(match.group(0))


STRATEGIES: tuple[Strategy, ...] = (
    greedy_object,
    balanced_object,
    trailing_comma_repair,
    object_array,
)


def extract(text: str, strategies: tuple[Strategy, ...] = STRATEGIES) -> Any:
    """
    Recover a JSON value from free-form text.

    Args:
        text: Model output expected to contain a JSON object or array
        strategies: Strategies to try in order

    Returns:
        The first successfully parsed value

    Raises:
        ExtractionError: If no strategy succeeds (terminal for the turn)
    """
    for strategy in strategies:
        value = strategy(text)
        if value is not None:
            logger.debug(f"JSON recovered by {strategy.__name__}")
            return value

    raise ExtractionError(len(text))
