"""
Larder - Model-backed interpretation.

Two shapes come back from the model:

- Free text with an embedded JSON interpretation
  (`{"intent": ..., "entities": {...}, "response": ...}`), handled by
  `Interpreter`.
- OpenAI `tool_calls`, handled by `ToolCallRunner`, which executes each
  call through the Tool Registry and feeds the results back until the
  model answers in plain text.
"""

import json
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from larder.dispatch.intents import Intent, default_response
from larder.errors import ExtractionError
from larder.llm.client import complete
from larder.llm.json_recovery import extract
from larder.models import Interpretation, ToolResult, UserContext
from larder.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)

CompleteFn = Callable[..., Awaitable[Any]]

NOT_UNDERSTOOD = "I didn't understand that. Try saying 'help' to see what I can do."
MAX_TOOL_ROUNDS = 5


SYSTEM_PROMPT = f"""You are a kitchen assistant. Interpret the user's request and reply with ONE JSON object:
{{"intent": "<intent>", "entities": {{...}}, "response": "<short reply>", "confidence": <0-1>}}

Intents: {", ".join(i.value for i in Intent)}

Entities by intent:
- add_shopping_item: items: [{{"name", "quantity", "unit"}}]
- remove_shopping_item: itemName
- clear_shopping_list: checkedOnly (bool)
- navigate: destination (recipes | shopping_list | meal_planning)
- add_meal: food, mealType (breakfast | lunch | dinner | snack), day
- clear_meals / generate_meals: timeRange (today | tomorrow | this_week | all), mealType
- move_meal: fromDay, fromMealType, toDay, toMealType
- swap_meals: day1, mealType1, day2, mealType2
- search_recipes: query
- delete_recipe / add_recipe_to_shopping_list: recipeName
- import_recipe: url, category
- create_recipe: recipeName

Days are weekday names, "today" or "tomorrow". Reply with the JSON object only."""


class Interpreter:
    """
    Asks the model for an interpretation of one utterance.

    Never raises for bad model output: unrecoverable text becomes an
    "unknown" interpretation.
    """

    def __init__(self, complete_fn: CompleteFn = complete, system_prompt: str = SYSTEM_PROMPT):
        self._complete = complete_fn
        self._system_prompt = system_prompt

    async def interpret(self, text: str, history: list[dict[str, str]] | None = None) -> Interpretation:
        messages = [
            {"role": "system", "content": self._system_prompt},
            *(history or []),
            {"role": "user", "content": text},
        ]
        message = await self._complete(messages)
        content = message.content or ""

        try:
            payload = extract(content)
        except ExtractionError as e:
            logger.warning(f"Interpretation failed: {e}")
            return Interpretation(intent=Intent.UNKNOWN.value, response=NOT_UNDERSTOOD, confidence=0.0)

        interpretation = Interpretation.from_payload(payload)
        if interpretation.response is None:
            interpretation = interpretation.model_copy(
                update={"response": default_response(interpretation.intent)}
            )
        logger.info(f"Interpreted as {interpretation.intent} (confidence={interpretation.confidence})")
        return interpretation


def _parse_arguments(raw: str | None) -> dict[str, Any] | None:
    """Tool arguments arrive as a JSON string; salvage what we can."""
    if not raw:
        return {}
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        try:
            value = extract(raw)
        except ExtractionError:
            return None
    return value if isinstance(value, dict) else None


class ToolCallRunner:
    """
    Runs the model's tool-call loop for one turn.

    Each round sends the conversation plus the tool catalog; every tool
    call in the reply is executed in order and its `ToolResult` is appended
    as a `tool` message. The loop ends when the model replies without tool
    calls, or after `max_rounds`.
    """

    def __init__(
        self,
        registry: ToolRegistry,
        complete_fn: CompleteFn = complete,
        max_rounds: int = MAX_TOOL_ROUNDS,
    ):
        self.registry = registry
        self._complete = complete_fn
        self.max_rounds = max_rounds

    async def _call(self, tool_call: Any, context: UserContext) -> ToolResult:
        name = tool_call.function.name
        args = _parse_arguments(tool_call.function.arguments)
        if args is None:
            logger.warning(f"Tool execution error ({name}): unreadable arguments")
            return ToolResult.fail(f"Invalid arguments for {name}")
        return await self.registry.execute(name, args, context)

    async def run(self, messages: list[dict[str, Any]], context: UserContext) -> str:
        """
        Drive the conversation until the model answers in text.

        Args:
            messages: Conversation so far; extended in place with the
                assistant tool calls and tool results
            context: The calling user's context

        Returns:
            The model's final text reply
        """
        tools = self.registry.to_openai_tools()

        for round_number in range(1, self.max_rounds + 1):
            message = await self._complete(messages, tools=tools)
            tool_calls = getattr(message, "tool_calls", None) or []
            if not tool_calls:
                return message.content or ""

            logger.info(f"Tool round {round_number}: {len(tool_calls)} call(s)")
            messages.append(
                {
                    "role": "assistant",
                    "content": message.content,
                    "tool_calls": [
                        {
                            "id": call.id,
                            "type": "function",
                            "function": {"name": call.function.name, "arguments": call.function.arguments},
                        }
                        for call in tool_calls
                    ],
                }
            )
            for call in tool_calls:
                result = await self._call(call, context)
                messages.append(
                    {
                        "role": "tool",
                        "tool_call_id": call.id,
                        "content": json.dumps(result.model_dump(), default=str),
                    }
                )

        logger.warning(f"Tool loop stopped after {self.max_rounds} rounds")
        return "Sorry, that took too many steps. Please try a simpler request."
