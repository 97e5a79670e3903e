"""
Larder - One assistant turn.

Flow for a typed or spoken utterance:
1. Keyword interpreter (no model call)
2. Model interpretation, only if the keywords gave "unknown" and a model is configured
3. Intent dispatch against the stores
4. Both sides of the exchange recorded in the conversation log

`ask` is the open-ended path: the model answers using the tool catalog.
"""

import logging
from collections.abc import Callable
from datetime import date

from larder.config import settings
from larder.db.stores import KitchenStore
from larder.dispatch import IntentDispatcher, interpret_keywords
from larder.dispatch.dispatcher import GENERIC_APOLOGY
from larder.dispatch.intents import Intent
from larder.llm import Interpreter, ToolCallRunner, is_configured
from larder.memory import ConversationLog
from larder.models import DispatchResult, Interpretation, UserContext
from larder.tools import ToolRegistry

logger = logging.getLogger(__name__)

HISTORY_TURNS = 6

TOOL_SYSTEM_PROMPT = (
    "You are a kitchen assistant with access to the user's pantry, recipes, meal plans "
    "and grocery lists. Use the tools to look things up or make changes, then answer briefly."
)


class Assistant:
    """
    Handles turns for one session.

    Usage:
        assistant = Assistant.from_store(InMemoryKitchenStore())
        result = await assistant.handle_turn("add milk", UserContext(user_id="..."))
    """

    def __init__(
        self,
        dispatcher: IntentDispatcher,
        interpreter: Interpreter | None = None,
        runner: ToolCallRunner | None = None,
        log: ConversationLog | None = None,
    ):
        self.dispatcher = dispatcher
        self.interpreter = interpreter
        self.runner = runner
        self.log = log if log is not None else ConversationLog(cap=settings.conversation_cap)

    @classmethod
    def from_store(
        cls,
        store: KitchenStore,
        today: Callable[[], date] = date.today,
        use_model: bool | None = None,
    ) -> "Assistant":
        """Wire an assistant to one backend; the model is used only if configured."""
        if use_model is None:
            use_model = settings.use_model_fallback and is_configured()

        registry = ToolRegistry.from_store(store, today=today)
        return cls(
            dispatcher=IntentDispatcher.from_store(store, today=today),
            interpreter=Interpreter() if use_model else None,
            runner=ToolCallRunner(registry) if use_model else None,
        )

    async def interpret(self, text: str) -> Interpretation:
        interpretation = interpret_keywords(text)
        if Intent.parse(interpretation.intent) is not Intent.UNKNOWN or self.interpreter is None:
            return interpretation

        try:
            modeled = await self.interpreter.interpret(text, history=self.log.as_messages(HISTORY_TURNS))
        except Exception:
            logger.exception("Model interpretation failed; keeping keyword result")
            return interpretation

        if Intent.parse(modeled.intent) is Intent.UNKNOWN and not modeled.response:
            return interpretation
        return modeled

    async def handle_turn(self, text: str, context: UserContext) -> DispatchResult:
        """Run one utterance end to end. Never raises."""
        text = text.strip()
        if not text:
            return DispatchResult(message="I didn't catch that. Could you say it again?")

        self.log.append("user", text)
        interpretation = await self.interpret(text)
        result = await self.dispatcher.dispatch(interpretation, context)

        self.log.append(
            "assistant",
            result.message,
            action={
                "intent": interpretation.intent,
                "actions": [a.model_dump(exclude_none=True) for a in result.actions],
            },
        )
        return result

    async def ask(self, text: str, context: UserContext) -> str:
        """Answer an open-ended request with the tool catalog. Never raises."""
        if self.runner is None:
            result = await self.handle_turn(text, context)
            return result.message

        self.log.append("user", text)
        messages = [
            {"role": "system", "content": TOOL_SYSTEM_PROMPT},
            *self.log.as_messages(HISTORY_TURNS),
        ]
        try:
            reply = await self.runner.run(messages, context)
        except Exception:
            logger.exception("Tool conversation failed")
            reply = GENERIC_APOLOGY

        self.log.append("assistant", reply)
        return reply
