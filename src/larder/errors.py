"""
Larder - Error taxonomy.

Every failure the core can produce while handling a turn maps to one of
these classes. Tool and parser failures are turned into structured results
before they reach the dispatcher; nothing here should ever end the process.
"""


class LarderError(Exception):
    """Base class for all Larder errors."""


class ExtractionError(LarderError):
    """No JSON value could be recovered from model text."""

    def __init__(self, text_length: int):
        self.text_length = text_length
        super().__init__(
            f"Failed to extract valid JSON from response. Text length: {text_length}"
        )


class ToolNotFoundError(LarderError):
    """The model asked for a tool that is not in the catalog."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Tool not found: {name}")


class ToolExecutionError(LarderError):
    """A tool handler failed in an expected, user-facing way."""


class EntityResolutionError(LarderError):
    """A required entity is missing or ambiguous for the chosen intent."""

    def __init__(self, intent: str, missing: list[str], message: str | None = None):
        self.intent = intent
        self.missing = missing
        super().__init__(message or f"Missing {', '.join(missing)} for {intent}")
