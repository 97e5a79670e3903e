"""
Larder - Core request/response models.

These are the transient objects that flow through one assistant turn:
the per-user context, the model's interpretation, the tool catalog and
tool results. None of them are persisted.
"""

import copy
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class UserContext(BaseModel):
    """Per-request identity. Every store access is scoped by `user_id`."""

    model_config = ConfigDict(frozen=True)

    user_id: str


class Interpretation(BaseModel):
    """
    Normalized natural-language understanding output.

    `intent` is always present. `entities` values are heterogeneous
    (strings, lists of item dicts, day names, URLs).
    """

    model_config = ConfigDict(frozen=True)

    intent: str
    entities: dict[str, Any] = Field(default_factory=dict)
    response: str | None = None
    confidence: float | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> "Interpretation":
        """
        Build an interpretation from a loosely shaped JSON payload.

        Anything that is not a dict, or that has no intent, becomes an
        "unknown" interpretation rather than an error.
        """
        if not isinstance(payload, dict) or not payload.get("intent"):
            return cls(intent="unknown", confidence=0.0)

        entities = payload.get("entities")
        confidence = payload.get("confidence")
        response = payload.get("response")
        return cls(
            intent=str(payload["intent"]),
            entities=entities if isinstance(entities, dict) else {},
            response=response if isinstance(response, str) and response else None,
            confidence=float(confidence) if isinstance(confidence, (int, float)) else None,
        )


class ToolDefinition(BaseModel):
    """A named, schema-described operation advertised to the model."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    description: str
    parameter_schema: dict[str, Any] = Field(alias="parameterSchema")

    def to_openai(self) -> dict[str, Any]:
        """Render in the OpenAI function-calling shape."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": copy.deepcopy(self.parameter_schema),
            },
        }


class ToolResult(BaseModel):
    """Outcome of one tool call. Only `data` or `error` is meaningful."""

    success: bool
    data: Any = None
    error: str | None = None

    @classmethod
    def ok(cls, data: Any) -> "ToolResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str) -> "ToolResult":
        return cls(success=False, error=error)
