"""
Larder - Conversation log.

A bounded, in-order record of one session's turns. When the cap is
reached the oldest entries are dropped. The log round-trips through JSON
so a session can be saved and restored.
"""

import json
import uuid
from collections import deque
from collections.abc import Iterator
from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, Field, TypeAdapter

DEFAULT_CAP = 50


class ConversationEntry(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    role: Literal["user", "assistant"]
    content: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    action: dict[str, Any] | None = None


_ENTRIES = TypeAdapter(list[ConversationEntry])


class ConversationLog:
    """Ring buffer of conversation entries, oldest first."""

    def __init__(self, cap: int = DEFAULT_CAP, entries: list[ConversationEntry] | None = None):
        if cap < 1:
            raise ValueError("cap must be at least 1")
        self.cap = cap
        self._entries: deque[ConversationEntry] = deque(entries or [], maxlen=cap)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ConversationEntry]:
        return iter(self._entries)

    def append(
        self, role: Literal["user", "assistant"], content: str, action: dict[str, Any] | None = None
    ) -> ConversationEntry:
        entry = ConversationEntry(role=role, content=content, action=action)
        self._entries.append(entry)
        return entry

    def entries(self) -> list[ConversationEntry]:
        return list(self._entries)

    def as_messages(self, limit: int | None = None) -> list[dict[str, str]]:
        """Recent entries as chat messages for the model."""
        entries = self.entries()
        if limit is not None:
            entries = entries[-limit:] if limit > 0 else []
        return [{"role": e.role, "content": e.content} for e in entries]

    def clear(self) -> None:
        self._entries.clear()

    def to_json(self) -> str:
        """Serialize as a JSON list, omitting absent actions."""
        return json.dumps(
            [entry.model_dump(mode="json", exclude_none=True) for entry in self._entries]
        )

    @classmethod
    def from_json(cls, data: str, cap: int = DEFAULT_CAP) -> "ConversationLog":
        """Restore a log; only the newest `cap` entries are kept."""
        return cls(cap=cap, entries=_ENTRIES.validate_json(data))
