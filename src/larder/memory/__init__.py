"""Larder - Session memory."""

from larder.memory.conversation import ConversationEntry, ConversationLog

__all__ = ["ConversationEntry", "ConversationLog"]
