"""Larder - Language model boundary: JSON recovery, client, interpretation."""

from larder.llm.client import complete, get_client, is_configured
from larder.llm.interpreter import Interpreter, ToolCallRunner
from larder.llm.json_recovery import STRATEGIES, extract

__all__ = [
    "Interpreter",
    "STRATEGIES",
    "ToolCallRunner",
    "complete",
    "extract",
    "get_client",
    "is_configured",
]
