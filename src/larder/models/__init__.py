"""Larder - Data models."""

from larder.models.core import Interpretation, ToolDefinition, ToolResult, UserContext
from larder.models.dispatch import ActionReport, DispatchResult
from larder.models.ingredients import ParseBatchResult, ParsedIngredientLine

__all__ = [
    "ActionReport",
    "DispatchResult",
    "Interpretation",
    "ToolDefinition",
    "ToolResult",
    "UserContext",
    "ParseBatchResult",
    "ParsedIngredientLine",
]
