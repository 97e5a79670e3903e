"""
Larder - Tools Package.

Provides the tool registry and the text utilities its tools build on.

Registry:
- ToolRegistry: fixed catalog of pantry, recipe, meal plan, grocery,
  calculation, analysis and text tools

Utilities:
- parse_line / parse_batch: heuristic ingredient line parser
- convert: cooking unit conversion
"""

from larder.tools.ingredient_parser import parse_batch, parse_line
from larder.tools.registry import CATALOG, ToolRegistry
from larder.tools.units import convert

__all__ = [
    # Registry
    "CATALOG",
    "ToolRegistry",
    # Utilities
    "convert",
    "parse_batch",
    "parse_line",
]
