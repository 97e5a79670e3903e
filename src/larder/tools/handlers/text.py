"""Larder - Free-text ingredient parsing tool."""

from larder.models import UserContext
from larder.tools.handlers.deps import ToolDeps
from larder.tools.ingredient_parser import parse_batch
from larder.tools.params import ParseIngredientTextParams


async def parse_ingredient_text(
    params: ParseIngredientTextParams, ctx: UserContext, deps: ToolDeps
) -> dict:
    return parse_batch(params.text).model_dump(by_alias=False)
