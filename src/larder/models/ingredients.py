"""Parsed ingredient line models."""

from pydantic import BaseModel, ConfigDict, Field


class ParsedIngredientLine(BaseModel):
    """
    One ingredient recovered from free text.

    `quantity` is the quantity as written ("1 1/2", "2-3"); `quantity_value`
    is its numeric value (ranges averaged, rounded to 3 decimals), or None.
    `name` is never empty.
    """

    model_config = ConfigDict(populate_by_name=True)

    original: str
    text: str
    quantity: str | None = None
    quantity_value: float | None = Field(default=None, alias="quantityValue")
    unit: str | None = None
    name: str


class ParseBatchResult(BaseModel):
    """Result of parsing a block of text line by line."""

    model_config = ConfigDict(populate_by_name=True)

    items: list[ParsedIngredientLine] = Field(default_factory=list)
    candidate_lines: int = Field(default=0, alias="candidateLines")
    confidence: float = 0.0
