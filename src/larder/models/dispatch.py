"""
Larder - Dispatch result models.

What one dispatched intent produced: a single acknowledgement, the
actions taken (with per-item counts for batch actions), and any
navigation or staged hand-off for the client to pick up.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field

ActionType = Literal["shopping_list", "navigate", "meal_plan", "recipe"]


class ActionReport(BaseModel):
    """
    One domain effect.

    Batch actions (adding several items) set `succeeded` and `failed`;
    `success` is only True when nothing failed.
    """

    type: ActionType
    details: str
    success: bool
    succeeded: int | None = None
    failed: int | None = None


class DispatchResult(BaseModel):
    message: str
    actions: list[ActionReport] = Field(default_factory=list)
    navigate_to: str | None = None
    staged: dict[str, Any] | None = None

    @property
    def success(self) -> bool:
        return all(a.success for a in self.actions)
