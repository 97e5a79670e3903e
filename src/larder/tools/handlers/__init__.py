"""
Larder - Tool handlers.

Every handler is `async (params, ctx, deps) -> data` and raises
`ToolExecutionError` for expected failures.
"""

from larder.tools.handlers.deps import ToolDeps

__all__ = ["ToolDeps"]
