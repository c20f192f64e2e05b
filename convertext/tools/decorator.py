"""
@text_tool decorator - build TextTool catalog entries from plain functions.

Inspects the function signature to derive the ordered parameter list, so the
declared Python parameters are the single source of truth for argument
binding. The first parameter must be ``text``. A keyword-only ``rng``
parameter marks the tool as randomized; the registry injects its random
source there and it is not part of the public signature.

Usage::

    from convertext.tools.decorator import text_tool
    from convertext.models import RenderMode

    @text_tool(name="repeatText", render_mode=RenderMode.OUTPUT)
    def repeat_text(text: str, count: str = "") -> str:
        \"\"\"Repeat the text a number of times (1-100).\"\"\"
        ...

    # repeat_text is now a TextTool instance
    # repeat_text.signature.params == ("text", "count")
"""

from __future__ import annotations

import inspect
from typing import Any, Callable, Optional, Tuple

from ..constants import TEXT_PARAM
from ..models import RenderMode
from .models import TextTool, ToolCategory, ToolSignature

_RNG_PARAM = "rng"


def _collect_params(func: Callable) -> Tuple[Tuple[str, ...], bool]:
    """Return the ordered public parameter names and whether ``rng`` is taken."""
    sig = inspect.signature(func)
    params = []
    uses_rng = False

    for name, param in sig.parameters.items():
        if name == _RNG_PARAM:
            uses_rng = True
            continue
        # Skip *args / **kwargs
        if param.kind in (
            inspect.Parameter.VAR_POSITIONAL,
            inspect.Parameter.VAR_KEYWORD,
        ):
            continue
        params.append(name)

    if not params or params[0] != TEXT_PARAM:
        raise ValueError(
            f"Tool function '{func.__name__}' must take '{TEXT_PARAM}' as its first parameter"
        )
    return tuple(params), uses_rng


def text_tool(
    func: Optional[Callable] = None,
    *,
    name: Optional[str] = None,
    description: Optional[str] = None,
    render_mode: RenderMode = RenderMode.DIFF,
    category: ToolCategory = ToolCategory.LINES,
) -> Any:
    """Decorator that converts a text function into a :class:`TextTool`.

    Supports both bare ``@text_tool`` and parameterised
    ``@text_tool(name="csvToJson", render_mode=RenderMode.OUTPUT)`` usage.
    """

    def _make_tool(fn: Callable) -> TextTool:
        tool_name = name or fn.__name__
        # First line of docstring as description
        doc = inspect.getdoc(fn) or ""
        tool_description = description or (doc.split("\n")[0].strip() if doc else tool_name)
        params, uses_rng = _collect_params(fn)

        return TextTool(
            signature=ToolSignature(
                name=tool_name,
                description=tool_description,
                render_mode=render_mode,
                params=params,
                category=category,
            ),
            func=fn,
            uses_rng=uses_rng,
        )

    if func is not None:
        # Called as @text_tool (no parentheses)
        return _make_tool(func)

    return _make_tool
