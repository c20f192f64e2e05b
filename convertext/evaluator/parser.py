"""
Reply parser for the delegated evaluator.

The reasoning backend answers in a small line grammar::

    TOOL: <name>
    <arg_name>::<value>
    ...
    REASONING: <free text>

Argument binding is strictly positional: the tool's declared parameters
(text excluded) are paired index-for-index with the values in the order they
appear in the reply. Names written by the backend are not used, so a reply
that lists arguments out of declared order binds them to the wrong
parameters. Callers that want name matching should replace
``bind_positional_args`` rather than work around it.
"""

import re
from dataclasses import dataclass, field
from typing import List, Sequence

from ..constants import UNRESOLVED_TOOL
from ..models import ToolArg

TOOL_RE = re.compile(r"TOOL:\s*(\w+)")
ARG_RE = re.compile(r"(\w+)[ \t]*::[ \t]*(.*)")
REASONING_RE = re.compile(r"REASONING:\s*(.*)\Z", re.DOTALL)

REASONING_KEY = "REASONING"


@dataclass
class ParsedReply:
    """Raw pieces extracted from a backend reply"""
    tool: str
    values: List[str] = field(default_factory=list)
    reasoning: str = ""


def parse_tool(reply: str) -> str:
    """Tool name from the first ``TOOL:`` line, or "custom"."""
    match = TOOL_RE.search(reply or "")
    return match.group(1) if match else UNRESOLVED_TOOL


def parse_arg_values(reply: str) -> List[str]:
    """Values of every ``name::value`` line, in reply order."""
    return [
        m.group(2).strip()
        for m in ARG_RE.finditer(reply or "")
        if m.group(1) != REASONING_KEY
    ]


def parse_reasoning(reply: str) -> str:
    """Everything after ``REASONING:``, or the whole reply when absent."""
    match = REASONING_RE.search(reply or "")
    return match.group(1).strip() if match else (reply or "").strip()


def parse_reply(reply: str) -> ParsedReply:
    """Split a backend reply into tool, argument values and reasoning."""
    return ParsedReply(
        tool=parse_tool(reply),
        values=parse_arg_values(reply),
        reasoning=parse_reasoning(reply),
    )


def bind_positional_args(arg_params: Sequence[str], values: Sequence[str]) -> List[ToolArg]:
    """
    Pair declared parameter names with values by position.

    Missing values are bound as "" and surplus values are dropped, so the
    result always has exactly one entry per declared parameter.

    Args:
        arg_params: Tool parameters in declared order, text excluded
        values: Argument values in parse order

    Returns:
        One ToolArg per declared parameter
    """
    return [
        ToolArg(name=name, value=values[i] if i < len(values) else "")
        for i, name in enumerate(arg_params)
    ]
