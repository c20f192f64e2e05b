"""Line-level transforms: dedup, cleanup, ordering, repetition and replace."""

import re

from ..models import RenderMode
from .args import parse_int_in_range
from .decorator import text_tool

MAX_REPEAT = 100
MAX_SEARCH_LENGTH = 100

_INNER_SPACE_RE = re.compile(r"[ \t]+")


@text_tool(name="removeDuplicates")
def remove_duplicates(text: str) -> str:
    """Remove duplicate lines"""
    # dict preserves first-seen order
    return "\n".join(dict.fromkeys(text.split("\n")))


@text_tool(name="removeEmptyLines")
def remove_empty_lines(text: str) -> str:
    """Remove blank lines"""
    return "\n".join(line for line in text.split("\n") if line.strip())


@text_tool(name="trimWhitespace")
def trim_whitespace(text: str) -> str:
    """Trim each line and collapse repeated spaces"""
    return "\n".join(_INNER_SPACE_RE.sub(" ", line.strip()) for line in text.split("\n"))


@text_tool(name="sortLines")
def sort_lines(text: str, order: str = "") -> str:
    """Sort lines alphabetically (order: asc or desc)"""
    direction = (order or "asc").strip().lower()
    if direction not in ("asc", "desc"):
        return "Error: Sort order must be 'asc' or 'desc'."
    return "\n".join(sorted(text.split("\n"), key=str.lower, reverse=direction == "desc"))


@text_tool(name="repeatText", render_mode=RenderMode.OUTPUT)
def repeat_text(text: str, count: str = "") -> str:
    """Repeat the text a number of times (count between 1 and 100)"""
    times = parse_int_in_range(count, 1, MAX_REPEAT)
    if times is None:
        return "Error: Repeat count must be a number between 1 and 100."
    return "\n".join([text] * times)


@text_tool(name="searchAndReplace")
def search_and_replace(text: str, search: str = "", replace: str = "") -> str:
    """Search and replace a single phrase (up to 100 chars)"""
    if not search or len(search) > MAX_SEARCH_LENGTH:
        return "Error: Search text must be between 1 and 100 characters."
    return text.replace(search, replace)
