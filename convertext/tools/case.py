"""Case transforms."""

import random
import re

from ..models import RenderMode
from .decorator import text_tool
from .models import ToolCategory

_WORD_RE = re.compile(r"\w\S*")


@text_tool(name="toUppercase", category=ToolCategory.CASE)
def to_uppercase(text: str) -> str:
    """Convert text to uppercase"""
    return text.upper()


@text_tool(name="toLowercase", category=ToolCategory.CASE)
def to_lowercase(text: str) -> str:
    """Convert text to lowercase"""
    return text.lower()


@text_tool(name="capitalize", category=ToolCategory.CASE)
def capitalize(text: str) -> str:
    """Capitalize the first letter of each word"""
    return _WORD_RE.sub(lambda m: m.group(0)[0].upper() + m.group(0)[1:].lower(), text)


@text_tool(name="randomizeCase", category=ToolCategory.RANDOM, render_mode=RenderMode.DIFF)
def randomize_case(text: str, *, rng: random.Random) -> str:
    """Randomly switch each letter between upper and lower case"""
    return "".join(
        (ch.upper() if rng.random() < 0.5 else ch.lower()) if ch.isalpha() else ch
        for ch in text
    )
