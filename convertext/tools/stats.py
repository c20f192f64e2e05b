"""Counting and text statistics."""

import re
from collections import Counter

from ..models import RenderMode
from .args import parse_int_in_range
from .decorator import text_tool
from .models import ToolCategory

_WORD_TOKEN_RE = re.compile(r"[A-Za-z0-9']+")
_SENTENCE_RE = re.compile(r"[^.!?]+[.!?]*")


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}{'' if count == 1 else 's'} found in the content."


def _word_count(text: str) -> int:
    # An empty text still counts as one (empty) word
    return len(text.strip().split()) or 1


@text_tool(
    name="countWords",
    render_mode=RenderMode.OUTPUT,
    category=ToolCategory.STATISTICS,
)
def count_words(text: str) -> str:
    """Count words in text"""
    return _plural(_word_count(text), "word")


@text_tool(
    name="countLines",
    render_mode=RenderMode.OUTPUT,
    category=ToolCategory.STATISTICS,
)
def count_lines(text: str) -> str:
    """Count lines in text"""
    return _plural(len(text.split("\n")), "line")


@text_tool(
    name="countCharacters",
    render_mode=RenderMode.OUTPUT,
    category=ToolCategory.STATISTICS,
)
def count_characters(text: str) -> str:
    """Count characters in text"""
    return _plural(len(text), "character")


@text_tool(
    name="textStatistics",
    render_mode=RenderMode.OUTPUT,
    category=ToolCategory.STATISTICS,
)
def text_statistics(text: str) -> str:
    """Report character, word, line, sentence and paragraph statistics"""
    words = text.split()
    lines = text.split("\n")
    sentences = [s for s in _SENTENCE_RE.findall(text) if s.strip()]
    paragraphs = [p for p in re.split(r"\n\s*\n", text) if p.strip()]
    average = sum(len(w) for w in words) / len(words) if words else 0.0

    return "\n".join([
        f"Characters: {len(text)}",
        f"Characters (no spaces): {len(''.join(text.split()))}",
        f"Words: {len(words)}",
        f"Lines: {len(lines)}",
        f"Sentences: {len(sentences)}",
        f"Paragraphs: {len(paragraphs)}",
        f"Average word length: {average:.2f}",
    ])


@text_tool(
    name="wordFrequency",
    render_mode=RenderMode.OUTPUT,
    category=ToolCategory.STATISTICS,
)
def word_frequency(text: str, limit: str = "") -> str:
    """List the most frequent words (limit between 1 and 100, default 10)"""
    top = parse_int_in_range(limit, 1, 100, default=10)
    if top is None:
        return "Error: Limit must be a number between 1 and 100."
    counts = Counter(w.lower() for w in _WORD_TOKEN_RE.findall(text))
    if not counts:
        return "No words found."
    return "\n".join(f"{word}: {count}" for word, count in counts.most_common(top))
