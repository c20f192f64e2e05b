"""Sentence and paragraph segmentation."""

import re

from .decorator import text_tool
from .models import ToolCategory

_SENTENCE_BREAK_RE = re.compile(r"(?<=[.!?])\s+")
_PARAGRAPH_BREAK_RE = re.compile(r"\n\s*\n")


@text_tool(name="splitBySentences", category=ToolCategory.SEGMENTATION)
def split_by_sentences(text: str) -> str:
    """Split text into separate lines by sentences"""
    sentences = [s.strip() for s in _SENTENCE_BREAK_RE.split(text.strip())]
    return "\n".join(s for s in sentences if s)


@text_tool(name="splitByParagraphs", category=ToolCategory.SEGMENTATION)
def split_by_paragraphs(text: str) -> str:
    """Normalize paragraphs: one line each, separated by a blank line"""
    paragraphs = []
    for block in _PARAGRAPH_BREAK_RE.split(text.strip()):
        joined = " ".join(line.strip() for line in block.split("\n") if line.strip())
        if joined:
            paragraphs.append(joined)
    return "\n\n".join(paragraphs)
