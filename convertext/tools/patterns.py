"""Pattern extraction and number/phone formatting."""

import re

from ..models import RenderMode
from .decorator import text_tool
from .models import ToolCategory

EMAIL_RE = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")
URL_RE = re.compile(r"\b(?:https?://|www\.)[^\s<>\"']+[^\s<>\"'.,;:!?)\]]")
NUMBER_RE = re.compile(r"-?\d+(?:[.,]\d+)*")

PHONE_PATTERNS = (
    re.compile(r"\+?1?[-.]?\(?([0-9]{3})\)?[-.]?([0-9]{3})[-.]?([0-9]{4})"),
    re.compile(r"([0-9]{3})[-.\s]?([0-9]{3})[-.\s]?([0-9]{4})"),
    re.compile(r"\(?([0-9]{3})\)?\s?([0-9]{3})[-.\s]?([0-9]{4})"),
)

# 1.234,56 -> 1,234.56 and 15,5 -> 15.5
EUROPEAN_RE = re.compile(r"\b(\d{1,3}(?:\.\d{3})+|\d+),(\d+)\b")


def _lines_or(matches, empty_message: str) -> str:
    return "\n".join(matches) if matches else empty_message


@text_tool(
    name="extractEmails",
    render_mode=RenderMode.OUTPUT,
    category=ToolCategory.PATTERNS,
)
def extract_emails(text: str) -> str:
    """Extract all email addresses from text"""
    return _lines_or(EMAIL_RE.findall(text), "No email addresses found.")


@text_tool(
    name="extractUrls",
    render_mode=RenderMode.OUTPUT,
    category=ToolCategory.PATTERNS,
)
def extract_urls(text: str) -> str:
    """Extract all URLs from text"""
    return _lines_or(URL_RE.findall(text), "No URLs found.")


@text_tool(
    name="extractNumbers",
    render_mode=RenderMode.OUTPUT,
    category=ToolCategory.PATTERNS,
)
def extract_numbers(text: str) -> str:
    """Extract all numbers from text"""
    return _lines_or(NUMBER_RE.findall(text), "No numbers found.")


@text_tool(
    name="extractByPattern",
    render_mode=RenderMode.OUTPUT,
    category=ToolCategory.PATTERNS,
)
def extract_by_pattern(text: str, pattern: str = "") -> str:
    """Extract every match of a regular expression"""
    if not pattern:
        return "Error: Pattern must not be empty."
    try:
        compiled = re.compile(pattern)
    except re.error as e:
        return f"Error: Invalid regular expression: {e}"
    return _lines_or([m.group(0) for m in compiled.finditer(text)], "No matches found.")


@text_tool(name="formatPhoneNumbers", category=ToolCategory.PATTERNS)
def format_phone_numbers(text: str) -> str:
    """Format phone numbers to (XXX) XXX-XXXX format"""
    formatted = []
    for line in text.split("\n"):
        for pattern in PHONE_PATTERNS:
            line = pattern.sub(lambda m: f"({m.group(1)}) {m.group(2)}-{m.group(3)}", line)
        formatted.append(line)
    return "\n".join(formatted)


@text_tool(name="convertEuropeanNumbers", category=ToolCategory.PATTERNS)
def convert_european_numbers(text: str) -> str:
    """Convert European number format to American format"""
    return EUROPEAN_RE.sub(
        lambda m: f"{m.group(1).replace('.', ',')}.{m.group(2)}", text
    )
