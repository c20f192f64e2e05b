"""
ConverText Tools - Catalog of parameterized text operations

Provides:
- TextTool / ToolSignature: Catalog entries and their public description
- ToolRegistry: Name -> tool map with a single execute() entry point
- @text_tool decorator: Declare a tool from a plain function
- generate_diff: Unified diff used for diff-rendered results

Usage:
    from convertext.tools import ToolRegistry

    registry = ToolRegistry.get_instance()
    registry.execute("csvToJson", ["name,age\\nAlice,28"])
"""

from .models import (
    ToolCategory,
    ToolSignature,
    TextTool,
)
from .registry import ToolRegistry
from .decorator import text_tool
from .diff import generate_diff
from .catalog import BUILTIN_TOOLS

__all__ = [
    # Models
    "ToolCategory",
    "ToolSignature",
    "TextTool",
    # Registry
    "ToolRegistry",
    "BUILTIN_TOOLS",
    # Decorator
    "text_tool",
    # Diff
    "generate_diff",
]
