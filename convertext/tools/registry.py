"""
ConverText Tool Registry - Static catalog of named text operations
"""

import logging
import random
import threading
from typing import Dict, Iterable, List, Optional

from ..errors import UnknownToolError
from .catalog import BUILTIN_TOOLS
from .models import TextTool, ToolSignature

logger = logging.getLogger(__name__)


class ToolRegistry:
    """
    Name -> tool map built once from the catalog

    The registry is read-only after construction, so a single instance can be
    shared by every request. Randomized tools draw from ``rng``; pass a seeded
    ``random.Random`` to make them reproducible.

    Usage:
        registry = ToolRegistry.get_instance()
        registry.execute("toUppercase", ["hello"])       # "HELLO"
        registry.execute("repeatText", ["ab", "2"])      # "ab\\nab"
        registry.get_tool_signatures()["searchAndReplace"]
        # ["text", "search", "replace"]

    Example:
        # Deterministic shuffles in tests
        registry = ToolRegistry(rng=random.Random(42))
    """

    _instance: Optional["ToolRegistry"] = None
    _lock: threading.Lock = threading.Lock()

    def __init__(
        self,
        tools: Optional[Iterable[TextTool]] = None,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize the registry

        Args:
            tools: Catalog entries in listing order (defaults to the built-in catalog)
            rng: Random source for randomized tools (defaults to an unseeded generator)
        """
        self._rng = rng or random.Random()
        self._tools: Dict[str, TextTool] = {}
        for tool in tools if tools is not None else BUILTIN_TOOLS:
            if tool.name in self._tools:
                logger.warning(f"Tool '{tool.name}' already registered, overwriting")
            self._tools[tool.name] = tool
        logger.debug(f"Tool registry built with {len(self._tools)} tools")

    @classmethod
    def get_instance(cls) -> "ToolRegistry":
        """Get the shared registry with the built-in catalog"""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls):
        """Reset shared registry (for testing)"""
        with cls._lock:
            cls._instance = None

    def list_tools(self) -> List[ToolSignature]:
        """All tool signatures in catalog order"""
        return [tool.signature for tool in self._tools.values()]

    def get_signature(self, name: str) -> Optional[ToolSignature]:
        """
        Get a tool signature by name

        Args:
            name: Tool name

        Returns:
            ToolSignature or None if the tool is not in the catalog
        """
        tool = self._tools.get(name)
        return tool.signature if tool else None

    def get_tool_signatures(self) -> Dict[str, List[str]]:
        """Map of tool name -> ordered parameter names (text first)"""
        return {name: list(tool.signature.params) for name, tool in self._tools.items()}

    def execute(self, name: str, args: List[str]) -> str:
        """
        Execute a tool

        Argument problems are reported by the tool itself as an
        ``Error: ...`` string; only an unknown name raises.

        Args:
            name: Tool name
            args: Positional string arguments, text first

        Returns:
            The tool's output text

        Raises:
            UnknownToolError: If the tool is not in the catalog
        """
        tool = self._tools.get(name)
        if tool is None:
            raise UnknownToolError(name)
        return tool.run(args, rng=self._rng)

    def has_tool(self, name: str) -> bool:
        """Check if a tool is registered"""
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def __repr__(self) -> str:
        return f"<ToolRegistry tools={len(self._tools)}>"
