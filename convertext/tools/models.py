"""
ConverText Tool Models - Catalog entry data structures
"""

import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..constants import TEXT_PARAM
from ..models import RenderMode


class ToolCategory(str, Enum):
    """Grouping of catalog tools, used for listing only"""
    CASE = "case"
    LINES = "lines"
    STATISTICS = "statistics"
    CSV_JSON = "csv_json"
    PATTERNS = "patterns"
    SEGMENTATION = "segmentation"
    RANDOM = "random"
    GENERATOR = "generator"


@dataclass(frozen=True)
class ToolSignature:
    """
    Public description of a catalog tool

    Attributes:
        name: Tool name used for dispatch (e.g. "csvToJson")
        description: One-line description shown to the reasoning backend
        render_mode: Authoritative display strategy for the tool's result
        params: Ordered parameter names, always starting with "text"
        category: Catalog grouping
    """
    name: str
    description: str
    render_mode: RenderMode
    params: Tuple[str, ...] = (TEXT_PARAM,)
    category: ToolCategory = ToolCategory.LINES

    @property
    def arg_params(self) -> List[str]:
        """Parameter names the caller must supply besides the text"""
        return [p for p in self.params if p != TEXT_PARAM]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "render_mode": self.render_mode.value,
            "params": list(self.params),
            "category": self.category.value,
        }


@dataclass
class TextTool:
    """
    A catalog tool: its signature plus the pure function that implements it.

    Calling the instance calls the function directly, so decorated tools
    stay usable as plain functions.
    """
    signature: ToolSignature
    func: Callable[..., str]
    uses_rng: bool = False

    @property
    def name(self) -> str:
        return self.signature.name

    def run(self, args: List[str], rng: Optional[random.Random] = None) -> str:
        """
        Run the tool with positional string arguments (text first).

        Missing trailing arguments become "" and surplus ones are dropped,
        so every tool sees exactly its declared parameters.
        """
        arity = len(self.signature.params)
        bound = [str(a) if a is not None else "" for a in list(args)[:arity]]
        bound.extend([""] * (arity - len(bound)))
        if self.uses_rng:
            return self.func(*bound, rng=rng or random.Random())
        return self.func(*bound)

    def __call__(self, *args: Any, **kwargs: Any) -> str:
        return self.func(*args, **kwargs)
