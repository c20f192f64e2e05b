"""
ConverText Models - Evaluation and conversion result data structures

These are the values that flow between the evaluator, the conversion agent
and the routine state machine. All of them serialize to plain dicts so they
can be stored as JSON and returned from the API unchanged.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class RenderMode(str, Enum):
    """How a tool result should be displayed"""
    DIFF = "diff"          # Show a diff between original and converted text
    OUTPUT = "output"      # Show the converted text on its own


@dataclass
class ToolArg:
    """A named argument value bound to a tool parameter"""
    name: str
    value: str

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "value": self.value}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ToolArg":
        return cls(name=str(data.get("name", "")), value=str(data.get("value", "")))


@dataclass
class ToolEvaluation:
    """
    Decision of which tool (and arguments) satisfies a task description.

    Attributes:
        reasoning: Free-text explanation from the evaluator
        tool: Selected tool name (may be "custom" when no tool was decided)
        tool_args: Arguments bound to the tool's parameters, text excluded
    """
    reasoning: str
    tool: str
    tool_args: List[ToolArg] = field(default_factory=list)

    @property
    def arg_values(self) -> List[str]:
        return [arg.value for arg in self.tool_args]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "reasoning": self.reasoning,
            "tool": self.tool,
            "tool_args": [arg.to_dict() for arg in self.tool_args],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ToolEvaluation":
        return cls(
            reasoning=data.get("reasoning", ""),
            tool=data.get("tool", ""),
            tool_args=[ToolArg.from_dict(a) for a in data.get("tool_args") or []],
        )


@dataclass
class ConversionResult:
    """
    Outcome of running one conversion.

    ``confidence`` is binary: 0 when ``error`` is set, 1 otherwise. A tool
    that rejects its own arguments still produces confidence 1; its message
    is the converted text.
    """
    original_text: str
    converted_text: str
    diff: str = ""
    tool_used: str = ""
    confidence: int = 1
    render_mode: RenderMode = RenderMode.DIFF
    tool_args: List[ToolArg] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "original_text": self.original_text,
            "converted_text": self.converted_text,
            "diff": self.diff,
            "tool_used": self.tool_used,
            "confidence": self.confidence,
            "render_mode": self.render_mode.value,
            "tool_args": [arg.to_dict() for arg in self.tool_args],
        }
        if self.error is not None:
            data["error"] = self.error
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConversionResult":
        return cls(
            original_text=data.get("original_text", ""),
            converted_text=data.get("converted_text", ""),
            diff=data.get("diff", ""),
            tool_used=data.get("tool_used", ""),
            confidence=int(data.get("confidence", 0)),
            render_mode=RenderMode(data.get("render_mode", RenderMode.DIFF.value)),
            tool_args=[ToolArg.from_dict(a) for a in data.get("tool_args") or []],
            error=data.get("error"),
        )
