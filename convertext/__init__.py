"""
ConverText - Natural-language text conversion with replayable routines

Describe a transformation in plain words; ConverText picks one tool from a
fixed catalog of text operations, runs it, and records the result as a step
of a routine that can be saved and replayed.

Quick Start:
    from convertext import ConverText

    app = ConverText()
    result = await app.process_request("the quick brown fox", "Capitalize all words")
    print(result.converted_text)    # The Quick Brown Fox

Lower-level pieces:
    from convertext import ConversionAgent, ToolRegistry
    from convertext.evaluator import HeuristicEvaluator

    agent = ConversionAgent(HeuristicEvaluator(), ToolRegistry.get_instance())
    result = await agent.execute("repeatText", ["ab", "3"])
"""

__version__ = "0.1.0"

from .models import RenderMode, ToolArg, ToolEvaluation, ConversionResult
from .errors import (
    ConverTextError,
    UnknownToolError,
    RoutineError,
    RoutineNotFoundError,
    StepNotFoundError,
    StepTransitionError,
    TemplateNotFoundError,
    PersistenceError,
)
from .tools import ToolRegistry, ToolSignature, text_tool, generate_diff
from .agent import ConversionAgent
from .app import ConverText

__all__ = [
    "__version__",
    # Models
    "RenderMode",
    "ToolArg",
    "ToolEvaluation",
    "ConversionResult",
    # Errors
    "ConverTextError",
    "UnknownToolError",
    "RoutineError",
    "RoutineNotFoundError",
    "StepNotFoundError",
    "StepTransitionError",
    "TemplateNotFoundError",
    "PersistenceError",
    # Tools
    "ToolRegistry",
    "ToolSignature",
    "text_tool",
    "generate_diff",
    # Pipeline
    "ConversionAgent",
    "ConverText",
]
