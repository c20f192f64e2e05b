"""
ConverText Evaluator - Decides which tool satisfies a task description

Strategies:
- HeuristicEvaluator: ordered keyword rules, offline and deterministic
- LLMEvaluator: delegates the decision to a reasoning backend

Usage:
    from convertext.evaluator import create_evaluator

    evaluator = create_evaluator("heuristic")
    evaluation = await evaluator.evaluate("a,b\\n1,2", "csv to json")
"""

from .base import BaseEvaluator
from .heuristic import HeuristicEvaluator, KeywordRule, KEYWORD_RULES, select_tool
from .delegated import LLMEvaluator
from .factory import create_evaluator
from .parser import ParsedReply, parse_reply, bind_positional_args

__all__ = [
    "BaseEvaluator",
    "HeuristicEvaluator",
    "KeywordRule",
    "KEYWORD_RULES",
    "select_tool",
    "LLMEvaluator",
    "create_evaluator",
    "ParsedReply",
    "parse_reply",
    "bind_positional_args",
]
