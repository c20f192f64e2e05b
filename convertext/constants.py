"""
Shared constants for ConverText.

Centralizes sentinel names and messages that are needed by the evaluator,
the conversion agent and the routine manager.
"""

from typing import Tuple

# ── Sentinel tool names ──

# Returned by an evaluator that could not decide on a tool.
UNRESOLVED_TOOL = "custom"

# ``tool_used`` of a result whose tool could not be executed.
ERROR_TOOL = "error"

# Heuristic fallback when no rule matches.
DEFAULT_HEURISTIC_TOOL = "countWords"

# Name of the implicit first parameter of every tool.
TEXT_PARAM = "text"

# ── Evaluator providers ──

PROVIDER_HEURISTIC = "heuristic"
PROVIDER_MOCK = "mock"
PROVIDER_LLM = "llm"
PROVIDER_GEMINI = "gemini"

HEURISTIC_PROVIDERS: Tuple[str, ...] = (PROVIDER_HEURISTIC, PROVIDER_MOCK)
DELEGATED_PROVIDERS: Tuple[str, ...] = (PROVIDER_LLM, PROVIDER_GEMINI)

# ── Defaults ──

DEFAULT_ROUTINE_NAME = "ConverText"
DEFAULT_OWNER_ID = "default"

# Executions kept in memory by one RoutineManager before the least recently
# touched idle ones are dropped.
DEFAULT_MAX_EXECUTIONS = 1000

# Characters of the input sample included in the delegated prompt.
PROMPT_SAMPLE_CHARS = 500
