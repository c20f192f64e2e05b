"""
Heuristic evaluator - offline keyword rules over the task description.

Rules are checked in order and the first match wins, so more specific
phrases must come before the general ones they contain. No arguments are
produced; tools that need them get the caller-supplied args at execution
time.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from ..constants import DEFAULT_HEURISTIC_TOOL, PROVIDER_HEURISTIC
from ..models import ToolEvaluation
from .base import BaseEvaluator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KeywordRule:
    """
    Matches when any of ``any_of`` (if given) and all of ``all_of`` occur
    in the lower-cased task description.
    """
    tool: str
    any_of: Tuple[str, ...] = ()
    all_of: Tuple[str, ...] = ()

    def matches(self, task: str) -> bool:
        if self.any_of and not any(k in task for k in self.any_of):
            return False
        return all(k in task for k in self.all_of)


KEYWORD_RULES: Tuple[KeywordRule, ...] = (
    KeywordRule("toUppercase", any_of=("uppercase", "upper case")),
    KeywordRule("toLowercase", any_of=("lowercase", "lower case")),
    KeywordRule("capitalize", any_of=("capitalize", "title case")),
    KeywordRule("removeDuplicates", any_of=("duplicate", "unique")),
    KeywordRule("countWords", any_of=("word count", "count words")),
    KeywordRule("countLines", any_of=("line count", "count lines")),
    KeywordRule("jsonToCsv", any_of=("json to csv",)),
    KeywordRule("csvToJson", all_of=("csv", "json")),
    KeywordRule("extractEmails", any_of=("email",)),
    KeywordRule("formatPhoneNumbers", any_of=("phone",)),
    KeywordRule("convertEuropeanNumbers", all_of=("european", "number")),
    KeywordRule("splitBySentences", any_of=("sentence",)),
    KeywordRule("searchAndReplace", any_of=("replace", "substitute")),
    KeywordRule("removeCsvColumns", all_of=("remove", "column")),
    KeywordRule("generateLoremIpsum", any_of=("lorem",)),
    KeywordRule("generateRandomWords", any_of=("random word",)),
    KeywordRule("generateRandomLetters", any_of=("random letter",)),
    KeywordRule("removeEmptyLines", any_of=("empty line", "blank line")),
    KeywordRule("splitByParagraphs", any_of=("paragraph",)),
    KeywordRule("extractUrls", any_of=("url", "link")),
    KeywordRule("extractByPattern", any_of=("regex", "pattern")),
    KeywordRule("extractNumbers", all_of=("extract", "number")),
    KeywordRule("textStatistics", any_of=("statistic", "stats")),
    KeywordRule("wordFrequency", any_of=("frequen",)),
    KeywordRule("countCharacters", any_of=("count char", "character count")),
    KeywordRule("repeatText", any_of=("repeat",)),
    KeywordRule("shuffleWords", all_of=("shuffle", "word")),
    KeywordRule("shuffleLines", any_of=("shuffle",)),
    KeywordRule("randomizeCase", any_of=("random case", "randomize case")),
    KeywordRule("sortLines", any_of=("sort",)),
    KeywordRule("trimWhitespace", any_of=("trim", "whitespace")),
)


def select_tool(task_description: str) -> str:
    """First matching rule's tool, or the word-count fallback."""
    task = (task_description or "").lower()
    for rule in KEYWORD_RULES:
        if rule.matches(task):
            return rule.tool
    return DEFAULT_HEURISTIC_TOOL


class HeuristicEvaluator(BaseEvaluator):
    """Deterministic keyword evaluator, used offline and in tests"""

    provider = PROVIDER_HEURISTIC

    async def evaluate(
        self,
        text: str,
        task_description: str,
        example_output: Optional[str] = None,
    ) -> ToolEvaluation:
        tool = select_tool(task_description)
        logger.debug(f"[HeuristicEvaluator] '{task_description}' -> {tool}")
        return ToolEvaluation(
            reasoning=(
                f'Based on the task description "{task_description}", '
                f"the most appropriate tool is {tool}."
            ),
            tool=tool,
            tool_args=[],
        )
