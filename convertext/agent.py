"""
ConverText Conversion Agent - Evaluate a task, run the chosen tool, shape the result

The agent never raises from its public coroutines. An unknown tool becomes
an error-shaped ConversionResult with the registry's message, and any other
failure becomes a confidence-0 result carrying the exception text.
"""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from .constants import ERROR_TOOL, UNRESOLVED_TOOL
from .errors import UnknownToolError
from .evaluator.base import BaseEvaluator
from .evaluator.heuristic import HeuristicEvaluator
from .evaluator.parser import bind_positional_args
from .models import ConversionResult, RenderMode, ToolEvaluation
from .tools.diff import generate_diff
from .tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


class ConversionAgent:
    """
    Drives one conversion: evaluator first, then the registry.

    Example:
        agent = ConversionAgent(HeuristicEvaluator())
        result = await agent.process_request("the quick brown fox", "Capitalize all words")
        result.converted_text   # "The Quick Brown Fox"
    """

    def __init__(
        self,
        evaluator: Optional[BaseEvaluator] = None,
        registry: Optional[ToolRegistry] = None,
    ):
        self.evaluator = evaluator or HeuristicEvaluator()
        self.registry = registry or ToolRegistry.get_instance()

    @property
    def provider(self) -> str:
        return self.evaluator.provider

    async def evaluate_task(
        self,
        text: str,
        task_description: str,
        example_output: Optional[str] = None,
    ) -> ToolEvaluation:
        """Ask the evaluator for a tool; failures become a "custom" evaluation."""
        try:
            return await self.evaluator.evaluate(text, task_description, example_output)
        except Exception as e:
            logger.error(f"[ConversionAgent] Evaluation failed: {e}", exc_info=True)
            return ToolEvaluation(
                reasoning=f"Error occurred: {e}",
                tool=UNRESOLVED_TOOL,
                tool_args=[],
            )

    async def process_request(
        self,
        text: str,
        task_description: str,
        example_output: Optional[str] = None,
        tool_args: Optional[Sequence[str]] = None,
    ) -> ConversionResult:
        """
        Evaluate the task and execute the selected tool.

        Args:
            text: Text to convert
            task_description: What should be done to the text
            example_output: Optional example of the desired result
            tool_args: Argument values (text excluded) used when the
                evaluator supplies none

        Returns:
            ConversionResult; never raises
        """
        _, result = await self.process_with_evaluation(
            text, task_description, example_output, tool_args
        )
        return result

    async def process_with_evaluation(
        self,
        text: str,
        task_description: str,
        example_output: Optional[str] = None,
        tool_args: Optional[Sequence[str]] = None,
    ) -> Tuple[Optional[ToolEvaluation], ConversionResult]:
        """Same as process_request, also returning the evaluation used."""
        evaluation: Optional[ToolEvaluation] = None
        try:
            evaluation = await self.evaluator.evaluate(text, task_description, example_output)
            args = evaluation.arg_values or list(tool_args or [])
            return evaluation, self._run(evaluation.tool, text, args)
        except Exception as e:
            logger.error(f"[ConversionAgent] Conversion failed: {e}", exc_info=True)
            return evaluation, self._error_result(text, str(e))

    async def execute(self, tool_name: str, args: Sequence[str]) -> ConversionResult:
        """
        Execute a tool directly, skipping evaluation.

        Args:
            tool_name: Catalog tool name
            args: Positional arguments, ``args[0]`` is the text
        """
        args = list(args)
        text = args[0] if args else ""
        try:
            return self._run(tool_name, text, args[1:])
        except Exception as e:
            logger.error(f"[ConversionAgent] Execution of {tool_name} failed: {e}", exc_info=True)
            return self._error_result(text, str(e))

    def list_tool_signatures(self) -> Dict[str, List[str]]:
        return self.registry.get_tool_signatures()

    def _run(self, tool_name: str, text: str, args: List[str]) -> ConversionResult:
        try:
            converted = self.registry.execute(tool_name, [text, *args])
        except UnknownToolError as e:
            logger.info(f"[ConversionAgent] {e}")
            return self._error_result(text, str(e))

        signature = self.registry.get_signature(tool_name)
        render_mode = signature.render_mode if signature else RenderMode.DIFF
        arg_params = signature.arg_params if signature else []
        diff = generate_diff(text, converted) if render_mode == RenderMode.DIFF else ""
        return ConversionResult(
            original_text=text,
            converted_text=converted,
            diff=diff,
            tool_used=tool_name,
            confidence=1,
            render_mode=render_mode,
            tool_args=bind_positional_args(arg_params, args),
            error=None,
        )

    @staticmethod
    def _error_result(text: str, message: str) -> ConversionResult:
        return ConversionResult(
            original_text=text,
            converted_text=text,
            diff="",
            tool_used=ERROR_TOOL,
            confidence=0,
            render_mode=RenderMode.DIFF,
            tool_args=[],
            error=message,
        )
