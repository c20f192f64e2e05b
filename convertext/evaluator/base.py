"""Evaluator interface shared by the heuristic and delegated strategies."""

from abc import ABC, abstractmethod
from typing import Optional

from ..models import ToolEvaluation


class BaseEvaluator(ABC):
    """
    Decides which catalog tool satisfies a task description.

    The returned tool name is not guaranteed to exist in the registry;
    "custom" means no tool was decided.
    """

    # Backend selector recorded on routine executions
    provider: str = "unknown"

    @abstractmethod
    async def evaluate(
        self,
        text: str,
        task_description: str,
        example_output: Optional[str] = None,
    ) -> ToolEvaluation:
        """
        Select a tool and its arguments.

        Args:
            text: Sample of the text to convert
            task_description: What the user wants done to the text
            example_output: Optional example of the desired result

        Returns:
            ToolEvaluation with tool name, bound arguments and reasoning
        """
        pass
