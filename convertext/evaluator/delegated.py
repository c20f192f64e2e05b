"""
Delegated evaluator - asks a reasoning backend which tool to use.

The backend sees the tool catalog, the task and a sample of the text and
answers in the line grammar described in ``parser``. Any backend failure is
turned into an unresolved ("custom") evaluation instead of propagating.
"""

import logging
from typing import Any, Dict, Optional

from ..constants import PROVIDER_LLM, UNRESOLVED_TOOL
from ..models import ToolEvaluation
from ..protocols import LLMClientProtocol
from ..tools.registry import ToolRegistry
from .base import BaseEvaluator
from .parser import bind_positional_args, parse_reply
from .prompts import EVALUATOR_SYSTEM_PROMPT, build_evaluation_prompt

logger = logging.getLogger(__name__)


class LLMEvaluator(BaseEvaluator):
    """
    Evaluator backed by an LLM client.

    Example:
        from convertext.llm import LiteLLMClient

        client = LiteLLMClient(model="gemini-2.0-flash", provider_name="gemini")
        evaluator = LLMEvaluator(client)
        evaluation = await evaluator.evaluate(text, "remove the email column")
    """

    provider = PROVIDER_LLM

    def __init__(
        self,
        llm_client: LLMClientProtocol,
        registry: Optional[ToolRegistry] = None,
        provider: Optional[str] = None,
        completion_config: Optional[Dict[str, Any]] = None,
    ):
        self.llm_client = llm_client
        self.registry = registry or ToolRegistry.get_instance()
        if provider:
            self.provider = provider
        self.completion_config = completion_config or {"temperature": 0.0}

    async def evaluate(
        self,
        text: str,
        task_description: str,
        example_output: Optional[str] = None,
    ) -> ToolEvaluation:
        messages = [
            {"role": "system", "content": EVALUATOR_SYSTEM_PROMPT},
            {
                "role": "user",
                "content": build_evaluation_prompt(
                    self.registry.list_tools(), text, task_description, example_output
                ),
            },
        ]
        try:
            response = await self.llm_client.chat_completion(
                messages=messages,
                config=self.completion_config,
            )
        except Exception as e:
            logger.error(f"[LLMEvaluator] Backend call failed: {e}")
            return ToolEvaluation(
                reasoning=f"Error occurred: {e}",
                tool=UNRESOLVED_TOOL,
                tool_args=[],
            )

        reply = parse_reply(getattr(response, "content", None) or "")
        signature = self.registry.get_signature(reply.tool)
        if signature is None:
            # Unknown or "custom": nothing to bind against
            logger.info(f"[LLMEvaluator] Backend chose unknown tool '{reply.tool}'")
            tool_args = []
        else:
            tool_args = bind_positional_args(signature.arg_params, reply.values)

        usage = getattr(response, "usage", None)
        spent = f" ({usage.describe()})" if usage is not None else ""
        logger.info(f"[LLMEvaluator] '{task_description}' -> {reply.tool}{spent}")
        return ToolEvaluation(
            reasoning=reply.reasoning,
            tool=reply.tool,
            tool_args=tool_args,
        )
