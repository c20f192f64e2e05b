"""Evaluator selection by provider name."""

import logging
from typing import Optional

from ..constants import DELEGATED_PROVIDERS, HEURISTIC_PROVIDERS
from ..llm.base import LLMConfig
from ..protocols import LLMClientProtocol
from ..tools.registry import ToolRegistry
from .base import BaseEvaluator
from .delegated import LLMEvaluator
from .heuristic import HeuristicEvaluator

logger = logging.getLogger(__name__)


def create_evaluator(
    provider: str,
    registry: Optional[ToolRegistry] = None,
    llm_client: Optional[LLMClientProtocol] = None,
    llm_config: Optional[LLMConfig] = None,
    llm_provider: str = "gemini",
) -> BaseEvaluator:
    """
    Build the evaluator for a provider name.

    Args:
        provider: "heuristic" / "mock" for keyword rules, "llm" / "gemini"
            for a reasoning backend
        registry: Tool registry the delegated evaluator describes
        llm_client: Ready client for delegated providers
        llm_config: Used to build a LiteLLMClient when no client is given
        llm_provider: litellm provider name for the built client

    Raises:
        ValueError: Unknown provider, or a delegated provider with neither
            client nor config
    """
    name = (provider or "").lower()

    if name in HEURISTIC_PROVIDERS:
        evaluator = HeuristicEvaluator()
        evaluator.provider = name
        return evaluator

    if name in DELEGATED_PROVIDERS:
        if llm_client is None:
            if llm_config is None:
                raise ValueError(f"Evaluator provider '{provider}' requires an llm configuration")
            from ..llm.litellm_client import LiteLLMClient
            llm_client = LiteLLMClient(config=llm_config, provider_name=llm_provider)
        logger.info(f"Delegated evaluator created: provider={name}")
        return LLMEvaluator(llm_client, registry=registry, provider=name)

    raise ValueError(f"Unknown evaluator provider: {provider}")
