"""
litellm-backed client: one code path for Gemini, OpenAI, Anthropic, Azure
OpenAI and Ollama.
"""

import logging
import os
from typing import Any, Dict, List, Optional

from .base import BaseLLMClient, LLMConfig, LLMResponse, Usage

logger = logging.getLogger(__name__)

# Environment variable holding each provider's key when the config has none
_PROVIDER_ENV_VARS: Dict[str, Optional[str]] = {
    "gemini": "GEMINI_API_KEY",
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
    "azure": "AZURE_OPENAI_API_KEY",
    "ollama": None,
}

_PREFIXED_PROVIDERS = ("gemini", "anthropic", "azure", "ollama")


def build_litellm_model_string(provider: str, model: str) -> str:
    """
    Model string litellm routes on, e.g. ``gemini/gemini-2.0-flash``.

    OpenAI models and unknown providers pass through unchanged.
    """
    provider = provider.lower()
    if provider not in _PREFIXED_PROVIDERS:
        return model
    prefix = f"{provider}/"
    return model if model.startswith(prefix) else prefix + model


class LiteLLMClient(BaseLLMClient):
    """
    Example:
        client = LiteLLMClient(LLMConfig(model="gemini-2.0-flash"), provider_name="gemini")
        response = await client.chat_completion([{"role": "user", "content": "hi"}])
        response.content
    """

    def __init__(
        self,
        config: Optional[LLMConfig] = None,
        provider_name: str = "gemini",
        **overrides,
    ):
        if config is None:
            if "model" not in overrides:
                raise ValueError("model is required")
            config = LLMConfig(**overrides)
            overrides = {}
        super().__init__(config, **overrides)

        self.provider = provider_name.lower()
        self._litellm_model = build_litellm_model_string(self.provider, self.config.model)

        api_key = self.config.api_key
        if not api_key:
            env_var = _PROVIDER_ENV_VARS.get(self.provider)
            api_key = os.environ.get(env_var) if env_var else None

        self._base_kwargs: Dict[str, Any] = {
            "timeout": self.config.timeout,
            "num_retries": self.config.max_retries,
            **self.config.extra,
        }
        if self.config.base_url:
            self._base_kwargs["api_base"] = self.config.base_url
        if api_key:
            self._base_kwargs["api_key"] = api_key

        logger.info(f"[LiteLLM] client ready: provider={self.provider}, model={self._litellm_model}")

    async def _call_api(self, messages: List[Dict[str, Any]], **kwargs) -> LLMResponse:
        import litellm

        model = kwargs.get("model") or self._litellm_model
        response = await litellm.acompletion(
            model=model,
            messages=messages,
            temperature=kwargs.get("temperature", self.config.temperature),
            max_tokens=kwargs.get("max_tokens", self.config.max_tokens),
            **self._base_kwargs,
        )

        choice = response.choices[0]
        truncated = choice.finish_reason in ("length", "max_tokens")
        if truncated:
            logger.warning(f"[LiteLLM] reply from {model} hit max_tokens and was cut off")

        return LLMResponse(
            content=choice.message.content or "",
            usage=self._usage(response, model),
            model=getattr(response, "model", None) or model,
            truncated=truncated,
        )

    def _usage(self, response: Any, model: str) -> Optional[Usage]:
        raw = getattr(response, "usage", None)
        if not raw:
            return None
        usage = Usage(
            prompt_tokens=raw.prompt_tokens,
            completion_tokens=raw.completion_tokens,
            total_tokens=raw.total_tokens,
        )
        if self.config.track_costs:
            import litellm

            try:
                usage.cost = litellm.completion_cost(completion_response=response)
            except Exception as e:
                logger.debug(f"[LiteLLM] no cost data for {model}: {e}")
        return usage
