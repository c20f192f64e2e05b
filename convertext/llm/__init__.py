"""
ConverText LLM Client - Reasoning backend for the delegated evaluator

Provides a single LiteLLMClient that reaches any litellm provider
(Gemini, OpenAI, Anthropic, Azure OpenAI, Ollama).

Usage:
    from convertext.llm import LiteLLMClient, LLMConfig

    config = LLMConfig(model="gemini-2.0-flash", api_key="xxx")
    client = LiteLLMClient(config=config, provider_name="gemini")
    response = await client.chat_completion(messages=[...])
"""

from .base import BaseLLMClient, LLMConfig, LLMResponse, Usage
from .litellm_client import LiteLLMClient, build_litellm_model_string

__all__ = [
    "BaseLLMClient",
    "LLMConfig",
    "LLMResponse",
    "Usage",
    "LiteLLMClient",
    "build_litellm_model_string",
]
