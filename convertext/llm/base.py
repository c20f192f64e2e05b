"""
Reasoning backend client base.

The delegated evaluator needs one thing from a backend: the reply text for a
short system + user exchange. Clients report token usage alongside so the
evaluator can log what each decision cost.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class LLMConfig:
    """
    Backend settings, usually the ``llm`` section of the config file.

    Attributes:
        api_key: Provider API key; clients may fall back to the environment
        model: Model name without provider prefix (e.g. "gemini-2.0-flash")
        base_url: Endpoint override for self-hosted or proxied models
        temperature: Sampling temperature; tool selection wants 0
        max_tokens: Reply budget; a tool decision is a few lines
        timeout: Per-request timeout in seconds
        max_retries: Retries handed to the provider library
        track_costs: Look up the USD cost of each call
        extra: Provider-specific keyword arguments passed through untouched
    """
    api_key: Optional[str] = None
    model: str = "gemini-2.0-flash"
    base_url: Optional[str] = None
    temperature: float = 0.0
    max_tokens: int = 512
    timeout: int = 30
    max_retries: int = 2
    track_costs: bool = True
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LLMConfig":
        """Build from the ``llm`` config section; unknown keys land in ``extra``."""
        known = {
            "api_key", "model", "base_url", "temperature", "max_tokens",
            "timeout", "max_retries", "track_costs",
        }
        kwargs = {k: v for k, v in data.items() if k in known and v is not None}
        extra = {k: v for k, v in data.items() if k not in known and k != "provider"}
        return cls(extra=extra, **kwargs)


@dataclass
class Usage:
    """Tokens spent by one call, and its cost in USD when known"""
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
    cost: Optional[float] = None

    def describe(self) -> str:
        text = f"tokens={self.total_tokens}"
        if self.cost is not None:
            text += f", cost=${self.cost:.6f}"
        return text


@dataclass
class LLMResponse:
    """Reply text plus usage; ``content`` is all the evaluator parses"""
    content: str
    usage: Optional[Usage] = None
    model: Optional[str] = None
    truncated: bool = False


class BaseLLMClient(ABC):
    """
    Base for backend clients; satisfies LLMClientProtocol.

    Subclasses implement ``_call_api``. ``chat_completion`` folds the
    per-call ``config`` overrides into the keyword arguments first.
    """

    provider: str = "unknown"

    def __init__(self, config: Optional[LLMConfig] = None, **overrides):
        if config is None:
            config = LLMConfig(**overrides)
        else:
            for key, value in overrides.items():
                if hasattr(config, key):
                    setattr(config, key, value)
        self.config = config

    @abstractmethod
    async def _call_api(self, messages: List[Dict[str, Any]], **kwargs) -> LLMResponse:
        """Send ``messages`` to the provider and return its reply."""

    async def chat_completion(
        self,
        messages: List[Dict[str, Any]],
        tools: Optional[List[Dict[str, Any]]] = None,
        config: Optional[Dict[str, Any]] = None,
        **kwargs,
    ) -> LLMResponse:
        """
        Args:
            messages: Chat messages with 'role' and 'content'
            tools: Ignored; the catalog is described in the prompt
            config: Per-call overrides such as temperature or max_tokens
        """
        params = {**kwargs, **(config or {})}
        return await self._call_api(messages, **params)
