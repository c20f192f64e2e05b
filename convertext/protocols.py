"""
ConverText Protocols - Abstract interfaces for dependency injection

The reasoning backend is an external collaborator. Any object with a
compatible ``chat_completion`` coroutine can drive the delegated evaluator.
"""

from typing import Protocol, List, Dict, Any, Optional, runtime_checkable


@runtime_checkable
class LLMClientProtocol(Protocol):
    """
    Abstract interface for reasoning backends

    Example:
        class MyLLMClient:
            async def chat_completion(
                self,
                messages: List[Dict[str, Any]],
                tools: Optional[List[Dict]] = None,
                config: Optional[Dict] = None
            ) -> Any:
                text = await my_backend.complete(messages[-1]["content"])
                return SimpleNamespace(content=text)
    """

    async def chat_completion(
        self,
        messages: List[Dict[str, Any]],
        tools: Optional[List[Dict]] = None,
        config: Optional[Dict[str, Any]] = None
    ) -> Any:
        """
        Call the backend for a chat completion

        Args:
            messages: List of message dicts with 'role' and 'content'
            tools: Unused by ConverText, kept for client compatibility
            config: Optional configuration (temperature, max_tokens, etc.)

        Returns:
            Response object exposing the reply text as ``.content``
        """
        ...
