"""
Abstract base class for LLM providers.

All LLM implementations (OpenAI, Claude, Ollama) must implement this
interface, enabling provider-agnostic tag generation in the service layer.
"""

from abc import ABC, abstractmethod


class BaseLLM(ABC):
    """Interface that every LLM provider must implement."""

    @abstractmethod
    async def complete(self, system: str, user_text: str, **kwargs) -> str:
        """Run one system-instructed chat completion.

        Args:
            system: Fixed instruction describing the expected output.
            user_text: The content the instruction applies to.
            **kwargs: Provider-specific options (temperature, max_tokens, etc.).

        Returns:
            The model's text response, or an empty string when the
            provider returned no content.
        """
