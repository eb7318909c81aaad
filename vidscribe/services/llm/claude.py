"""
Claude LLM provider implementation.

Uses the Anthropic Python SDK (``anthropic.AsyncAnthropic``) to interact with
the Claude API. SDK exceptions are translated to standard Python exceptions;
no retries beyond the SDK's own defaults.
"""

import logging

from anthropic import (
    APIConnectionError,
    APITimeoutError,
    AsyncAnthropic,
    RateLimitError,
)

from vidscribe.core.config import get_settings
from vidscribe.services.llm.base import BaseLLM

logger = logging.getLogger(__name__)


class ClaudeLLM(BaseLLM):
    """Claude API LLM provider."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        max_tokens: int = 256,
        temperature: float = 0.3,
        timeout: float | None = None,
    ) -> None:
        settings = get_settings()
        self._api_key = api_key or settings.claude_api_key
        self._model = model or settings.claude_model
        self._max_tokens = max_tokens
        self._temperature = temperature
        self._client = AsyncAnthropic(
            api_key=self._api_key,
            timeout=timeout or settings.ai_request_timeout,
        )

    async def complete(self, system: str, user_text: str, **kwargs) -> str:
        """Send one system + user message pair to Claude."""
        try:
            response = await self._client.messages.create(
                model=self._model,
                max_tokens=kwargs.get("max_tokens", self._max_tokens),
                temperature=kwargs.get("temperature", self._temperature),
                system=system,
                messages=[{"role": "user", "content": user_text}],
            )
        except APITimeoutError as exc:
            logger.warning("Claude API timeout: %s", exc)
            raise TimeoutError(f"Claude API request timed out: {exc}") from exc
        except APIConnectionError as exc:
            logger.warning("Claude API connection error: %s", exc)
            raise ConnectionError(f"Failed to connect to Claude API: {exc}") from exc
        except RateLimitError as exc:
            logger.warning("Claude API rate limit hit: %s", exc)
            raise ConnectionError(f"Claude API rate limit exceeded: {exc}") from exc
        except Exception as exc:
            logger.error("Unexpected Claude API error: %s", exc)
            raise RuntimeError(f"Claude API error: {exc}") from exc

        if not response.content:
            return ""
        return getattr(response.content[0], "text", "") or ""
