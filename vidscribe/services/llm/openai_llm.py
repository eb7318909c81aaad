"""
OpenAI chat-completion provider.

Uses ``openai.AsyncOpenAI``. Like the other providers, SDK exceptions are
mapped to ``ConnectionError`` / ``TimeoutError`` / ``RuntimeError``.
"""

import logging

from openai import APIConnectionError, APITimeoutError, AsyncOpenAI, RateLimitError

from vidscribe.core.config import get_settings
from vidscribe.services.llm.base import BaseLLM

logger = logging.getLogger(__name__)


class OpenAILLM(BaseLLM):
    """OpenAI chat model provider (``gpt-3.5-turbo`` by default)."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        temperature: float | None = None,
        timeout: float | None = None,
        client: AsyncOpenAI | None = None,
    ) -> None:
        settings = get_settings()
        self._model = model or settings.openai_chat_model
        self._temperature = temperature
        self._client = client or AsyncOpenAI(
            api_key=api_key or settings.openai_api_key,
            timeout=timeout or settings.ai_request_timeout,
        )

    async def complete(self, system: str, user_text: str, **kwargs) -> str:
        request: dict = {
            "model": self._model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user_text},
            ],
        }
        temperature = kwargs.get("temperature", self._temperature)
        if temperature is not None:
            request["temperature"] = temperature

        try:
            response = await self._client.chat.completions.create(**request)
        except APITimeoutError as exc:
            logger.warning("OpenAI chat timeout: %s", exc)
            raise TimeoutError(f"OpenAI request timed out: {exc}") from exc
        except (APIConnectionError, RateLimitError) as exc:
            logger.warning("OpenAI chat connection error: %s", exc)
            raise ConnectionError(f"Failed to reach OpenAI: {exc}") from exc
        except Exception as exc:
            logger.error("Unexpected OpenAI chat error: %s", exc)
            raise RuntimeError(f"OpenAI error: {exc}") from exc

        if not response.choices:
            return ""
        return response.choices[0].message.content or ""
