"""Topical tag generation from a transcription.

The LLM is asked for 3-5 comma-separated tags. The reply is split on
commas and each segment trimmed; empty segments (for example from a
trailing comma) are dropped. The number of tags is not validated.
"""

import logging

from vidscribe.core.exceptions import TaggingError
from vidscribe.core.utils import strip_code_fences
from vidscribe.services.llm.base import BaseLLM

logger = logging.getLogger(__name__)

TAG_INSTRUCTION = (
    "Generate 3-5 relevant tags based on this transcription. "
    "Return only the tags separated by commas."
)


def parse_tags(text: str) -> list[str]:
    """Split a comma-separated model reply into trimmed, non-empty tags.

    >>> parse_tags("music, live, interview,")
    ['music', 'live', 'interview']
    """
    return [segment.strip() for segment in text.split(",") if segment.strip()]


class TagGenerator:
    """Turns transcription text into an ordered list of tags.

    Args:
        llm: Provider used for the completion.
        instruction: System instruction sent with every request.
    """

    def __init__(self, llm: BaseLLM, instruction: str = TAG_INSTRUCTION) -> None:
        self._llm = llm
        self._instruction = instruction

    async def generate(self, transcription: str) -> list[str]:
        """Ask the LLM for tags and parse its reply.

        Raises:
            TaggingError: If the provider fails or returns no usable text.
        """
        try:
            reply = await self._llm.complete(system=self._instruction, user_text=transcription)
        except Exception as exc:
            logger.error("Tag generation call failed: %s", exc)
            raise TaggingError("Failed to generate tags") from exc

        tags = parse_tags(strip_code_fences(reply or ""))
        if not tags:
            raise TaggingError("Failed to generate tags")
        return tags
