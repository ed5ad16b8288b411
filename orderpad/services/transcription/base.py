"""
Transcription Pipeline Abstract Base Class

Defines the two remote stages every pipeline implements and the one public
operation that chains them:

    process(audio) = extract_order_items(transcribe(audio))

Stages run strictly one after the other with a single attempt each. A
failure in the first stage means the second is never called; retrying is
the caller's decision.

Design Pattern: Strategy Pattern
    - MockTranscriptionPipeline for development (no network)
    - OpenAITranscriptionPipeline for staging/production

Author: OrderPad Team
Version: 1.0.0
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

logger = logging.getLogger(__name__)

# Fixed instruction for the extraction stage
EXTRACTION_SYSTEM_PROMPT = (
    "You are a restaurant order processor. Extract ONLY the meal and drink "
    "requests from the customer transcription. Remove all chatter, greetings, "
    "and unnecessary words. Format as a concise list of meals and drinks "
    "ordered. If no meals or drinks are mentioned, return \"No order\"."
)


def build_extraction_prompt(raw_text: str) -> str:
    """User message for the extraction stage."""
    return f"Extract the meal and drink orders from this transcription:\n\n\"{raw_text}\""


class BaseTranscriptionPipeline(ABC):
    """
    Abstract base class for transcription pipelines.

    Example:
        >>> pipeline = get_transcription_pipeline()
        >>> order_text = await pipeline.process(handle.uri, credential)
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name (e.g. "mock", "openai")."""
        pass

    @abstractmethod
    async def transcribe(self, audio_uri: str, credential: Optional[str]) -> str:
        """
        Turn a recording into raw text.

        Raises:
            MissingCredential: If the provider needs a credential and none was given
            TranscriptionFailed: On any failed request
        """
        pass

    @abstractmethod
    async def extract_order_items(self, raw_text: str, credential: Optional[str]) -> str:
        """
        Reduce raw text to meal and drink items.

        Raises:
            MissingCredential: If the provider needs a credential and none was given
            ExtractionFailed: On any failed request
        """
        pass

    async def process(self, audio_uri: str, credential: Optional[str]) -> str:
        """Transcribe, then extract. Single attempt, no retries."""
        logger.info(f"[{self.provider_name}] Transcribing {audio_uri}")
        raw_text = await self.transcribe(audio_uri, credential)
        logger.info(f"[{self.provider_name}] Transcribed {len(raw_text)} chars, extracting items")
        order_text = await self.extract_order_items(raw_text, credential)
        logger.info(f"[{self.provider_name}] Extracted order text ({len(order_text)} chars)")
        return order_text

    async def health_check(self) -> bool:
        """Check service availability. Pipelines without a cheap availability check report healthy."""
        return True
