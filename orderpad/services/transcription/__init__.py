"""
Transcription Pipeline Factory

Returns the Mock or OpenAI pipeline based on ENV_MODE.

Usage:
    from orderpad.services.transcription import get_transcription_pipeline

    pipeline = get_transcription_pipeline()
    order_text = await pipeline.process(audio_uri, credential)

Environment Switching:
    - ENV_MODE=development -> MockTranscriptionPipeline (no API calls)
    - ENV_MODE=staging/production -> OpenAITranscriptionPipeline

Author: OrderPad Team
Version: 1.0.0
"""

import logging
from functools import lru_cache

from orderpad.core.config import get_settings
from orderpad.services.transcription.base import (
    BaseTranscriptionPipeline,
    EXTRACTION_SYSTEM_PROMPT,
)
from orderpad.services.transcription.mock import MockTranscriptionPipeline
from orderpad.services.transcription.openai_pipeline import OpenAITranscriptionPipeline
from orderpad.services.transcription.text import (
    NO_ORDER,
    deduplicate_lines,
    mask_credential,
    validate_credential,
)

logger = logging.getLogger(__name__)


@lru_cache()
def get_transcription_pipeline() -> BaseTranscriptionPipeline:
    """Get the configured transcription pipeline."""
    settings = get_settings()

    if settings.is_development:
        logger.info("Transcription Pipeline: Using MockTranscriptionPipeline (development mode)")
        return MockTranscriptionPipeline(latency=settings.mock_latency_seconds)
    else:
        logger.info(
            f"Transcription Pipeline: Using OpenAITranscriptionPipeline ({settings.env_mode.value} mode)"
        )
        return OpenAITranscriptionPipeline()


def reset_transcription_pipeline() -> None:
    """Clear the cached pipeline instance."""
    get_transcription_pipeline.cache_clear()


__all__ = [
    "get_transcription_pipeline",
    "reset_transcription_pipeline",
    "BaseTranscriptionPipeline",
    "MockTranscriptionPipeline",
    "OpenAITranscriptionPipeline",
    "EXTRACTION_SYSTEM_PROMPT",
    "NO_ORDER",
    "deduplicate_lines",
    "mask_credential",
    "validate_credential",
]
