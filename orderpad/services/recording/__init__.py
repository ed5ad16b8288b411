"""
Recording Session Factory

Returns the process-wide RecordingSession, backed by the mock recorder in
development and the microphone otherwise. The cached instance is the single
active-recording token for the process.

Author: OrderPad Team
Version: 1.0.0
"""

import logging
from functools import lru_cache

from orderpad.core.config import get_settings
from orderpad.services.recording.base import (
    AudioHandle,
    BaseAudioRecorder,
    HIGH_QUALITY,
    RecordingPreset,
    RecordingState,
    format_duration,
)
from orderpad.services.recording.mock import MockAudioRecorder
from orderpad.services.recording.session import RecordingSession

logger = logging.getLogger(__name__)


@lru_cache()
def get_recording_session() -> RecordingSession:
    """Get the shared recording session."""
    settings = get_settings()

    if settings.is_development:
        logger.info("Recording: Using MockAudioRecorder (development mode)")
        recorder: BaseAudioRecorder = MockAudioRecorder(output_directory=settings.recordings_directory)
    else:
        from orderpad.services.recording.microphone import MicrophoneRecorder

        logger.info(f"Recording: Using MicrophoneRecorder ({settings.env_mode.value} mode)")
        recorder = MicrophoneRecorder(output_directory=settings.recordings_directory)

    return RecordingSession(recorder)


def reset_recording_session() -> None:
    """Clear the cached session instance."""
    get_recording_session.cache_clear()


__all__ = [
    "get_recording_session",
    "reset_recording_session",
    "RecordingSession",
    "RecordingState",
    "RecordingPreset",
    "HIGH_QUALITY",
    "AudioHandle",
    "BaseAudioRecorder",
    "MockAudioRecorder",
    "format_duration",
]
