"""
Audio Recorder Abstract Base Class

Defines the interface every platform audio backend implements, plus the
small value types the recording session hands out.

A backend only captures audio; it does not track whether a recording is in
progress. That state belongs to RecordingSession, which is the only caller.

Author: OrderPad Team
Version: 1.0.0
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum


class RecordingState(str, Enum):
    """State of the shared recording session."""
    IDLE = "idle"
    RECORDING = "recording"


@dataclass(frozen=True)
class RecordingPreset:
    """
    Capture settings handed to the backend.

    Attributes:
        name: Preset identifier
        sample_rate: Samples per second
        channels: Number of audio channels
        bit_rate: Target bit rate for compressed containers
        extension: File extension the platform uses for this preset
    """
    name: str
    sample_rate: int
    channels: int
    bit_rate: int
    extension: str


HIGH_QUALITY = RecordingPreset(
    name="high_quality",
    sample_rate=44_100,
    channels=2,
    bit_rate=128_000,
    extension=".m4a",
)


def format_duration(seconds: float) -> str:
    """Display form of a duration: ``m:ss``."""
    total = max(0, int(seconds))
    minutes, secs = divmod(total, 60)
    return f"{minutes}:{secs:02d}"


@dataclass(frozen=True)
class AudioHandle:
    """
    A finished recording.

    Attributes:
        uri: Where the platform put the audio; opaque to the order core
        duration_seconds: Wall-clock length of the capture
    """
    uri: str
    duration_seconds: float

    @property
    def duration(self) -> str:
        return format_duration(self.duration_seconds)


class BaseAudioRecorder(ABC):
    """Abstract base class for platform audio backends."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the backend name (e.g. "mock", "microphone")."""
        pass

    @abstractmethod
    async def request_permission(self) -> bool:
        """Return True if audio may be captured."""
        pass

    @abstractmethod
    async def start(self, preset: RecordingPreset) -> None:
        """Begin capturing with the given preset."""
        pass

    @abstractmethod
    async def stop(self) -> str:
        """Finish capturing and return the URI of the recording."""
        pass
