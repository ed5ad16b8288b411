"""
Recording Session

Wraps a platform audio backend in a two-call protocol:

    idle --start()--> recording --stop()--> idle

There is one session per process (see get_recording_session). start() and
stop() are serialized by a lock and check the state before moving it, so a
second start() while recording fails instead of replacing the first capture.

Author: OrderPad Team
Version: 1.0.0
"""

import asyncio
import logging
import time
from typing import Optional

from orderpad.core.exceptions import AlreadyRecording, NoActiveSession, PermissionDenied
from orderpad.services.recording.base import (
    AudioHandle,
    BaseAudioRecorder,
    HIGH_QUALITY,
    RecordingPreset,
    RecordingState,
)

logger = logging.getLogger(__name__)


class RecordingSession:
    """
    The active-recording token.

    Example:
        >>> session = get_recording_session()
        >>> await session.start()
        >>> handle = await session.stop()
        >>> handle.uri, handle.duration
        ('data/recordings/recording_1729320000000.wav', '0:15')
    """

    def __init__(self, recorder: BaseAudioRecorder, preset: RecordingPreset = HIGH_QUALITY):
        self.recorder = recorder
        self.preset = preset
        self._state = RecordingState.IDLE
        self._started_at: Optional[float] = None
        self._lock = asyncio.Lock()

    @property
    def state(self) -> RecordingState:
        return self._state

    @property
    def is_recording(self) -> bool:
        return self._state == RecordingState.RECORDING

    @property
    def elapsed_seconds(self) -> Optional[float]:
        """Seconds since start(), or None when idle."""
        if self._started_at is None:
            return None
        return time.monotonic() - self._started_at

    async def request_permission(self) -> bool:
        """False means the caller must not attempt to record."""
        return await self.recorder.request_permission()

    async def start(self) -> None:
        """
        Begin a recording.

        Raises:
            AlreadyRecording: If a recording is in progress (it keeps running)
            PermissionDenied: If the platform refuses microphone access
        """
        async with self._lock:
            if self._state == RecordingState.RECORDING:
                raise AlreadyRecording()

            if not await self.recorder.request_permission():
                logger.warning("Recording refused: microphone permission not granted")
                raise PermissionDenied()

            await self.recorder.start(self.preset)
            self._state = RecordingState.RECORDING
            self._started_at = time.monotonic()
            logger.info(f"Recording started ({self.recorder.provider_name}, {self.preset.name})")

    async def stop(self) -> AudioHandle:
        """
        Finish the recording and return its handle.

        The session is back to idle afterwards even if the backend fails to
        finalize the file.

        Raises:
            NoActiveSession: If nothing is being recorded
        """
        async with self._lock:
            if self._state != RecordingState.RECORDING:
                raise NoActiveSession()

            started_at = self._started_at
            try:
                uri = await self.recorder.stop()
            finally:
                self._state = RecordingState.IDLE
                self._started_at = None

            duration = time.monotonic() - started_at if started_at is not None else 0.0
            handle = AudioHandle(uri=uri, duration_seconds=duration)
            logger.info(f"Recording stopped: {uri} ({handle.duration})")
            return handle
