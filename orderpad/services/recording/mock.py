"""
Mock Audio Recorder

Simulates microphone capture for development.
No audio is captured - the returned URI names a file that is never written.

Author: OrderPad Team
Version: 1.0.0
"""

import logging
import time
from pathlib import Path
from typing import Optional

from orderpad.services.recording.base import BaseAudioRecorder, RecordingPreset

logger = logging.getLogger(__name__)


class MockAudioRecorder(BaseAudioRecorder):
    """Mock backend that always 'records' successfully."""

    def __init__(self, permission_granted: bool = True, output_directory: str = "data/recordings"):
        self.permission_granted = permission_granted
        self.output_directory = Path(output_directory)
        self._preset: Optional[RecordingPreset] = None
        logger.info(f"MockAudioRecorder initialized (permission={'granted' if permission_granted else 'denied'})")

    @property
    def provider_name(self) -> str:
        return "mock"

    async def request_permission(self) -> bool:
        return self.permission_granted

    async def start(self, preset: RecordingPreset) -> None:
        self._preset = preset
        logger.debug(f"Mock recording started ({preset.name})")

    async def stop(self) -> str:
        extension = self._preset.extension if self._preset else ".m4a"
        self._preset = None
        uri = str(self.output_directory / f"recording_{int(time.time() * 1000)}{extension}")
        logger.debug(f"Mock recording stopped: {uri}")
        return uri
