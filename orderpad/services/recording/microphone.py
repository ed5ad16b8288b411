"""
Microphone Audio Recorder Implementation

Production backend capturing from the default input device with
sounddevice and writing a WAV file with soundfile when the recording stops.
Used when ENV_MODE=production or ENV_MODE=staging.

Requirements:
    - pip install "orderpad[audio]" (sounddevice, soundfile, numpy)
    - A PortAudio-capable input device

Author: OrderPad Team
Version: 1.0.0
"""

import asyncio
import logging
import threading
import time
from pathlib import Path
from typing import Any, List, Optional

from orderpad.core.exceptions import PermissionDenied
from orderpad.services.recording.base import BaseAudioRecorder, RecordingPreset

logger = logging.getLogger(__name__)


def load_audio_backend() -> tuple[Any, Any, Any]:
    """Import numpy, sounddevice and soundfile, or explain how to install them."""
    try:
        import numpy as np
        import sounddevice as sd
        import soundfile as sf
    except ImportError as exc:  # pragma: no cover - dependency hint
        raise ImportError(
            "sounddevice, soundfile and numpy are required for MicrophoneRecorder; "
            "install them with: pip install 'orderpad[audio]'"
        ) from exc
    return np, sd, sf


class MicrophoneRecorder(BaseAudioRecorder):
    """Capture audio until stop(), buffering samples from the stream callback."""

    def __init__(self, output_directory: str = "data/recordings", dtype: str = "float32"):
        self._np, self._sd, self._sf = load_audio_backend()
        self.output_directory = Path(output_directory)
        self.dtype = dtype
        self._stream: Optional[Any] = None
        self._preset: Optional[RecordingPreset] = None
        self._buffer: List[Any] = []
        self._lock = threading.Lock()
        logger.info(f"MicrophoneRecorder initialized (output={self.output_directory})")

    @property
    def provider_name(self) -> str:
        return "microphone"

    async def request_permission(self) -> bool:
        """Granted when the platform exposes a default input device."""
        try:
            await asyncio.to_thread(self._sd.query_devices, kind="input")
        except (self._sd.PortAudioError, ValueError) as e:
            logger.warning(f"No usable input device: {e}")
            return False
        return True

    async def start(self, preset: RecordingPreset) -> None:
        """
        Open and start the input stream.

        Raises:
            PermissionDenied: If the device cannot be opened; nothing stays open
        """
        self._buffer = []
        stream = None
        try:
            stream = self._sd.InputStream(
                samplerate=preset.sample_rate,
                channels=preset.channels,
                dtype=self.dtype,
                callback=self._callback,
            )
            stream.start()
        except self._sd.PortAudioError as e:
            if stream is not None:
                stream.close()
            logger.error(f"Could not open input device: {e}")
            raise PermissionDenied(f"Could not open input device: {e}") from e

        self._stream = stream
        self._preset = preset

    async def stop(self) -> str:
        stream, preset = self._stream, self._preset
        self._stream = None
        self._preset = None
        try:
            stream.stop()
        finally:
            stream.close()

        with self._lock:
            chunks, self._buffer = self._buffer, []

        if chunks:
            audio = self._np.concatenate(chunks, axis=0)
        else:
            audio = self._np.empty((0, preset.channels), dtype=self.dtype)

        path = self.output_directory / f"recording_{int(time.time() * 1000)}.wav"
        await asyncio.to_thread(self._write_wav, path, audio, preset.sample_rate)
        return str(path)

    def _write_wav(self, path: Path, audio: Any, sample_rate: int) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        self._sf.write(file=path, data=audio, samplerate=sample_rate, format="WAV", subtype="PCM_16")

    def _callback(self, indata, frames: int, time_info, status) -> None:
        if status:
            logger.warning(f"Input stream status: {status}")
        with self._lock:
            self._buffer.append(indata.copy())
