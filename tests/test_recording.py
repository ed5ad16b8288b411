import asyncio

import pytest

from orderpad.core.exceptions import AlreadyRecording, NoActiveSession, PermissionDenied
from orderpad.services.recording import microphone
from orderpad.services.recording import (
    HIGH_QUALITY,
    MockAudioRecorder,
    RecordingSession,
    RecordingState,
)


class BrokenRecorder(MockAudioRecorder):
    """Starts fine, fails to finalize."""

    async def stop(self) -> str:
        raise OSError("disk full")


@pytest.fixture
def session(tmp_path):
    return RecordingSession(MockAudioRecorder(output_directory=str(tmp_path)))


async def test_start_then_stop_returns_handle(session, tmp_path):
    await session.start()
    assert session.state == RecordingState.RECORDING
    assert session.elapsed_seconds is not None

    handle = await session.stop()

    assert session.state == RecordingState.IDLE
    assert session.elapsed_seconds is None
    assert handle.uri.startswith(str(tmp_path))
    assert handle.uri.endswith(HIGH_QUALITY.extension)
    assert handle.duration == "0:00"


async def test_second_start_is_rejected_and_first_recording_continues(session):
    await session.start()

    with pytest.raises(AlreadyRecording):
        await session.start()

    assert session.is_recording
    await session.stop()


async def test_concurrent_starts_only_one_wins(session):
    results = await asyncio.gather(session.start(), session.start(), return_exceptions=True)

    assert results.count(None) == 1
    assert sum(isinstance(r, AlreadyRecording) for r in results) == 1
    assert session.is_recording


async def test_stop_when_idle_raises(session):
    with pytest.raises(NoActiveSession):
        await session.stop()


async def test_stop_twice_raises_on_second_call(session):
    await session.start()
    await session.stop()

    with pytest.raises(NoActiveSession):
        await session.stop()


async def test_permission_denied_leaves_session_idle(tmp_path):
    session = RecordingSession(MockAudioRecorder(permission_granted=False, output_directory=str(tmp_path)))

    assert await session.request_permission() is False
    with pytest.raises(PermissionDenied):
        await session.start()

    assert session.state == RecordingState.IDLE


async def test_backend_failure_on_stop_still_returns_to_idle(tmp_path):
    session = RecordingSession(BrokenRecorder(output_directory=str(tmp_path)))
    await session.start()

    with pytest.raises(OSError):
        await session.stop()

    assert session.state == RecordingState.IDLE
    await session.start()
    assert session.is_recording


class FakePortAudio:
    """Stands in for sounddevice with an input device that fails to start."""

    class PortAudioError(Exception):
        pass

    def __init__(self):
        self.streams = []

    def query_devices(self, kind=None):
        return {"name": "Built-in Microphone", "max_input_channels": 1}

    def InputStream(self, **kwargs):
        stream = FailingStream(self.PortAudioError)
        self.streams.append(stream)
        return stream


class FailingStream:
    def __init__(self, error):
        self.error = error
        self.closed = False

    def start(self):
        raise self.error("Device unavailable [PaErrorCode -9985]")

    def close(self):
        self.closed = True


@pytest.fixture
def portaudio(monkeypatch):
    fake = FakePortAudio()
    monkeypatch.setattr(microphone, "load_audio_backend", lambda: (None, fake, None))
    return fake


async def test_microphone_start_failure_closes_stream(portaudio, tmp_path):
    recorder = microphone.MicrophoneRecorder(output_directory=str(tmp_path))

    with pytest.raises(PermissionDenied):
        await recorder.start(HIGH_QUALITY)

    assert [s.closed for s in portaudio.streams] == [True]


async def test_session_stays_idle_when_device_cannot_open(portaudio, tmp_path):
    session = RecordingSession(microphone.MicrophoneRecorder(output_directory=str(tmp_path)))

    with pytest.raises(PermissionDenied):
        await session.start()

    assert session.state == RecordingState.IDLE
    assert session.elapsed_seconds is None
