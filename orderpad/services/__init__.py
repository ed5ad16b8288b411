"""
                        Services Module

External collaborators of the order core, each with the hybrid architecture
pattern: a Mock (development) and a Real (production) implementation behind
an abstract base class, selected by a cached factory.

Services:
    - transcription: speech-to-text + order extraction (OpenAI)
    - recording: microphone capture and the shared recording session
    - credentials: API key storage
"""

from orderpad.services.credentials import get_credential_store, resolve_credential
from orderpad.services.recording import get_recording_session
from orderpad.services.transcription import get_transcription_pipeline

__all__ = [
    "get_credential_store",
    "get_recording_session",
    "get_transcription_pipeline",
    "resolve_credential",
]
