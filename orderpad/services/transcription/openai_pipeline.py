"""
OpenAI Transcription Pipeline Implementation

Production pipeline using the OpenAI HTTP API directly through httpx:
    1. POST /audio/transcriptions (multipart: file + model) -> {"text": ...}
    2. POST /chat/completions (system + user message) -> choices[0].message.content

Both requests authenticate with "Authorization: Bearer <credential>".
Failed responses carry {"error": {"message": ...}}, which becomes the
message of the raised error.

Every request is bounded by settings.request_timeout_seconds; a timeout or
connection failure is reported with status_code=None.

Author: OrderPad Team
Version: 1.0.0
"""

import asyncio
import logging
import mimetypes
from pathlib import Path
from typing import Any, Optional
from urllib.parse import unquote, urlparse

import httpx

from orderpad.core.config import get_settings
from orderpad.core.exceptions import (
    ExtractionFailed,
    MissingCredential,
    RemoteServiceError,
    TranscriptionFailed,
)
from orderpad.services.transcription.base import (
    BaseTranscriptionPipeline,
    EXTRACTION_SYSTEM_PROMPT,
    build_extraction_prompt,
)

logger = logging.getLogger(__name__)


def resolve_audio_path(audio_uri: str) -> Path:
    """Local path of a ``file://`` URI or a plain path."""
    parsed = urlparse(audio_uri)
    if parsed.scheme == "file":
        return Path(unquote(parsed.path))
    return Path(audio_uri)


def _error_message(response: httpx.Response, fallback: str) -> str:
    """Message from the API error envelope, or the fallback."""
    try:
        message = response.json()["error"]["message"]
    except (ValueError, KeyError, TypeError):
        return fallback
    return message or fallback


class OpenAITranscriptionPipeline(BaseTranscriptionPipeline):
    """
    Production pipeline backed by the OpenAI API.

    Args:
        base_url: API root, e.g. https://api.openai.com/v1
        transcription_model: Speech-to-text model id
        extraction_model: Chat model id
        temperature: Sampling temperature for extraction
        timeout: Seconds allowed per request
        transport: Optional httpx transport (tests pass httpx.MockTransport)
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        transcription_model: Optional[str] = None,
        extraction_model: Optional[str] = None,
        temperature: Optional[float] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self.base_url = (base_url or settings.openai_base_url).rstrip("/")
        self.transcription_model = transcription_model or settings.transcription_model
        self.extraction_model = extraction_model or settings.extraction_model
        self.temperature = settings.extraction_temperature if temperature is None else temperature
        self.timeout = timeout or settings.request_timeout_seconds
        self._transport = transport

        logger.info(
            f"OpenAITranscriptionPipeline initialized "
            f"({self.transcription_model} -> {self.extraction_model}, timeout={self.timeout}s)"
        )

    @property
    def provider_name(self) -> str:
        return "openai"

    def _client(self, credential: str) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Authorization": f"Bearer {credential}"},
            timeout=httpx.Timeout(self.timeout),
            transport=self._transport,
        )

    async def _post(
        self,
        path: str,
        credential: str,
        error_cls: type[RemoteServiceError],
        stage: str,
        **kwargs: Any,
    ) -> dict[str, Any]:
        """POST and return the decoded JSON body, raising error_cls on failure."""
        try:
            async with self._client(credential) as client:
                response = await client.post(path, **kwargs)
        except httpx.TimeoutException as e:
            logger.error(f"{stage} timed out after {self.timeout}s")
            raise error_cls(None, f"{stage} timed out after {self.timeout:g}s") from e
        except httpx.RequestError as e:
            logger.error(f"{stage} request failed: {e}")
            raise error_cls(None, f"{stage} request failed: {e}") from e

        if not response.is_success:
            message = _error_message(
                response, f"{stage} failed with status {response.status_code}"
            )
            logger.error(f"{stage} failed [{response.status_code}]: {message}")
            raise error_cls(response.status_code, message)

        try:
            return response.json()
        except ValueError as e:
            raise error_cls(response.status_code, f"{stage} returned invalid JSON") from e

    async def transcribe(self, audio_uri: str, credential: Optional[str]) -> str:
        if not credential:
            raise MissingCredential()

        path = resolve_audio_path(audio_uri)
        try:
            audio = await asyncio.to_thread(path.read_bytes)
        except OSError as e:
            raise TranscriptionFailed(None, f"Could not read recording {audio_uri}: {e}") from e

        content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        data = await self._post(
            "/audio/transcriptions",
            credential,
            TranscriptionFailed,
            "Transcription",
            files={"file": (path.name, audio, content_type)},
            data={"model": self.transcription_model},
        )

        text = data.get("text") if isinstance(data, dict) else None
        if text is None:
            raise TranscriptionFailed(200, "Transcription response did not include text")
        return text

    async def extract_order_items(self, raw_text: str, credential: Optional[str]) -> str:
        if not credential:
            raise MissingCredential()

        payload = {
            "model": self.extraction_model,
            "messages": [
                {"role": "system", "content": EXTRACTION_SYSTEM_PROMPT},
                {"role": "user", "content": build_extraction_prompt(raw_text)},
            ],
            "temperature": self.temperature,
        }
        data = await self._post(
            "/chat/completions",
            credential,
            ExtractionFailed,
            "Order extraction",
            json=payload,
        )

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise ExtractionFailed(200, "Order extraction response did not include a message") from e
        return (content or "").strip()
