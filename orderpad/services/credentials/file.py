"""
File Credential Store

Production store keeping the key in a JSON file readable only by the
service user (mode 0600). Writes go through a temporary file and an atomic
rename so a crash never leaves a half-written key behind.

Author: OrderPad Team
Version: 1.0.0
"""

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Optional

from orderpad.core.exceptions import StorageError
from orderpad.services.credentials.base import BaseCredentialStore

logger = logging.getLogger(__name__)

CREDENTIAL_KEY = "openai_api_key"


class FileCredentialStore(BaseCredentialStore):
    """Owner-only JSON file holding the API key."""

    def __init__(self, path: Path):
        self.path = Path(path)
        logger.info(f"FileCredentialStore initialized ({self.path})")

    @property
    def provider_name(self) -> str:
        return "file"

    async def get_credential(self) -> Optional[str]:
        return await asyncio.to_thread(self._read)

    async def save_credential(self, value: str) -> None:
        await asyncio.to_thread(self._write, value)

    async def delete_credential(self) -> None:
        await asyncio.to_thread(self._delete)

    def _read(self) -> Optional[str]:
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.error(f"Failed to read credential file {self.path}: {e}")
            return None
        value = data.get(CREDENTIAL_KEY) if isinstance(data, dict) else None
        return value or None

    def _write(self, value: str) -> None:
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump({CREDENTIAL_KEY: value}, fh)
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error(f"Failed to save credential: {e}")
            raise StorageError(f"Failed to save credential: {e}") from e

    def _delete(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            logger.error(f"Failed to delete credential: {e}")
            raise StorageError(f"Failed to delete credential: {e}") from e
