"""
In-Memory Credential Store

Development store; the key is forgotten when the process exits.

Author: OrderPad Team
Version: 1.0.0
"""

import logging
from typing import Optional

from orderpad.services.credentials.base import BaseCredentialStore

logger = logging.getLogger(__name__)


class InMemoryCredentialStore(BaseCredentialStore):
    """Keeps the key in a process-local attribute."""

    def __init__(self, initial: Optional[str] = None):
        self._value = initial
        logger.info(f"InMemoryCredentialStore initialized (seeded={initial is not None})")

    @property
    def provider_name(self) -> str:
        return "memory"

    async def get_credential(self) -> Optional[str]:
        return self._value

    async def save_credential(self, value: str) -> None:
        self._value = value

    async def delete_credential(self) -> None:
        self._value = None
