"""
Credential Store Factory

Returns the in-memory store in development and the file store otherwise.
Both are seeded from OPENAI_API_KEY only through resolve_credential(), so a
key set in the environment never overwrites one saved by staff.

Author: OrderPad Team
Version: 1.0.0
"""

import logging
from functools import lru_cache
from typing import Optional

from orderpad.core.config import get_settings
from orderpad.services.credentials.base import BaseCredentialStore
from orderpad.services.credentials.file import FileCredentialStore
from orderpad.services.credentials.mock import InMemoryCredentialStore

logger = logging.getLogger(__name__)


@lru_cache()
def get_credential_store() -> BaseCredentialStore:
    """Get the configured credential store."""
    settings = get_settings()

    if settings.is_development:
        logger.info("Credential Store: Using InMemoryCredentialStore (development mode)")
        return InMemoryCredentialStore()
    else:
        logger.info(f"Credential Store: Using FileCredentialStore ({settings.env_mode.value} mode)")
        return FileCredentialStore(settings.credential_path)


def reset_credential_store() -> None:
    """Clear the cached store instance."""
    get_credential_store.cache_clear()


async def resolve_credential(store: BaseCredentialStore) -> Optional[str]:
    """Stored key first, then OPENAI_API_KEY from the environment."""
    return await store.get_credential() or get_settings().openai_api_key


__all__ = [
    "get_credential_store",
    "reset_credential_store",
    "resolve_credential",
    "BaseCredentialStore",
    "FileCredentialStore",
    "InMemoryCredentialStore",
]
