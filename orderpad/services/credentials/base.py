"""
Credential Store Abstract Base Class

Where the OpenAI API key lives between requests. The order core only uses
these three calls and never sees how a backend keeps the value.

Author: OrderPad Team
Version: 1.0.0
"""

from abc import ABC, abstractmethod
from typing import Optional


class BaseCredentialStore(ABC):
    """Abstract base class for credential stores."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name."""
        pass

    @abstractmethod
    async def get_credential(self) -> Optional[str]:
        """Stored key, or None if nothing is stored or it cannot be read."""
        pass

    @abstractmethod
    async def save_credential(self, value: str) -> None:
        """Store a key, replacing any previous one."""
        pass

    @abstractmethod
    async def delete_credential(self) -> None:
        """Forget the stored key. Deleting when nothing is stored is not an error."""
        pass
