"""
Typed Errors

Every failure the order core can report to a caller. The HTTP layer maps
each class to a status code; everything else lets them propagate untouched.

Author: OrderPad Team
Version: 1.0.0
"""

from typing import Optional


class OrderPadError(Exception):
    """Base class for all application errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


# =============================================================================
# RECORDING
# =============================================================================

class PermissionDenied(OrderPadError):
    """Microphone permission was not granted."""

    def __init__(self, message: str = "Audio recording permission not granted"):
        super().__init__(message)


class AlreadyRecording(OrderPadError):
    """start() was called while a recording is active."""

    def __init__(self, message: str = "A recording is already in progress"):
        super().__init__(message)


class NoActiveSession(OrderPadError):
    """stop() was called while no recording is active."""

    def __init__(self, message: str = "No active recording"):
        super().__init__(message)


# =============================================================================
# CREDENTIALS + REMOTE PIPELINE
# =============================================================================

class MissingCredential(OrderPadError):
    """No API key is available for a remote call."""

    def __init__(self, message: str = "OpenAI API key is required for transcription"):
        super().__init__(message)


class InvalidCredential(OrderPadError):
    """A credential was rejected by the syntactic check before saving."""

    def __init__(self, message: str = "API key must start with 'sk-'"):
        super().__init__(message)


class RemoteServiceError(OrderPadError):
    """
    A remote pipeline stage failed.

    Attributes:
        status_code: HTTP status returned by the service, or None when the
            request never produced a response (timeout, connection error)
        message: Human-readable reason
    """

    def __init__(self, status_code: Optional[int], message: str):
        super().__init__(message)
        self.status_code = status_code

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        return f"[{self.status_code}] {self.message}"


class TranscriptionFailed(RemoteServiceError):
    """The speech-to-text stage failed."""


class ExtractionFailed(RemoteServiceError):
    """The order extraction stage failed."""


# =============================================================================
# STORAGE
# =============================================================================

class ConstraintViolation(OrderPadError):
    """An insert collided with an existing order id."""

    def __init__(self, order_id: str):
        super().__init__(f"Order {order_id} already exists")
        self.order_id = order_id


class NotFound(OrderPadError):
    """An update or append targeted an order that does not exist."""

    def __init__(self, order_id: str):
        super().__init__(f"Order {order_id} not found")
        self.order_id = order_id


class StorageError(OrderPadError):
    """The underlying storage engine failed."""
