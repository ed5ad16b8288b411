"""
Core module initialization.
Exports configuration, logging utilities and the error taxonomy.
"""

from orderpad.core.config import (
    get_settings,
    setup_logging,
    Settings,
    EnvironmentMode,
    ReadFailurePolicy,
)
from orderpad.core.exceptions import (
    OrderPadError,
    PermissionDenied,
    AlreadyRecording,
    NoActiveSession,
    MissingCredential,
    InvalidCredential,
    RemoteServiceError,
    TranscriptionFailed,
    ExtractionFailed,
    ConstraintViolation,
    NotFound,
    StorageError,
)

__all__ = [
    "get_settings",
    "setup_logging",
    "Settings",
    "EnvironmentMode",
    "ReadFailurePolicy",
    "OrderPadError",
    "PermissionDenied",
    "AlreadyRecording",
    "NoActiveSession",
    "MissingCredential",
    "InvalidCredential",
    "RemoteServiceError",
    "TranscriptionFailed",
    "ExtractionFailed",
    "ConstraintViolation",
    "NotFound",
    "StorageError",
]
