"""
Order Storage Module

Provides the process-wide OrderStore built on the shared database engine.

Usage:
    from orderpad.storage import get_order_store

    store = get_order_store()
    orders = await store.search("pizza")

Author: OrderPad Team
Version: 1.0.0
"""

import logging
from functools import lru_cache

from orderpad.core.config import get_settings
from orderpad.database import engine
from orderpad.storage.migrations import (
    LATEST_VERSION,
    MIGRATIONS,
    Migration,
    MigrationOutcome,
    MigrationResult,
)
from orderpad.storage.order_store import OrderStore
from orderpad.storage.order_table import OrderTable

logger = logging.getLogger(__name__)


@lru_cache()
def get_order_store() -> OrderStore:
    """Get the shared order store (created once per process)."""
    settings = get_settings()
    logger.info(f"Order Store: {engine.url.render_as_string(hide_password=True)} "
                f"(reads: {settings.read_failure_policy.value})")
    return OrderStore(OrderTable(engine, read_failure_policy=settings.read_failure_policy))


def reset_order_store() -> None:
    """Clear the cached store instance."""
    get_order_store.cache_clear()


__all__ = [
    "get_order_store",
    "reset_order_store",
    "OrderStore",
    "OrderTable",
    "Migration",
    "MigrationOutcome",
    "MigrationResult",
    "MIGRATIONS",
    "LATEST_VERSION",
]
