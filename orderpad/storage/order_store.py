"""
Order Store

Single entry point for everything that reads or writes orders. It owns the
initialization lifecycle of the OrderTable (the table is prepared on first
use) and otherwise delegates.

Author: OrderPad Team
Version: 1.0.0
"""

import asyncio
import logging
from typing import Optional

from orderpad.core.exceptions import NotFound
from orderpad.models import OrderStatus
from orderpad.schemas import OrderPatch, OrderRecord
from orderpad.storage.order_table import OrderTable

logger = logging.getLogger(__name__)


class OrderStore:
    """
    Facade over the order table.

    Example:
        >>> store = get_order_store()
        >>> await store.add(record)
        >>> await store.close_order(record.id)
        >>> await store.append_items(record.id, "1x Espresso")
    """

    # Marks where items recorded later begin in an order's text
    APPEND_SEPARATOR = "\n\n--- Added Items ---\n"

    def __init__(self, table: OrderTable):
        self._table = table
        self._initialized = False
        self._init_lock = asyncio.Lock()

    @property
    def table(self) -> OrderTable:
        return self._table

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    async def init(self) -> None:
        """Prepare the table. Safe to call more than once."""
        async with self._init_lock:
            if self._initialized:
                return
            results = await self._table.ensure_schema()
            self._initialized = True
            logger.info(f"Order store ready ({len(results)} migration step(s) run)")

    async def _ready(self) -> OrderTable:
        if not self._initialized:
            await self.init()
        return self._table

    # =========================================================================
    # READS
    # =========================================================================

    async def get_all(self) -> list[OrderRecord]:
        return await (await self._ready()).get_all()

    async def get_by_id(self, order_id: str) -> Optional[OrderRecord]:
        return await (await self._ready()).get_by_id(order_id)

    async def search(self, query: str) -> list[OrderRecord]:
        return await (await self._ready()).search(query)

    # =========================================================================
    # WRITES
    # =========================================================================

    async def add(self, record: OrderRecord) -> OrderRecord:
        stored = await (await self._ready()).insert(record)
        logger.info(f"Order {record.id} added by {record.staff_name}")
        return stored

    async def delete(self, order_id: str) -> bool:
        removed = await (await self._ready()).delete(order_id)
        if removed:
            logger.info(f"Order {order_id} deleted")
        return removed

    async def close_order(self, order_id: str) -> OrderRecord:
        return await self._set_status(order_id, OrderStatus.CLOSED)

    async def reopen_order(self, order_id: str) -> OrderRecord:
        return await self._set_status(order_id, OrderStatus.OPEN)

    async def edit(self, order_id: str, patch: OrderPatch) -> OrderRecord:
        """Explicit edit: the only path that may replace an order's text."""
        return await (await self._ready()).update(order_id, patch)

    async def append_items(self, order_id: str, text: str) -> OrderRecord:
        """
        Add items recorded later to an existing order.

        The new text goes after the existing text, separated by
        APPEND_SEPARATOR.

        Raises:
            NotFound: If the order does not exist
        """
        table = await self._ready()
        current = await table.get_by_id(order_id)
        if current is None:
            raise NotFound(order_id)

        combined = f"{current.transcribed_text}{self.APPEND_SEPARATOR}{text}"
        updated = await table.update(order_id, OrderPatch(transcribed_text=combined))
        logger.info(f"Items appended to order {order_id}")
        return updated

    async def _set_status(self, order_id: str, status: OrderStatus) -> OrderRecord:
        updated = await (await self._ready()).update(order_id, OrderPatch(status=status))
        logger.info(f"Order {order_id} is now {status.value}")
        return updated
