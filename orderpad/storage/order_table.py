"""
Order Table

Owns the durable order schema and the raw row operations against the local
database. Everything above this layer works with OrderRecord; ORM rows never
leave this module.

Failure semantics:
    - Writes (insert/update/delete) raise typed errors: ConstraintViolation,
      NotFound, or StorageError for engine failures.
    - Reads (get_all/get_by_id/search) follow the configured ReadFailurePolicy:
      DEGRADE logs the failure and returns an empty result, RAISE propagates a
      StorageError.

Author: OrderPad Team
Version: 1.0.0
"""

import logging
from typing import Optional

from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from orderpad.core.config import ReadFailurePolicy
from orderpad.core.exceptions import ConstraintViolation, NotFound, StorageError
from orderpad.database import build_session_maker, ensure_database_directory, ping
from orderpad.models import Order
from orderpad.schemas import OrderPatch, OrderRecord
from orderpad.storage.migrations import MigrationResult, run_migrations

logger = logging.getLogger(__name__)


def _to_record(row: Order) -> OrderRecord:
    """Convert an ORM row to the public entity."""
    return OrderRecord(
        id=row.id,
        audio_uri=row.audio_uri,
        transcribed_text=row.transcribed_text,
        timestamp=row.timestamp,
        staff_name=row.staff_name,
        duration=row.duration,
        table_number=row.table_number,
        guest_count=row.guest_count,
        status=row.status,
    )


class OrderTable:
    """
    Row-level access to the orders table.

    Example:
        >>> table = OrderTable(engine)
        >>> await table.ensure_schema()
        >>> await table.insert(record)
        >>> orders = await table.search("pizza")
    """

    def __init__(
        self,
        bind: AsyncEngine,
        read_failure_policy: ReadFailurePolicy = ReadFailurePolicy.DEGRADE,
    ):
        self._engine = bind
        self._session_maker = build_session_maker(bind)
        self.read_failure_policy = read_failure_policy

    # =========================================================================
    # SCHEMA
    # =========================================================================

    async def ensure_schema(self) -> list[MigrationResult]:
        """
        Create the table, or bring an older one up to date.

        Idempotent: a second call finds nothing to do and returns [].
        """
        try:
            ensure_database_directory(self._engine)
            async with self._engine.begin() as conn:
                return await conn.run_sync(run_migrations)
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Failed to initialize order table: {e}")
            raise StorageError(f"Failed to initialize order table: {e}") from e

    async def ping(self) -> bool:
        """True if the database answers a trivial query."""
        try:
            return await ping(self._engine)
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Database ping failed: {e}")
            return False

    # =========================================================================
    # WRITES
    # =========================================================================

    async def insert(self, record: OrderRecord) -> OrderRecord:
        """Insert a new order; ConstraintViolation if the id is taken."""
        row = Order(
            id=record.id,
            audio_uri=record.audio_uri,
            transcribed_text=record.transcribed_text,
            timestamp=record.timestamp,
            staff_name=record.staff_name,
            duration=record.duration,
            table_number=record.table_number,
            guest_count=record.guest_count,
            status=record.status,
        )
        try:
            async with self._session_maker() as session:
                async with session.begin():
                    session.add(row)
        except IntegrityError as e:
            logger.warning(f"Order {record.id} already exists")
            raise ConstraintViolation(record.id) from e
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Failed to add order {record.id}: {e}")
            raise StorageError(f"Failed to add order: {e}") from e

        logger.debug(f"Inserted order {record.id}")
        return record

    async def update(self, order_id: str, patch: OrderPatch) -> OrderRecord:
        """Apply a partial update; NotFound if the id does not exist."""
        changes = patch.changes()
        try:
            async with self._session_maker() as session:
                async with session.begin():
                    row = await session.get(Order, order_id)
                    if row is None:
                        raise NotFound(order_id)
                    for field, value in changes.items():
                        setattr(row, field, value)
                record = _to_record(row)
        except NotFound:
            raise
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Failed to update order {order_id}: {e}")
            raise StorageError(f"Failed to update order: {e}") from e

        logger.debug(f"Updated order {order_id}: {sorted(changes)}")
        return record

    async def delete(self, order_id: str) -> bool:
        """
        Remove an order.

        Returns:
            True if a row was removed, False if the id did not exist
        """
        try:
            async with self._session_maker() as session:
                async with session.begin():
                    result = await session.execute(delete(Order).where(Order.id == order_id))
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Failed to delete order {order_id}: {e}")
            raise StorageError(f"Failed to delete order: {e}") from e

        removed = result.rowcount > 0
        logger.debug(f"Delete order {order_id}: {'removed' if removed else 'not present'}")
        return removed

    # =========================================================================
    # READS
    # =========================================================================

    async def get_all(self) -> list[OrderRecord]:
        """All orders, newest first."""
        query = select(Order).order_by(Order.timestamp.desc())
        return await self._fetch_many(query, "get all orders")

    async def get_by_id(self, order_id: str) -> Optional[OrderRecord]:
        """The order with this id, or None."""
        try:
            async with self._session_maker() as session:
                row = await session.get(Order, order_id)
                return _to_record(row) if row is not None else None
        except (SQLAlchemyError, OSError) as e:
            self._read_failed("get order by id", e)
            return None

    async def search(self, query: str) -> list[OrderRecord]:
        """
        Orders whose text or staff name contains ``query`` (case-insensitive),
        newest first. An empty query returns every order.
        """
        if not query:
            return await self.get_all()

        needle = query.lower()
        statement = (
            select(Order)
            .where(
                or_(
                    func.unicode_lower(Order.transcribed_text).contains(needle, autoescape=True),
                    func.unicode_lower(Order.staff_name).contains(needle, autoescape=True),
                )
            )
            .order_by(Order.timestamp.desc())
        )
        return await self._fetch_many(statement, "search orders")

    # =========================================================================
    # HELPERS
    # =========================================================================

    async def _fetch_many(self, statement, action: str) -> list[OrderRecord]:
        try:
            async with self._session_maker() as session:
                result = await session.execute(statement)
                return [_to_record(row) for row in result.scalars().all()]
        except (SQLAlchemyError, OSError) as e:
            self._read_failed(action, e)
            return []

    def _read_failed(self, action: str, error: Exception) -> None:
        logger.error(f"Failed to {action}: {error}")
        if self.read_failure_policy == ReadFailurePolicy.RAISE:
            raise StorageError(f"Failed to {action}: {error}") from error
