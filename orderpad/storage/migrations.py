"""
Order Table Schema Migrations

Ordered, versioned steps that bring the local database up to the current
order schema. Each step looks at the live schema before changing it: a table
or column that is already there is the recognized ``already_present``
outcome, recorded like any other. Databases created before versioning
existed (columns added ad hoc) are adopted this way without losing rows.

Steps only ever add; nothing is dropped or rewritten.

Author: OrderPad Team
Version: 1.0.0
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from sqlalchemy import Column, Connection, MetaData, Table, Text, inspect, select, text

from orderpad.models import SchemaMigration
from orderpad.schemas import now_iso

logger = logging.getLogger(__name__)

ORDERS_TABLE = "orders"


class MigrationOutcome(str, Enum):
    """How a migration step ended."""
    APPLIED = "applied"
    ALREADY_PRESENT = "already_present"


@dataclass(frozen=True)
class Migration:
    """A single schema step."""
    version: int
    name: str
    apply: Callable[[Connection], MigrationOutcome]


@dataclass(frozen=True)
class MigrationResult:
    """What ensure_schema did for one step."""
    version: int
    name: str
    outcome: MigrationOutcome


# =============================================================================
# STEPS
# =============================================================================

def _create_orders_table(conn: Connection) -> MigrationOutcome:
    """The six columns every version of the client has written."""
    if inspect(conn).has_table(ORDERS_TABLE):
        return MigrationOutcome.ALREADY_PRESENT

    metadata = MetaData()
    Table(
        ORDERS_TABLE,
        metadata,
        Column("id", Text, primary_key=True),
        Column("audioUri", Text, nullable=False),
        Column("transcribedText", Text, nullable=False),
        Column("staffName", Text, nullable=False),
        Column("timestamp", Text, nullable=False),
        Column("duration", Text, nullable=False),
    )
    metadata.create_all(conn)
    return MigrationOutcome.APPLIED


def _add_column(name: str, ddl_type: str) -> Callable[[Connection], MigrationOutcome]:
    """Build a step that adds one column to the orders table."""

    def step(conn: Connection) -> MigrationOutcome:
        existing = {column["name"] for column in inspect(conn).get_columns(ORDERS_TABLE)}
        if name in existing:
            return MigrationOutcome.ALREADY_PRESENT
        conn.execute(text(f'ALTER TABLE {ORDERS_TABLE} ADD COLUMN "{name}" {ddl_type}'))
        return MigrationOutcome.APPLIED

    return step


MIGRATIONS: tuple[Migration, ...] = (
    Migration(1, "create_orders_table", _create_orders_table),
    Migration(2, "add_table_number", _add_column("tableNumber", "INTEGER NULL")),
    Migration(3, "add_guest_count", _add_column("guestCount", "INTEGER NULL")),
    Migration(4, "add_status", _add_column("status", "TEXT DEFAULT 'open'")),
)

LATEST_VERSION = MIGRATIONS[-1].version


# =============================================================================
# RUNNER
# =============================================================================

def current_version(conn: Connection) -> int:
    """Highest recorded migration version, 0 for an unversioned database."""
    if not inspect(conn).has_table(SchemaMigration.__tablename__):
        return 0
    versions = conn.execute(select(SchemaMigration.version)).scalars().all()
    return max(versions, default=0)


def run_migrations(conn: Connection) -> list[MigrationResult]:
    """
    Apply every step newer than the recorded version.

    Runs on a synchronous connection inside the caller's transaction
    (``await async_conn.run_sync(run_migrations)``), so a failing step leaves
    the database as it was before the call.

    Returns:
        One result per step that ran; empty when already up to date
    """
    SchemaMigration.__table__.create(conn, checkfirst=True)
    version = current_version(conn)

    results = []
    for migration in MIGRATIONS:
        if migration.version <= version:
            continue
        outcome = migration.apply(conn)
        conn.execute(
            SchemaMigration.__table__.insert().values(
                version=migration.version,
                name=migration.name,
                outcome=outcome.value,
                applied_at=now_iso(),
            )
        )
        logger.info(f"Migration v{migration.version} {migration.name}: {outcome.value}")
        results.append(MigrationResult(migration.version, migration.name, outcome))

    return results
