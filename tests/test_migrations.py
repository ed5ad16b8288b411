from sqlalchemy import inspect, text

from orderpad.models import OrderStatus
from orderpad.storage import LATEST_VERSION, MigrationOutcome, OrderTable
from orderpad.storage.migrations import current_version

LEGACY_SCHEMA = """
CREATE TABLE orders (
    id TEXT PRIMARY KEY,
    audioUri TEXT NOT NULL,
    transcribedText TEXT NOT NULL,
    staffName TEXT NOT NULL,
    timestamp TEXT NOT NULL,
    duration TEXT NOT NULL
)
"""

LEGACY_ROW = """
INSERT INTO orders (id, audioUri, transcribedText, staffName, timestamp, duration)
VALUES ('1700000000000', 'file:///rec/a.m4a', '2x Burger', 'Sam', '2023-11-14T22:13:20.000Z', '0:42')
"""


async def _columns(engine) -> set[str]:
    async with engine.connect() as conn:
        return await conn.run_sync(
            lambda sync_conn: {c["name"] for c in inspect(sync_conn).get_columns("orders")}
        )


async def _version(engine) -> int:
    async with engine.connect() as conn:
        return await conn.run_sync(current_version)


async def test_fresh_database_reaches_latest_version(engine):
    await OrderTable(engine).ensure_schema()

    assert await _version(engine) == LATEST_VERSION
    assert await _columns(engine) == {
        "id", "audioUri", "transcribedText", "staffName", "timestamp", "duration",
        "tableNumber", "guestCount", "status",
    }


async def test_legacy_table_is_upgraded_without_losing_rows(engine):
    async with engine.begin() as conn:
        await conn.execute(text(LEGACY_SCHEMA))
        await conn.execute(text(LEGACY_ROW))
    table = OrderTable(engine)

    results = await table.ensure_schema()

    assert [(r.version, r.outcome) for r in results] == [
        (1, MigrationOutcome.ALREADY_PRESENT),
        (2, MigrationOutcome.APPLIED),
        (3, MigrationOutcome.APPLIED),
        (4, MigrationOutcome.APPLIED),
    ]
    record = await table.get_by_id("1700000000000")
    assert record.transcribed_text == "2x Burger"
    assert record.staff_name == "Sam"
    assert record.table_number is None
    assert record.guest_count is None
    assert record.status == OrderStatus.OPEN


async def test_unversioned_table_with_all_columns_is_adopted(engine):
    async with engine.begin() as conn:
        await conn.execute(text(LEGACY_SCHEMA))
        await conn.execute(text('ALTER TABLE orders ADD COLUMN "tableNumber" INTEGER NULL'))
        await conn.execute(text('ALTER TABLE orders ADD COLUMN "guestCount" INTEGER NULL'))
        await conn.execute(text("ALTER TABLE orders ADD COLUMN \"status\" TEXT DEFAULT 'open'"))

    results = await OrderTable(engine).ensure_schema()

    assert len(results) == LATEST_VERSION
    assert all(r.outcome == MigrationOutcome.ALREADY_PRESENT for r in results)
    assert await _version(engine) == LATEST_VERSION


async def test_partially_upgraded_table_only_gets_missing_columns(engine):
    async with engine.begin() as conn:
        await conn.execute(text(LEGACY_SCHEMA))
        await conn.execute(text('ALTER TABLE orders ADD COLUMN "tableNumber" INTEGER NULL'))

    results = await OrderTable(engine).ensure_schema()

    outcomes = {r.name: r.outcome for r in results}
    assert outcomes["add_table_number"] == MigrationOutcome.ALREADY_PRESENT
    assert outcomes["add_guest_count"] == MigrationOutcome.APPLIED
    assert outcomes["add_status"] == MigrationOutcome.APPLIED


async def test_second_run_is_a_no_op(engine):
    table = OrderTable(engine)
    await table.ensure_schema()

    assert await table.ensure_schema() == []
    assert await _version(engine) == LATEST_VERSION
