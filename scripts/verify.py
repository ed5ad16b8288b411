"""
Order Store Verification Script

Checks schema version and data integrity of the local order database.
Run from project root: python scripts/verify.py

Author: OrderPad Team
Version: 1.0.0
"""

import asyncio
import sys
from datetime import datetime

from sqlalchemy import inspect, select
from sqlalchemy.exc import SQLAlchemyError

from orderpad.core.config import ReadFailurePolicy, get_settings
from orderpad.database import build_engine
from orderpad.models import OrderStatus, SchemaMigration
from orderpad.storage import LATEST_VERSION, OrderTable
from orderpad.storage.migrations import ORDERS_TABLE, current_version


def _schema_report(sync_conn) -> dict:
    inspector = inspect(sync_conn)
    if not inspector.has_table(ORDERS_TABLE):
        return {"exists": False}

    migrations = []
    if inspector.has_table(SchemaMigration.__tablename__):
        table = SchemaMigration.__table__
        query = select(table.c.version, table.c.name, table.c.outcome, table.c.applied_at).order_by(table.c.version)
        migrations = [tuple(row) for row in sync_conn.execute(query)]

    return {
        "exists": True,
        "version": current_version(sync_conn),
        "columns": [c["name"] for c in inspector.get_columns(ORDERS_TABLE)],
        "migrations": migrations,
    }


async def verify_store() -> bool:
    """Verify the order database after a simulation run."""
    settings = get_settings()
    engine = build_engine(settings.database_url, echo=False)

    print("=" * 60)
    print("🔍 ORDER STORE VERIFICATION REPORT")
    print("=" * 60)
    print(f"⏰ Timestamp: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print(f"🗄️  Database: {settings.database_url}")
    print("=" * 60)

    try:
        async with engine.connect() as conn:
            schema = await conn.run_sync(_schema_report)

        if not schema["exists"]:
            print("\n❌ Orders table not found!")
            print("   Start the API or run the simulation first: python scripts/simulate.py")
            return False

        print("\n🧱 SCHEMA:")
        print(f"   Version: {schema['version']} (latest {LATEST_VERSION})")
        print(f"   Columns: {', '.join(schema['columns'])}")
        for version, name, outcome, applied_at in schema["migrations"]:
            print(f"   v{version} {name}: {outcome} at {applied_at}")
        if schema["version"] < LATEST_VERSION:
            print("\n⚠️ Schema is behind; it is upgraded on the next API start")
            return False

        orders = await OrderTable(engine, read_failure_policy=ReadFailurePolicy.RAISE).get_all()
    except SQLAlchemyError as e:
        print(f"\n❌ Could not read database: {e}")
        return False
    finally:
        await engine.dispose()

    open_orders = [o for o in orders if o.status == OrderStatus.OPEN]
    print("\n📊 STATISTICS:")
    print(f"   Total Orders: {len(orders)}")
    print(f"   Open: {len(open_orders)}")
    print(f"   Closed: {len(orders) - len(open_orders)}")

    empty = [o.id for o in orders if not o.transcribed_text.strip()]
    if empty:
        print(f"\n⚠️ {len(empty)} orders with empty text: {empty[:5]}")
    else:
        print("\n✅ Every order has text")

    unassigned = sum(1 for o in open_orders if o.table_number is None)
    print(f"🪑 Open orders without a table: {unassigned}")

    per_staff: dict[str, int] = {}
    for order in orders:
        per_staff[order.staff_name] = per_staff.get(order.staff_name, 0) + 1
    if per_staff:
        print("\n👥 ORDERS PER STAFF:")
        for name, count in sorted(per_staff.items(), key=lambda item: -item[1]):
            print(f"   {name}: {count}")

    print("\n📋 RECENT ORDERS:")
    print("-" * 60)
    for order in orders[:5]:
        first_line = order.transcribed_text.splitlines()[0] if order.transcribed_text else ""
        table = order.table_number if order.table_number is not None else "-"
        print(f"   {order.id}  table {table}  {order.status.value:<6}  {order.staff_name}: {first_line}")

    print("\n" + "=" * 60)
    print("✅ VERIFICATION COMPLETE")
    print("=" * 60)

    return True


if __name__ == "__main__":
    sys.exit(0 if asyncio.run(verify_store()) else 1)
