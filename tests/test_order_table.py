import pytest

from orderpad.core.config import ReadFailurePolicy
from orderpad.core.exceptions import ConstraintViolation, NotFound, StorageError
from orderpad.models import OrderStatus
from orderpad.schemas import OrderPatch
from orderpad.storage import LATEST_VERSION, MigrationOutcome, OrderTable


async def test_ensure_schema_creates_table_once(engine):
    table = OrderTable(engine)

    first = await table.ensure_schema()
    second = await table.ensure_schema()

    assert [r.version for r in first] == list(range(1, LATEST_VERSION + 1))
    assert all(r.outcome == MigrationOutcome.APPLIED for r in first)
    assert second == []


async def test_insert_then_get_by_id_returns_equal_record(table, make_order):
    record = make_order(table_number=7, guest_count=3, status=OrderStatus.CLOSED)

    await table.insert(record)

    assert await table.get_by_id(record.id) == record


async def test_get_by_id_missing_returns_none(table):
    assert await table.get_by_id("nope") is None


async def test_insert_duplicate_id_raises_constraint_violation(table, make_order):
    record = make_order()
    await table.insert(record)

    with pytest.raises(ConstraintViolation) as exc_info:
        await table.insert(make_order(id=record.id, transcribed_text="Something else"))

    assert exc_info.value.order_id == record.id
    assert (await table.get_by_id(record.id)).transcribed_text == record.transcribed_text


async def test_get_all_is_newest_first(table, make_order):
    older = make_order(timestamp="2026-10-18T12:00:00.000Z")
    newest = make_order(timestamp="2026-10-19T20:00:00.000Z")
    middle = make_order(timestamp="2026-10-19T09:00:00.000Z")
    for record in (older, newest, middle):
        await table.insert(record)

    assert [r.id for r in await table.get_all()] == [newest.id, middle.id, older.id]


async def test_search_matches_text_or_staff_case_insensitively(table, make_order):
    pizza = make_order(transcribed_text="1x Margherita PIZZA", staff_name="Ana")
    by_staff = make_order(transcribed_text="2x Espresso", staff_name="Pizzaiolo Marco")
    other = make_order(transcribed_text="1x Caesar salad", staff_name="Ana")
    for record in (pizza, by_staff, other):
        await table.insert(record)

    results = await table.search("pizza")

    assert {r.id for r in results} == {pizza.id, by_staff.id}
    assert [r.id for r in results] == [by_staff.id, pizza.id]


async def test_search_empty_query_returns_everything(table, make_order):
    records = [make_order() for _ in range(3)]
    for record in records:
        await table.insert(record)

    assert [r.id for r in await table.search("")] == [r.id for r in reversed(records)]


async def test_search_treats_wildcards_literally(table, make_order):
    discount = make_order(transcribed_text="Wine 50% off")
    plain = make_order(transcribed_text="Wine 50 glasses")
    await table.insert(discount)
    await table.insert(plain)

    assert [r.id for r in await table.search("50%")] == [discount.id]
    assert await table.search("w_ne") == []


async def test_update_changes_only_patched_fields(table, make_order):
    record = make_order()
    await table.insert(record)

    updated = await table.update(record.id, OrderPatch(table_number=4, status=OrderStatus.CLOSED))

    assert updated.table_number == 4
    assert updated.status == OrderStatus.CLOSED
    assert updated.transcribed_text == record.transcribed_text
    assert updated.guest_count is None
    assert await table.get_by_id(record.id) == updated


async def test_update_can_clear_optional_fields(table, make_order):
    record = make_order(table_number=2, guest_count=5)
    await table.insert(record)

    updated = await table.update(record.id, OrderPatch(table_number=None))

    assert updated.table_number is None
    assert updated.guest_count == 5


async def test_update_missing_id_raises_not_found(table):
    with pytest.raises(NotFound):
        await table.update("missing", OrderPatch(status=OrderStatus.CLOSED))


async def test_delete_removes_row_and_tolerates_missing_id(table, make_order):
    record = make_order()
    await table.insert(record)

    assert await table.delete(record.id) is True
    assert await table.get_by_id(record.id) is None
    assert await table.delete(record.id) is False


async def test_reads_degrade_to_empty_results_by_default(engine):
    table = OrderTable(engine)  # schema never created, every query fails

    assert await table.get_all() == []
    assert await table.search("pizza") == []
    assert await table.get_by_id("order-1") is None


async def test_reads_raise_when_policy_is_raise(engine):
    table = OrderTable(engine, read_failure_policy=ReadFailurePolicy.RAISE)

    with pytest.raises(StorageError):
        await table.get_all()
    with pytest.raises(StorageError):
        await table.get_by_id("order-1")


async def test_write_failures_raise_storage_error(engine, make_order):
    table = OrderTable(engine)

    with pytest.raises(StorageError):
        await table.insert(make_order())
    with pytest.raises(StorageError):
        await table.delete("order-1")


async def test_ping_reports_healthy_database(table):
    assert await table.ping() is True


async def test_ordering_follows_the_instant_not_the_text(table, make_order):
    whole_second = make_order(timestamp="2026-10-19T18:30:00Z")
    half_past = make_order(timestamp="2026-10-19T18:30:00.500Z")
    offset_earlier = make_order(timestamp="2026-10-19T10:00:00+05:00")  # 05:00 UTC
    utc_later = make_order(timestamp="2026-10-19T06:00:00Z")
    for record in (whole_second, half_past, offset_earlier, utc_later):
        await table.insert(record)

    assert [r.id for r in await table.get_all()] == [
        half_past.id, whole_second.id, utc_later.id, offset_earlier.id,
    ]
    assert [r.id for r in await table.search("pizza")] == [
        half_past.id, whole_second.id, utc_later.id, offset_earlier.id,
    ]


async def test_search_folds_non_ascii_case(table, make_order):
    dessert = make_order(transcribed_text="1x CRÈME brûlée")
    by_staff = make_order(transcribed_text="1x Soup", staff_name="ÉLODIE")
    await table.insert(dessert)
    await table.insert(by_staff)

    assert [r.id for r in await table.search("crème")] == [dessert.id]
    assert [r.id for r in await table.search("élodie")] == [by_staff.id]
