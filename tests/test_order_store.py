import asyncio

import pytest

from orderpad.core.exceptions import NotFound
from orderpad.models import OrderStatus
from orderpad.schemas import OrderPatch
from orderpad.storage import OrderStore


async def test_first_use_initializes_the_table(store, make_order):
    assert store.is_initialized is False

    assert await store.get_all() == []
    assert store.is_initialized is True

    record = make_order()
    await store.add(record)
    assert await store.get_by_id(record.id) == record


async def test_concurrent_init_runs_migrations_once(store):
    await asyncio.gather(store.init(), store.init(), store.get_all())

    assert store.is_initialized is True
    assert await store.table.ensure_schema() == []


async def test_new_orders_are_open(store, make_order):
    record = await store.add(make_order())

    assert record.status == OrderStatus.OPEN
    assert (await store.get_by_id(record.id)).is_open


async def test_close_and_reopen_round_trip(store, make_order):
    record = await store.add(make_order(table_number=12))

    closed = await store.close_order(record.id)
    assert closed.status == OrderStatus.CLOSED
    assert closed.table_number == 12

    reopened = await store.reopen_order(record.id)
    assert reopened.status == OrderStatus.OPEN
    assert reopened.transcribed_text == record.transcribed_text


async def test_close_missing_order_raises_not_found(store):
    with pytest.raises(NotFound):
        await store.close_order("missing")


async def test_append_items_keeps_existing_text_first(store, make_order):
    record = await store.add(make_order(transcribed_text="1x Pizza"))

    await store.append_items(record.id, "1x Espresso")
    updated = await store.append_items(record.id, "2x Tiramisu")

    assert updated.transcribed_text == (
        "1x Pizza"
        + OrderStore.APPEND_SEPARATOR
        + "1x Espresso"
        + OrderStore.APPEND_SEPARATOR
        + "2x Tiramisu"
    )
    assert (await store.get_by_id(record.id)).transcribed_text == updated.transcribed_text


async def test_append_items_to_missing_order_raises_not_found(store):
    with pytest.raises(NotFound) as exc_info:
        await store.append_items("missing", "1x Water")

    assert exc_info.value.order_id == "missing"


async def test_edit_replaces_text_and_details(store, make_order):
    record = await store.add(make_order())

    edited = await store.edit(
        record.id, OrderPatch(transcribed_text="3x Lemonade", guest_count=3)
    )

    assert edited.transcribed_text == "3x Lemonade"
    assert edited.guest_count == 3
    assert edited.staff_name == record.staff_name


async def test_delete_is_idempotent(store, make_order):
    record = await store.add(make_order())

    assert await store.delete(record.id) is True
    assert await store.delete(record.id) is False
    assert await store.get_all() == []


async def test_search_goes_through_the_store(store, make_order):
    await store.add(make_order(transcribed_text="1x Pad Thai", staff_name="Lee"))
    await store.add(make_order(transcribed_text="1x Ramen", staff_name="Kim"))

    assert [r.transcribed_text for r in await store.search("lee")] == ["1x Pad Thai"]
