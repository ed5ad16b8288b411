from sqlalchemy import text

from orderpad import database


async def test_sqlite_connections_fold_unicode_case(engine):
    async with engine.connect() as conn:
        builtin = (await conn.execute(text("SELECT lower('CRÈME')"))).scalar_one()
        folded = (await conn.execute(text("SELECT unicode_lower('CRÈME')"))).scalar_one()
        null = (await conn.execute(text("SELECT unicode_lower(NULL)"))).scalar_one()

    assert builtin == "crÈme"
    assert folded == "crème"
    assert null is None


def test_shared_engine_without_module_level_session_maker():
    assert database.engine.dialect.name == "sqlite"
    assert not hasattr(database, "async_session_maker")
