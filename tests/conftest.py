import os

# Settings are read on first import; keep the suite off real services and files.
os.environ["ENV_MODE"] = "development"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["MOCK_LATENCY_SECONDS"] = "0"
os.environ["STATIC_DIRECTORY"] = "does-not-exist"
os.environ.pop("OPENAI_API_KEY", None)

import pytest

from orderpad.core.config import get_settings
from orderpad.database import build_engine
from orderpad.schemas import OrderRecord
from orderpad.storage import OrderStore, OrderTable


@pytest.fixture
def settings_env(monkeypatch):
    """Change settings through the environment; the cache is reset around the test."""
    get_settings.cache_clear()
    yield monkeypatch
    monkeypatch.undo()
    get_settings.cache_clear()


@pytest.fixture
async def engine(tmp_path):
    bind = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'orders.db'}", echo=False)
    yield bind
    await bind.dispose()


@pytest.fixture
async def table(engine):
    order_table = OrderTable(engine)
    await order_table.ensure_schema()
    return order_table


@pytest.fixture
def store(engine):
    return OrderStore(OrderTable(engine))


@pytest.fixture
def make_order():
    counter = {"n": 0}

    def factory(**overrides) -> OrderRecord:
        counter["n"] += 1
        n = counter["n"]
        fields = {
            "id": f"order-{n}",
            "audio_uri": f"recording_{n}.m4a",
            "transcribed_text": "1x Pepperoni pizza\n1x Diet Coke",
            "timestamp": f"2026-10-19T18:{n:02d}:00.000Z",
            "staff_name": "Chef",
            "duration": "0:15",
        }
        fields.update(overrides)
        return OrderRecord(**fields)

    return factory
