"""
Shared test fixtures for the WebInk test suite.
"""

import pytest
import pytest_asyncio

from webink.db import engine
from webink.db.engine import Database
from webink.models.registry import ModelRegistry

from sample_models import AppleTree, Wig, ColorSpray

SAMPLE_MODELS = (AppleTree, Wig, ColorSpray)


@pytest.fixture(autouse=True)
def reset_registry():
    """Run every test against exactly the sample models and no default database."""
    saved = dict(ModelRegistry._models)
    ModelRegistry.reset()
    for model_cls in SAMPLE_MODELS:
        ModelRegistry.register(model_cls)
    engine.drop_database()
    yield
    ModelRegistry.set_database(None)
    ModelRegistry._models.clear()
    ModelRegistry._models.update(saved)
    engine.drop_database()


@pytest_asyncio.fixture
async def db():
    """Connected in-memory database with the sample tables created."""
    database = Database("sqlite:///:memory:")
    await database.connect()
    await ModelRegistry.create_tables(database)
    yield database
    await database.close()


@pytest.fixture
def statements(db, monkeypatch):
    """Record every SQL statement the adapter executes."""
    recorded = []
    original_execute = db.adapter.execute

    async def recording_execute(sql, params=None):
        recorded.append(sql)
        return await original_execute(sql, params)

    monkeypatch.setattr(db.adapter, "execute", recording_execute)
    return recorded
