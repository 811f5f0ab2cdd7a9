"""Shared fixtures: both store backends and a TestClient over the app."""

import pytest
from fastapi.testclient import TestClient

from catalog.api.schemas.product import ProductCreate
from catalog.core.config import Settings
from catalog.db.session import build_engine, build_session_factory, create_tables
from catalog.main import create_app
from catalog.stores.memory import InMemoryProductStore
from catalog.stores.sql import SqlProductStore


def make_sql_store() -> SqlProductStore:
    # In-memory SQLite; build_engine shares one connection across sessions
    engine = build_engine("sqlite://")
    create_tables(engine)
    return SqlProductStore(build_session_factory(engine))


@pytest.fixture(params=["memory", "sql"])
def store(request):
    """Run a test once per store implementation."""
    if request.param == "memory":
        return InMemoryProductStore()
    return make_sql_store()


@pytest.fixture
def fruit_store(store):
    store.insert_many(
        [
            ProductCreate(name="Apple", quantity=5, price=1.2),
            ProductCreate(name="Banana", quantity=12, price=0.5),
            ProductCreate(name="Grape", quantity=30, price=2.75),
        ]
    )
    return store


@pytest.fixture
def test_settings() -> Settings:
    return Settings(store_backend="memory", log_level="WARNING", app_version="1.0.0")


@pytest.fixture
def client(test_settings):
    app = create_app(store=InMemoryProductStore(), settings=test_settings)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def sql_client(test_settings):
    app = create_app(store=make_sql_store(), settings=test_settings)
    with TestClient(app) as test_client:
        yield test_client
