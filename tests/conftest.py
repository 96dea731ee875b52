import os

# Settings are read at import time
os.environ.setdefault("STORE_PROVIDER", "memory")
os.environ.setdefault("APP_NAMESPACE", "test-app-id")
os.environ.setdefault("RATE_LIMIT", "10000/minute")
os.environ.setdefault("JWT_SECRET", "test-secret")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from suds_hub.db import Base
from suds_hub.models import models  # noqa: F401
from suds_hub.services import assets, taxonomy
from suds_hub.store.memory_provider import InMemoryDocumentStore
from suds_hub.store.sql_provider import SqlDocumentStore


def make_session_factory():
    engine = create_engine(
        "sqlite://",
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


@pytest.fixture
def sql_session_factory():
    return make_session_factory()


@pytest.fixture
def store():
    return InMemoryDocumentStore("test-app-id")


@pytest.fixture(params=["memory", "sql"])
def any_store(request):
    if request.param == "sql":
        return SqlDocumentStore(make_session_factory(), "test-app-id")
    return InMemoryDocumentStore("test-app-id")


@pytest.fixture
def zanja(store):
    """Store seeded with the Zanja de infiltración asset and the Limpieza taxonomy."""
    taxonomy.add_category(store, "Limpieza")
    taxonomy.add_activity_name(store, "Limpieza", "Barrido")
    taxonomy.add_activity_name(store, "Limpieza", "Poda")
    taxonomy.add_category(store, "Vegetación")
    taxonomy.add_activity_name(store, "Vegetación", "Riego")
    return assets.add_asset(
        store,
        {"name": "Zanja de infiltración", "description": "Zanja rellena de grava", "locationTypes": ["acera"]},
        actor_id="tester",
    )
