from typing import Optional

from ..config import settings
from ..db import SessionLocal
from ..services.read_model import ReadModel
from .memory_provider import InMemoryDocumentStore
from .provider import DocumentStore
from .sql_provider import SqlDocumentStore

_store: Optional[DocumentStore] = None
_read_model: Optional[ReadModel] = None


def get_store() -> DocumentStore:
    """
    Get the document store based on configuration.
    Uses the SQL store unless STORE_PROVIDER=memory (local runs without a database).
    """
    global _store
    if _store is None:
        if settings.store_provider == "memory":
            _store = InMemoryDocumentStore(settings.namespace)
        else:
            _store = SqlDocumentStore(SessionLocal, settings.namespace)
    return _store


def get_read_model() -> ReadModel:
    global _read_model
    if _read_model is None:
        _read_model = ReadModel(get_store())
    return _read_model


def reset() -> None:
    global _store, _read_model
    if _read_model is not None:
        _read_model.close()
    _store = None
    _read_model = None
