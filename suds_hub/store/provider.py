"""
Document store interface.

Documents are plain dicts addressed by (collection, id) under one namespace.
Every write goes through a batch: single-document writes are batches of one,
so providers only implement reads and an atomic ``_commit``.
"""
import threading
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

import structlog

from ..errors import ValidationInputError

logger = structlog.get_logger(__name__)

Predicate = Callable[[Dict[str, Any]], bool]
Listener = Callable[[List[Dict[str, Any]]], None]


def new_document_id() -> str:
    return uuid.uuid4().hex[:20]


@dataclass
class WriteOp:
    kind: str  # add | set | update | delete
    collection: str
    doc_id: str
    fields: Dict[str, Any] = field(default_factory=dict)
    merge: bool = False


class WriteBatch:
    """Collects writes and applies them all-or-nothing on commit."""

    def __init__(self, store: "DocumentStore"):
        self._store = store
        self._ops: List[WriteOp] = []
        self._committed = False

    def add(self, collection: str, fields: Dict[str, Any]) -> str:
        doc_id = new_document_id()
        self._ops.append(WriteOp("add", collection, doc_id, dict(fields)))
        return doc_id

    def set(self, collection: str, doc_id: str, fields: Dict[str, Any], merge: bool = False) -> "WriteBatch":
        self._ops.append(WriteOp("set", collection, doc_id, dict(fields), merge))
        return self

    def update(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> "WriteBatch":
        self._ops.append(WriteOp("update", collection, doc_id, dict(fields)))
        return self

    def delete(self, collection: str, doc_id: str) -> "WriteBatch":
        self._ops.append(WriteOp("delete", collection, doc_id))
        return self

    def __len__(self) -> int:
        return len(self._ops)

    def commit(self) -> None:
        if self._committed:
            raise ValidationInputError("Batch already committed")
        self._committed = True
        if not self._ops:
            return
        self._store._commit(list(self._ops))
        self._store._notify({op.collection for op in self._ops})


class DocumentStore:
    def __init__(self, namespace: str):
        self.namespace = namespace
        self._listeners: Dict[str, List[Listener]] = {}
        self._listeners_lock = threading.Lock()

    # ---- reads (provider specific) ----
    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    def query(self, collection: str, predicate: Optional[Predicate] = None) -> List[Dict[str, Any]]:
        raise NotImplementedError

    def _commit(self, ops: List[WriteOp]) -> None:
        raise NotImplementedError

    # ---- writes ----
    def batch(self) -> WriteBatch:
        return WriteBatch(self)

    def add(self, collection: str, fields: Dict[str, Any]) -> str:
        b = self.batch()
        doc_id = b.add(collection, fields)
        b.commit()
        return doc_id

    def set(self, collection: str, doc_id: str, fields: Dict[str, Any], merge: bool = False) -> None:
        self.batch().set(collection, doc_id, fields, merge=merge).commit()

    def update(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> None:
        self.batch().update(collection, doc_id, fields).commit()

    def delete(self, collection: str, doc_id: str) -> None:
        self.batch().delete(collection, doc_id).commit()

    # ---- change notification ----
    def subscribe(self, collection: str, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` for ``collection``.

        The listener receives the full current snapshot right away and again
        after every committed write touching the collection, until the returned
        callable is invoked.
        """
        with self._listeners_lock:
            self._listeners.setdefault(collection, []).append(listener)
        listener(self.query(collection))

        def _unsubscribe() -> None:
            with self._listeners_lock:
                conns = self._listeners.get(collection)
                if conns and listener in conns:
                    conns.remove(listener)
                    if not conns:
                        self._listeners.pop(collection, None)

        return _unsubscribe

    def _notify(self, collections) -> None:
        for collection in sorted(collections):
            with self._listeners_lock:
                targets = list(self._listeners.get(collection, []))
            if not targets:
                continue
            snapshot = self.query(collection)
            for listener in targets:
                try:
                    listener(snapshot)
                except Exception as e:
                    # best-effort; the write is already committed
                    logger.warning("store_listener_failed", collection=collection, error=str(e))
