"""
In-memory document store for development and tests.
Keeps every collection in process; nothing survives a restart.
"""
import copy
import threading
from typing import Any, Dict, List, Optional

from ..errors import NotFoundError
from .provider import DocumentStore, Predicate, WriteOp


class InMemoryDocumentStore(DocumentStore):
    def __init__(self, namespace: str = "default-app-id"):
        super().__init__(namespace)
        # collection -> doc_id -> fields
        self._data: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._lock = threading.RLock()

    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            doc = self._data.get(collection, {}).get(doc_id)
            if doc is None:
                return None
            return {"id": doc_id, **copy.deepcopy(doc)}

    def query(self, collection: str, predicate: Optional[Predicate] = None) -> List[Dict[str, Any]]:
        with self._lock:
            docs = [{"id": doc_id, **copy.deepcopy(fields)} for doc_id, fields in self._data.get(collection, {}).items()]
        if predicate is not None:
            docs = [d for d in docs if predicate(d)]
        return docs

    def _commit(self, ops: List[WriteOp]) -> None:
        with self._lock:
            # Apply to a working copy and swap it in only if every op succeeded
            staged = copy.deepcopy(self._data)
            for op in ops:
                self._apply_op(staged, op)
            self._data = staged

    def _apply_op(self, data: Dict[str, Dict[str, Dict[str, Any]]], op: WriteOp) -> None:
        docs = data.setdefault(op.collection, {})
        fields = {k: v for k, v in copy.deepcopy(op.fields).items() if k != "id"}
        if op.kind in ("add", "set"):
            if op.merge and op.doc_id in docs:
                docs[op.doc_id].update(fields)
            else:
                docs[op.doc_id] = fields
        elif op.kind == "update":
            if op.doc_id not in docs:
                raise NotFoundError(f"No document to update: {op.collection}/{op.doc_id}")
            docs[op.doc_id].update(fields)
        elif op.kind == "delete":
            docs.pop(op.doc_id, None)
        else:
            raise ValueError(f"Unknown write op: {op.kind}")
