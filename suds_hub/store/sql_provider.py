"""
SQLAlchemy-backed document store.
Each document is one row of the ``documents`` table; a batch is one transaction.
"""
from typing import Any, Callable, Dict, List, Optional

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import NotFoundError, ServiceError
from ..models.models import Document
from .provider import DocumentStore, Predicate, WriteOp

logger = structlog.get_logger(__name__)


class SqlDocumentStore(DocumentStore):
    def __init__(self, session_factory: Callable[[], Session], namespace: str):
        super().__init__(namespace)
        self._session_factory = session_factory

    def _row(self, db: Session, collection: str, doc_id: str) -> Optional[Document]:
        return db.query(Document).filter(
            Document.namespace == self.namespace,
            Document.collection == collection,
            Document.doc_id == doc_id,
        ).first()

    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        db = self._session_factory()
        try:
            row = self._row(db, collection, doc_id)
            if row is None:
                return None
            return {"id": row.doc_id, **(row.data or {})}
        except SQLAlchemyError as e:
            logger.warning("store_read_failed", collection=collection, doc_id=doc_id, error=str(e))
            raise ServiceError(f"Document store read failed: {e}")
        finally:
            db.close()

    def query(self, collection: str, predicate: Optional[Predicate] = None) -> List[Dict[str, Any]]:
        db = self._session_factory()
        try:
            rows = db.query(Document).filter(
                Document.namespace == self.namespace,
                Document.collection == collection,
            ).order_by(Document.created_at.asc()).all()
            docs = [{"id": r.doc_id, **(r.data or {})} for r in rows]
        except SQLAlchemyError as e:
            logger.warning("store_read_failed", collection=collection, error=str(e))
            raise ServiceError(f"Document store read failed: {e}")
        finally:
            db.close()
        if predicate is not None:
            docs = [d for d in docs if predicate(d)]
        return docs

    def _commit(self, ops: List[WriteOp]) -> None:
        db = self._session_factory()
        try:
            for op in ops:
                self._apply_op(db, op)
            db.commit()
        except NotFoundError:
            db.rollback()
            raise
        except SQLAlchemyError as e:
            db.rollback()
            logger.warning("store_commit_failed", ops=len(ops), error=str(e))
            raise ServiceError(f"Document store write failed: {e}")
        finally:
            db.close()

    def _apply_op(self, db: Session, op: WriteOp) -> None:
        fields = {k: v for k, v in op.fields.items() if k != "id"}
        row = self._row(db, op.collection, op.doc_id)
        if op.kind in ("add", "set"):
            if row is None:
                db.add(Document(namespace=self.namespace, collection=op.collection, doc_id=op.doc_id, data=fields))
            elif op.merge:
                # JSON columns only register reassignment, never in-place mutation
                row.data = {**(row.data or {}), **fields}
            else:
                row.data = fields
        elif op.kind == "update":
            if row is None:
                raise NotFoundError(f"No document to update: {op.collection}/{op.doc_id}")
            row.data = {**(row.data or {}), **fields}
        elif op.kind == "delete":
            if row is not None:
                db.delete(row)
        else:
            raise ValueError(f"Unknown write op: {op.kind}")
        # later ops in the same batch must see this one
        db.flush()
