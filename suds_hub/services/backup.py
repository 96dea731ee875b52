"""
Whole-namespace export and import.

An import replaces the four collections in a single batch, so a failed import
leaves the previous contents untouched.
"""
from typing import Any, Dict, List

import structlog

from ..errors import ValidationInputError
from ..models.domain import ACTIVITY_RECORDS, APP_SETTINGS, CONTRACTS, SUDS_TYPES, utcnow_iso
from ..store.provider import DocumentStore

logger = structlog.get_logger(__name__)

LIST_COLLECTIONS = (SUDS_TYPES, CONTRACTS, ACTIVITY_RECORDS)


def export_namespace(store: DocumentStore) -> Dict[str, Any]:
    out: Dict[str, Any] = {c: store.query(c) for c in LIST_COLLECTIONS}
    out[APP_SETTINGS] = {}
    for doc in store.query(APP_SETTINGS):
        fields = dict(doc)
        out[APP_SETTINGS][fields.pop("id")] = fields
    out["exportedAt"] = utcnow_iso()
    return out


def _validated(document: Any) -> Dict[str, Any]:
    if not isinstance(document, dict):
        raise ValidationInputError("Backup must be a JSON object")
    for collection in LIST_COLLECTIONS:
        docs = document.get(collection, [])
        if not isinstance(docs, list):
            raise ValidationInputError(f"'{collection}' must be a list")
        seen = set()
        for doc in docs:
            if not isinstance(doc, dict) or not isinstance(doc.get("id"), str) or not doc["id"]:
                raise ValidationInputError(f"Every document in '{collection}' needs a string id")
            if doc["id"] in seen:
                raise ValidationInputError(f"Duplicate id '{doc['id']}' in '{collection}'")
            seen.add(doc["id"])
    app_settings = document.get(APP_SETTINGS, {})
    if not isinstance(app_settings, dict) or not all(isinstance(v, dict) for v in app_settings.values()):
        raise ValidationInputError(f"'{APP_SETTINGS}' must map document ids to objects")
    return document


def import_namespace(store: DocumentStore, document: Any) -> Dict[str, int]:
    """Replace every document of the namespace with the ones in ``document``.

    Returns the number of imported documents per collection.
    """
    document = _validated(document)
    batch = store.batch()
    for collection in LIST_COLLECTIONS + (APP_SETTINGS,):
        for existing in store.query(collection):
            batch.delete(collection, existing["id"])

    counts: Dict[str, int] = {}
    for collection in LIST_COLLECTIONS:
        docs: List[dict] = document.get(collection, [])
        for doc in docs:
            fields = {k: v for k, v in doc.items() if k != "id"}
            batch.set(collection, doc["id"], fields)
        counts[collection] = len(docs)
    for doc_id, fields in document.get(APP_SETTINGS, {}).items():
        batch.set(APP_SETTINGS, doc_id, fields)
    counts[APP_SETTINGS] = len(document.get(APP_SETTINGS, {}))

    batch.commit()
    logger.info("namespace_imported", namespace=store.namespace, **counts)
    return counts
