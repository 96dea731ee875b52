"""
Shared in-memory view of the namespace.

One subscription per collection feeds every summary view, instead of each view
re-reading the store on its own.
"""
import copy
import threading
from dataclasses import dataclass, field
from functools import partial
from typing import Callable, Dict, List

import structlog

from ..models.domain import (
    ACTIVITY_NAMES_DOC,
    ACTIVITY_RECORDS,
    APP_SETTINGS,
    CATEGORIES_DOC,
    CONTRACTS,
    SUDS_TYPES,
)
from ..store.provider import DocumentStore
from .assets import sort_by_order

logger = structlog.get_logger(__name__)

WATCHED = (SUDS_TYPES, CONTRACTS, ACTIVITY_RECORDS, APP_SETTINGS)


@dataclass(frozen=True)
class DashboardSnapshot:
    assets: List[dict] = field(default_factory=list)
    contracts: List[dict] = field(default_factory=list)
    records: List[dict] = field(default_factory=list)
    categories: List[str] = field(default_factory=list)
    defined_names: Dict[str, List[str]] = field(default_factory=dict)

    def asset(self, asset_id: str):
        return next((a for a in self.assets if a["id"] == asset_id), None)

    def contract(self, contract_id: str):
        return next((c for c in self.contracts if c["id"] == contract_id), None)


class ReadModel:
    def __init__(self, store: DocumentStore):
        self._lock = threading.Lock()
        self._docs: Dict[str, List[dict]] = {c: [] for c in WATCHED}
        self._version = 0
        self._unsubscribers: List[Callable[[], None]] = []
        for collection in WATCHED:
            self._unsubscribers.append(store.subscribe(collection, partial(self._on_change, collection)))

    def _on_change(self, collection: str, docs: List[dict]) -> None:
        with self._lock:
            self._docs[collection] = docs
            self._version += 1
        logger.debug("read_model_refreshed", collection=collection, documents=len(docs))

    @property
    def version(self) -> int:
        return self._version

    def snapshot(self) -> DashboardSnapshot:
        with self._lock:
            docs = copy.deepcopy(self._docs)
        assets = docs[SUDS_TYPES]
        sort_by_order(assets)
        settings_docs = {d["id"]: d for d in docs[APP_SETTINGS]}
        categories = list((settings_docs.get(CATEGORIES_DOC) or {}).get("categories") or [])
        names_doc = dict(settings_docs.get(ACTIVITY_NAMES_DOC) or {})
        names_doc.pop("id", None)
        return DashboardSnapshot(
            assets=assets,
            contracts=docs[CONTRACTS],
            records=docs[ACTIVITY_RECORDS],
            categories=categories,
            defined_names={cat: list(names or []) for cat, names in names_doc.items()},
        )

    def close(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
