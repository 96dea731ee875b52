from typing import Any, Dict, Iterable, List, Optional

import structlog

from ..errors import NotFoundError, ValidationInputError
from ..models.domain import LOCATION_TAG_IDS, LOCATION_TAGS, SUDS_TYPES, Direction, utcnow_iso
from ..store.provider import DocumentStore
from . import reordering

logger = structlog.get_logger(__name__)

EDITABLE_FIELDS = ("name", "description", "imageUrls", "locationTypes", "order")


def location_tags() -> List[dict]:
    return [dict(t) for t in LOCATION_TAGS]


def _has_order(doc: dict) -> bool:
    return isinstance(doc.get("order"), int) and not isinstance(doc.get("order"), bool)


def _clean_fields(data: Dict[str, Any], partial: bool) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for key in EDITABLE_FIELDS:
        if key not in data:
            continue
        value = data[key]
        if key in ("name", "description"):
            value = (value or "").strip()
            if not value:
                raise ValidationInputError(f"Asset {key} is required")
        elif key == "imageUrls":
            value = [u.strip() for u in (value or []) if u and u.strip()]
            if len(value) > 1:
                raise ValidationInputError("An asset holds at most one image URL")
        elif key == "locationTypes":
            tags: List[str] = []
            for tag in value or []:
                if tag not in LOCATION_TAG_IDS:
                    raise ValidationInputError(f"Unknown location type '{tag}'")
                if tag not in tags:
                    tags.append(tag)
            value = tags
        elif key == "order":
            if not isinstance(value, int) or isinstance(value, bool):
                raise ValidationInputError("Asset order must be an integer")
        out[key] = value
    if not partial:
        for key in ("name", "description"):
            if key not in out:
                raise ValidationInputError(f"Asset {key} is required")
    return out


def sort_by_order(docs: List[dict]) -> List[dict]:
    """Give every asset without an order its snapshot index, then sort.

    Returns the assets whose order was assigned; ``docs`` is sorted in place.
    """
    repaired = []
    for index, doc in enumerate(docs):
        if not _has_order(doc):
            doc["order"] = index
            repaired.append(doc)
    docs.sort(key=lambda d: d["order"])
    return repaired


def list_assets(store: DocumentStore, location_types: Optional[Iterable[str]] = None) -> List[dict]:
    """Assets sorted by ``order``.

    Assets stored without an order get their index in the snapshot and the
    assignment is written back, so the repair happens once.
    """
    docs = store.query(SUDS_TYPES)
    repaired = sort_by_order(docs)
    if repaired:
        batch = store.batch()
        for doc in repaired:
            batch.update(SUDS_TYPES, doc["id"], {"order": doc["order"]})
        batch.commit()
        logger.info("asset_order_repaired", assets=len(repaired))

    wanted = set(location_types or [])
    if wanted:
        docs = [d for d in docs if wanted.intersection(d.get("locationTypes") or [])]
    return docs


def get_asset(store: DocumentStore, asset_id: str) -> dict:
    doc = store.get(SUDS_TYPES, asset_id)
    if doc is None:
        raise NotFoundError(f"SUDS type '{asset_id}' not found")
    return doc


def add_asset(store: DocumentStore, data: Dict[str, Any], actor_id: Optional[str] = None) -> dict:
    fields = _clean_fields(data, partial=False)
    fields.setdefault("imageUrls", [])
    fields.setdefault("locationTypes", [])
    if "order" not in fields:
        existing = store.query(SUDS_TYPES)
        orders = [d["order"] for d in existing if _has_order(d)]
        fields["order"] = max(len(existing), max(orders) + 1 if orders else 0)
    fields["lastUpdatedBy"] = actor_id
    fields["timestamp"] = utcnow_iso()
    asset_id = store.add(SUDS_TYPES, fields)
    logger.info("asset_added", asset_id=asset_id, name=fields["name"], order=fields["order"])
    return {"id": asset_id, **fields}


def update_asset(store: DocumentStore, asset_id: str, patch: Dict[str, Any], actor_id: Optional[str] = None) -> dict:
    current = get_asset(store, asset_id)
    fields = _clean_fields(patch, partial=True)
    fields["lastUpdatedBy"] = actor_id
    fields["timestamp"] = utcnow_iso()
    store.update(SUDS_TYPES, asset_id, fields)
    return {**current, **fields}


def delete_asset(store: DocumentStore, asset_id: str) -> None:
    # Activity records of the asset are left in place; views only walk live assets
    get_asset(store, asset_id)
    store.delete(SUDS_TYPES, asset_id)
    logger.info("asset_deleted", asset_id=asset_id)


def move_asset(store: DocumentStore, asset_id: str, direction: Direction) -> List[dict]:
    assets = list_assets(store)
    if not any(a["id"] == asset_id for a in assets):
        raise NotFoundError(f"SUDS type '{asset_id}' not found")
    moved = reordering.move(assets, asset_id, direction, key_fn=lambda a: a["id"])
    if moved is None:
        return assets
    reordered, i, j = moved
    before = {a["id"]: a["order"] for a in assets}
    first, second = assets[i], assets[j]
    first["order"], second["order"] = second["order"], first["order"]

    # Shared orders cannot express the swap; bump later assets until orders strictly increase
    previous = None
    for asset in reordered:
        if previous is not None and asset["order"] <= previous:
            asset["order"] = previous + 1
        previous = asset["order"]

    changed = [a for a in reordered if a["order"] != before[a["id"]]]
    if changed:
        batch = store.batch()
        for asset in changed:
            batch.update(SUDS_TYPES, asset["id"], {"order": asset["order"]})
        batch.commit()
    if len(changed) > 2:
        logger.info("asset_order_renumbered", asset_id=asset_id, assets=len(changed))
    return reordered
