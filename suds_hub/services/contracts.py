from datetime import date, datetime
from typing import Any, Dict, List, Optional

import structlog

from ..errors import DuplicateError, NotFoundError, ValidationInputError
from ..models.domain import CONTRACTS, utcnow_iso
from ..store.provider import DocumentStore

logger = structlog.get_logger(__name__)

TEXT_FIELDS = ("name", "responsible", "summary", "logoUrl")
DATE_FIELDS = ("startDate", "endDate")


def _parse_date(value: Any, key: str) -> Optional[date]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        raise ValidationInputError(f"Contract {key} must be a YYYY-MM-DD date")


def _check_date_range(start: Any, end: Any) -> None:
    start, end = _parse_date(start, "startDate"), _parse_date(end, "endDate")
    if start and end and end < start:
        raise ValidationInputError("Contract end date precedes its start date")


def _clean_fields(data: Dict[str, Any], partial: bool) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for key in TEXT_FIELDS:
        if key not in data:
            continue
        value = data[key]
        value = str(value).strip() if value is not None else None
        if key == "name" and not value:
            raise ValidationInputError("Contract name is required")
        out[key] = value or (None if key == "logoUrl" else "")
    for key in DATE_FIELDS:
        if key in data:
            parsed = _parse_date(data[key], key)
            out[key] = parsed.isoformat() if parsed else None
    if not partial and "name" not in out:
        raise ValidationInputError("Contract name is required")
    _check_date_range(out.get("startDate"), out.get("endDate"))
    return out


def _ensure_unique_name(store: DocumentStore, name: str, exclude_id: Optional[str] = None) -> None:
    # Activity records point at contracts by name, so two contracts may not share one
    clash = store.query(CONTRACTS, lambda d: d.get("name") == name and d["id"] != exclude_id)
    if clash:
        raise DuplicateError(f"Contract '{name}' already exists")


def list_contracts(store: DocumentStore) -> List[dict]:
    return sorted(store.query(CONTRACTS), key=lambda d: (d.get("name") or "").lower())


def get_contract(store: DocumentStore, contract_id: str) -> dict:
    doc = store.get(CONTRACTS, contract_id)
    if doc is None:
        raise NotFoundError(f"Contract '{contract_id}' not found")
    return doc


def add_contract(store: DocumentStore, data: Dict[str, Any], actor_id: Optional[str] = None) -> dict:
    fields = _clean_fields(data, partial=False)
    _ensure_unique_name(store, fields["name"])
    fields.setdefault("responsible", "")
    fields.setdefault("summary", "")
    fields["lastUpdatedBy"] = actor_id
    fields["timestamp"] = utcnow_iso()
    contract_id = store.add(CONTRACTS, fields)
    logger.info("contract_added", contract_id=contract_id, name=fields["name"])
    return {"id": contract_id, **fields}


def update_contract(store: DocumentStore, contract_id: str, patch: Dict[str, Any], actor_id: Optional[str] = None) -> dict:
    """Merge ``patch`` into the contract.

    A rename is not propagated to ``involvedContracts`` of existing records.
    """
    current = get_contract(store, contract_id)
    fields = _clean_fields(patch, partial=True)
    merged = {**current, **fields}
    _check_date_range(merged.get("startDate"), merged.get("endDate"))
    if "name" in fields and fields["name"] != current.get("name"):
        _ensure_unique_name(store, fields["name"], exclude_id=contract_id)
    fields["lastUpdatedBy"] = actor_id
    fields["timestamp"] = utcnow_iso()
    store.update(CONTRACTS, contract_id, fields)
    return {**current, **fields}


def delete_contract(store: DocumentStore, contract_id: str) -> None:
    get_contract(store, contract_id)
    store.delete(CONTRACTS, contract_id)
    logger.info("contract_deleted", contract_id=contract_id)
