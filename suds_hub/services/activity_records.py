"""
Activity records: one per (SUDS type, category, activity name) that was ever
marked as applying.

Any edit of the proposal fields puts the record back to ``pending`` validation;
validation itself is recorded without triggering that reset.
"""
from typing import Any, List, Optional

import structlog

from ..errors import NotFoundError, ValidationInputError
from ..models.domain import (
    ACTIVITY_RECORDS,
    SUDS_TYPES,
    ProposalStatus,
    ValidationStatus,
    is_known_status,
    utcnow_iso,
)
from ..store.provider import DocumentStore
from . import taxonomy

logger = structlog.get_logger(__name__)

EDITABLE_FIELDS = ("status", "comment", "frequency", "involvedContracts", "dependentActivities")


def new_record_fields(asset_id: str, category: str, activity_name: str, actor_id: Optional[str]) -> dict:
    return {
        "sudsTypeId": asset_id,
        "category": category,
        "activityName": activity_name,
        "applies": True,
        "status": ProposalStatus.UNSET.value,
        "comment": "",
        "frequency": "",
        "involvedContracts": [],
        "dependentActivities": [],
        "validationStatus": ValidationStatus.PENDING.value,
        "validatorComment": "",
        "validatedBy": None,
        "lastUpdatedBy": actor_id,
        "timestamp": utcnow_iso(),
    }


def _unique_strings(value: Any, label: str) -> List[str]:
    if not isinstance(value, (list, tuple, set)):
        raise ValidationInputError(f"{label} must be a list")
    out: List[str] = []
    for item in value:
        if not isinstance(item, str) or not item.strip():
            raise ValidationInputError(f"{label} must contain non-empty strings")
        item = item.strip()
        if item not in out:
            out.append(item)
    return out


def _clean_value(field: str, value: Any) -> Any:
    if field == "status":
        if not isinstance(value, str) or not is_known_status(value):
            raise ValidationInputError(f"Unknown status '{value}'")
        return value.strip()
    if field in ("comment", "frequency"):
        if value is None:
            return ""
        if not isinstance(value, str):
            raise ValidationInputError(f"{field} must be text")
        return value.strip()
    if field == "involvedContracts":
        return _unique_strings(value, "involvedContracts")
    if field == "dependentActivities":
        return _unique_strings(value, "dependentActivities")
    raise ValidationInputError(f"Field '{field}' cannot be edited")


def find_record(store: DocumentStore, asset_id: str, category: str, activity_name: str) -> Optional[dict]:
    matches = store.query(
        ACTIVITY_RECORDS,
        lambda d: d.get("sudsTypeId") == asset_id
        and d.get("category") == category
        and d.get("activityName") == activity_name,
    )
    return matches[0] if matches else None


def get_record(store: DocumentStore, record_id: str) -> dict:
    doc = store.get(ACTIVITY_RECORDS, record_id)
    if doc is None:
        raise NotFoundError(f"Activity record '{record_id}' not found")
    return doc


def list_records(store: DocumentStore, asset_id: Optional[str] = None) -> List[dict]:
    if asset_id is None:
        return store.query(ACTIVITY_RECORDS)
    return store.query(ACTIVITY_RECORDS, lambda d: d.get("sudsTypeId") == asset_id)


def set_applies(
    store: DocumentStore,
    asset_id: str,
    category: str,
    activity_name: str,
    applies: bool,
    actor_id: Optional[str] = None,
) -> Optional[dict]:
    """Toggle whether an activity applies to a SUDS type.

    The first ``applies=True`` creates the record; switching it off keeps the
    record (and its comment/frequency history) but hides it from every view.
    Returns the record, or None when turning off an activity that never had one.
    """
    category = (category or "").strip()
    activity_name = (activity_name or "").strip()
    if not category or not activity_name:
        raise ValidationInputError("Category and activity name are required")
    if store.get(SUDS_TYPES, asset_id) is None:
        raise NotFoundError(f"SUDS type '{asset_id}' not found")
    taxonomy.require_category(store, category)
    # Records are keyed by the defined spelling so pivot columns and cascades find them
    names = taxonomy.get_defined_names(store).get(category, [])
    activity_name = names[taxonomy.find_activity(names, activity_name)]

    existing = find_record(store, asset_id, category, activity_name)
    if existing is None:
        if not applies:
            return None
        fields = new_record_fields(asset_id, category, activity_name, actor_id)
        record_id = store.add(ACTIVITY_RECORDS, fields)
        logger.info("activity_record_created", record_id=record_id, asset_id=asset_id, category=category, activity=activity_name)
        return {"id": record_id, **fields}

    if bool(existing.get("applies")) == bool(applies):
        return existing
    store.update(ACTIVITY_RECORDS, existing["id"], {"applies": bool(applies)})
    existing["applies"] = bool(applies)
    return existing


def update_field(store: DocumentStore, record_id: str, field: str, value: Any, actor_id: Optional[str] = None) -> dict:
    record = get_record(store, record_id)
    if field not in EDITABLE_FIELDS:
        raise ValidationInputError(f"Field '{field}' cannot be edited")
    fields = {
        field: _clean_value(field, value),
        "validationStatus": ValidationStatus.PENDING.value,
        "lastUpdatedBy": actor_id,
        "timestamp": utcnow_iso(),
    }
    store.update(ACTIVITY_RECORDS, record_id, fields)
    return {**record, **fields}


def set_validation(
    store: DocumentStore,
    record_id: str,
    status: str,
    comment: str = "",
    validator_id: Optional[str] = None,
) -> dict:
    record = get_record(store, record_id)
    try:
        status = ValidationStatus(status).value
    except ValueError:
        raise ValidationInputError(f"Unknown validation status '{status}'")
    fields = {
        "validationStatus": status,
        "validatorComment": (comment or "").strip(),
        "validatedBy": validator_id,
    }
    store.update(ACTIVITY_RECORDS, record_id, fields)
    logger.info("activity_record_validated", record_id=record_id, status=status)
    return {**record, **fields}
