from typing import Optional

from fastapi import APIRouter, Depends, Query, Response

from ..auth.security import get_current_actor
from ..schemas.activities import AppliesRequest, FieldUpdate, ValidationRequest
from ..services import activity_records as record_service
from ..store.factory import get_store
from ..store.provider import DocumentStore

router = APIRouter(prefix="/activities", tags=["activities"])


@router.put("/applies")
def set_applies(payload: AppliesRequest, store: DocumentStore = Depends(get_store), actor: str = Depends(get_current_actor)):
    record = record_service.set_applies(
        store,
        payload.sudsTypeId,
        payload.category,
        payload.activityName,
        payload.applies,
        actor_id=actor,
    )
    if record is None:
        return Response(status_code=204)
    return record


@router.get("")
def list_records(
    suds_type_id: Optional[str] = Query(default=None, alias="sudsTypeId"),
    store: DocumentStore = Depends(get_store),
    actor: str = Depends(get_current_actor),
):
    return record_service.list_records(store, suds_type_id)


@router.get("/{record_id}")
def get_record(record_id: str, store: DocumentStore = Depends(get_store), actor: str = Depends(get_current_actor)):
    return record_service.get_record(store, record_id)


@router.patch("/{record_id}")
def update_field(
    record_id: str,
    payload: FieldUpdate,
    store: DocumentStore = Depends(get_store),
    actor: str = Depends(get_current_actor),
):
    return record_service.update_field(store, record_id, payload.field, payload.value, actor_id=actor)


@router.post("/{record_id}/validation")
def set_validation(
    record_id: str,
    payload: ValidationRequest,
    store: DocumentStore = Depends(get_store),
    actor: str = Depends(get_current_actor),
):
    return record_service.set_validation(store, record_id, payload.status.value, payload.comment, validator_id=actor)
