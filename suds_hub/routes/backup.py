from typing import Any, Dict

from fastapi import APIRouter, Body, Depends

from ..auth.security import get_current_actor
from ..services import backup as backup_service
from ..store.factory import get_store
from ..store.provider import DocumentStore

router = APIRouter(prefix="/backup", tags=["backup"])


@router.get("/export")
def export_backup(store: DocumentStore = Depends(get_store), actor: str = Depends(get_current_actor)):
    return backup_service.export_namespace(store)


@router.post("/import")
def import_backup(
    document: Dict[str, Any] = Body(...),
    store: DocumentStore = Depends(get_store),
    actor: str = Depends(get_current_actor),
):
    return {"imported": backup_service.import_namespace(store, document)}
