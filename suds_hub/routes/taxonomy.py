from fastapi import APIRouter, Depends

from ..auth.security import get_current_actor
from ..schemas.common import MoveRequest
from ..schemas.taxonomy import (
    ActivityNameCreate,
    ActivityNameRename,
    CascadeResult,
    CategoryCreate,
    TaxonomyResponse,
)
from ..services import taxonomy as taxonomy_service
from ..store.factory import get_store
from ..store.provider import DocumentStore

router = APIRouter(prefix="/taxonomy", tags=["taxonomy"])


@router.get("", response_model=TaxonomyResponse)
def get_taxonomy(store: DocumentStore = Depends(get_store), actor: str = Depends(get_current_actor)):
    return taxonomy_service.get_taxonomy(store)


@router.post("/categories", status_code=201, response_model=TaxonomyResponse)
def add_category(payload: CategoryCreate, store: DocumentStore = Depends(get_store), actor: str = Depends(get_current_actor)):
    taxonomy_service.add_category(store, payload.name)
    return taxonomy_service.get_taxonomy(store)


@router.delete("/categories/{name}", response_model=CascadeResult)
def delete_category(name: str, store: DocumentStore = Depends(get_store), actor: str = Depends(get_current_actor)):
    return CascadeResult(records=taxonomy_service.delete_category(store, name))


@router.post("/categories/{name}/move", response_model=TaxonomyResponse)
def move_category(
    name: str,
    payload: MoveRequest,
    store: DocumentStore = Depends(get_store),
    actor: str = Depends(get_current_actor),
):
    taxonomy_service.move_category(store, name, payload.direction)
    return taxonomy_service.get_taxonomy(store)


@router.post("/categories/{name}/activities", status_code=201, response_model=TaxonomyResponse)
def add_activity_name(
    name: str,
    payload: ActivityNameCreate,
    store: DocumentStore = Depends(get_store),
    actor: str = Depends(get_current_actor),
):
    taxonomy_service.add_activity_name(store, name, payload.name)
    return taxonomy_service.get_taxonomy(store)


@router.delete("/categories/{name}/activities/{activity}", response_model=CascadeResult)
def delete_activity_name(
    name: str,
    activity: str,
    store: DocumentStore = Depends(get_store),
    actor: str = Depends(get_current_actor),
):
    return CascadeResult(records=taxonomy_service.delete_activity_name(store, name, activity))


@router.patch("/categories/{name}/activities/{activity}", response_model=CascadeResult)
def rename_activity_name(
    name: str,
    activity: str,
    payload: ActivityNameRename,
    store: DocumentStore = Depends(get_store),
    actor: str = Depends(get_current_actor),
):
    return CascadeResult(records=taxonomy_service.rename_activity_name(store, name, activity, payload.name))


@router.post("/categories/{name}/activities/{activity}/move", response_model=TaxonomyResponse)
def move_activity_name(
    name: str,
    activity: str,
    payload: MoveRequest,
    store: DocumentStore = Depends(get_store),
    actor: str = Depends(get_current_actor),
):
    taxonomy_service.move_activity_name(store, name, activity, payload.direction)
    return taxonomy_service.get_taxonomy(store)
