from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from ..auth.security import get_current_actor
from ..schemas.assets import AssetCreate, AssetUpdate, LocationTag
from ..schemas.common import MoveRequest
from ..services import assets as asset_service
from ..store.factory import get_store
from ..store.provider import DocumentStore

router = APIRouter(prefix="/assets", tags=["assets"])


@router.get("/location-tags", response_model=List[LocationTag])
def location_tags(actor: str = Depends(get_current_actor)):
    return asset_service.location_tags()


@router.get("")
def list_assets(
    location_type: Optional[List[str]] = Query(default=None),
    store: DocumentStore = Depends(get_store),
    actor: str = Depends(get_current_actor),
):
    return asset_service.list_assets(store, location_type)


@router.post("", status_code=201)
def create_asset(payload: AssetCreate, store: DocumentStore = Depends(get_store), actor: str = Depends(get_current_actor)):
    data = payload.model_dump(exclude_none=True)
    return asset_service.add_asset(store, data, actor_id=actor)


@router.get("/{asset_id}")
def get_asset(asset_id: str, store: DocumentStore = Depends(get_store), actor: str = Depends(get_current_actor)):
    return asset_service.get_asset(store, asset_id)


@router.patch("/{asset_id}")
def update_asset(
    asset_id: str,
    payload: AssetUpdate,
    store: DocumentStore = Depends(get_store),
    actor: str = Depends(get_current_actor),
):
    return asset_service.update_asset(store, asset_id, payload.model_dump(exclude_unset=True), actor_id=actor)


@router.delete("/{asset_id}", status_code=204)
def delete_asset(asset_id: str, store: DocumentStore = Depends(get_store), actor: str = Depends(get_current_actor)):
    asset_service.delete_asset(store, asset_id)


@router.post("/{asset_id}/move")
def move_asset(
    asset_id: str,
    payload: MoveRequest,
    store: DocumentStore = Depends(get_store),
    actor: str = Depends(get_current_actor),
):
    return asset_service.move_asset(store, asset_id, payload.direction)
