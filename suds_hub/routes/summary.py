from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..auth.security import get_current_actor
from ..errors import NotFoundError
from ..services import aggregator
from ..services.read_model import ReadModel
from ..services.resolver import resolve_display_order
from ..store.factory import get_read_model

router = APIRouter(prefix="/summary", tags=["summary"])


@router.get("/assets/{asset_id}/activities")
def asset_activities(asset_id: str, read_model: ReadModel = Depends(get_read_model), actor: str = Depends(get_current_actor)):
    snapshot = read_model.snapshot()
    asset = snapshot.asset(asset_id)
    if asset is None:
        raise NotFoundError(f"SUDS type '{asset_id}' not found")
    resolved = resolve_display_order(asset_id, snapshot.records, snapshot.categories, snapshot.defined_names)
    return {
        "asset": asset,
        "activities": [
            {**entry.record, "isDependent": entry.is_dependent, "depth": entry.depth}
            for entry in resolved
        ],
    }


@router.get("/contracts/{contract_id}")
def contract_summary(contract_id: str, read_model: ReadModel = Depends(get_read_model), actor: str = Depends(get_current_actor)):
    return aggregator.contract_view(read_model.snapshot(), contract_id)


@router.get("/pivot")
def pivot(
    category: Optional[str] = Query(default=None),
    read_model: ReadModel = Depends(get_read_model),
    actor: str = Depends(get_current_actor),
):
    return aggregator.pivot_view(read_model.snapshot(), category=category)
