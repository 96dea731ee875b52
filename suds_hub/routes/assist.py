from fastapi import APIRouter, Depends

from ..auth.security import get_current_actor
from ..schemas.assist import ActivityAnalysisRequest, AssetDescriptionRequest, AssistResponse
from ..services import assets as asset_service
from ..services.text_completion import TextCompletionClient, draft_activity_analysis, draft_asset_description
from ..store.factory import get_store
from ..store.provider import DocumentStore

router = APIRouter(prefix="/assist", tags=["assist"])


def get_text_client() -> TextCompletionClient:
    return TextCompletionClient()


@router.post("/asset-description", response_model=AssistResponse)
def asset_description(
    payload: AssetDescriptionRequest,
    client: TextCompletionClient = Depends(get_text_client),
    actor: str = Depends(get_current_actor),
):
    return AssistResponse(text=draft_asset_description(client, payload.name, payload.locationTypes))


@router.post("/activity-analysis", response_model=AssistResponse)
def activity_analysis(
    payload: ActivityAnalysisRequest,
    store: DocumentStore = Depends(get_store),
    client: TextCompletionClient = Depends(get_text_client),
    actor: str = Depends(get_current_actor),
):
    asset = asset_service.get_asset(store, payload.sudsTypeId)
    return AssistResponse(text=draft_activity_analysis(client, asset, payload.category, payload.activityName))
