from fastapi import APIRouter

from ..config import settings
from ..logging import structlog
from ..schemas.auth import AnonymousSessionResponse
from .security import create_access_token, new_actor_id


router = APIRouter(prefix="/auth", tags=["auth"])
logger = structlog.get_logger(__name__)


@router.post("/anonymous", response_model=AnonymousSessionResponse)
def anonymous_session():
    actor_id = new_actor_id()
    logger.info("anonymous_session_started", actor_id=actor_id)
    return AnonymousSessionResponse(
        actor_id=actor_id,
        access_token=create_access_token(actor_id),
        expires_in=settings.jwt_ttl_seconds,
    )
