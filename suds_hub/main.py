import os
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from .config import settings
from .db import Base, engine
from .errors import register_exception_handlers
from .logging import setup_logging, RequestIdMiddleware, structlog
from .models.domain import ACTIVITY_RECORDS, APP_SETTINGS, CONTRACTS, SUDS_TYPES
from .services.change_hub import hub
from .store.factory import get_read_model, get_store
from .auth.router import router as auth_router
from .routes.assets import router as assets_router
from .routes.contracts import router as contracts_router
from .routes.taxonomy import router as taxonomy_router
from .routes.activities import router as activities_router
from .routes.summary import router as summary_router
from .routes.assist import router as assist_router
from .routes.backup import router as backup_router
from .routes.changes import router as changes_router

# Register the documents table on Base.metadata
from .models import models  # noqa: F401

logger = structlog.get_logger(__name__)


def create_app() -> FastAPI:
    setup_logging()
    app = FastAPI(title=settings.app_name)

    # Middlewares
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit])
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    register_exception_handlers(app)

    # Routers
    app.include_router(auth_router)
    app.include_router(assets_router)
    app.include_router(contracts_router)
    app.include_router(taxonomy_router)
    app.include_router(activities_router)
    app.include_router(summary_router)
    app.include_router(assist_router)
    app.include_router(backup_router)
    app.include_router(changes_router)

    # Metrics
    Instrumentator().instrument(app).expose(app)

    @app.on_event("startup")
    def _startup():
        logger.info("startup", namespace=settings.namespace, store=settings.store_provider)
        if settings.store_provider == "sql":
            # Ensure local SQLite directory exists
            if settings.database_url.startswith("sqlite:///./"):
                os.makedirs("var", exist_ok=True)
            if settings.auto_create_db:
                Base.metadata.create_all(bind=engine)
        get_read_model()
        hub.watch(get_store(), (SUDS_TYPES, CONTRACTS, ACTIVITY_RECORDS, APP_SETTINGS))

    @app.on_event("shutdown")
    def _shutdown():
        hub.close()

    @app.get("/healthz")
    def healthz():
        return {"status": "ok", "namespace": settings.namespace}

    return app


app = create_app()
