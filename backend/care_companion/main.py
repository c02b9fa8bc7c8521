import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from care_companion.api.routes.care_routes import router as care_routes
from care_companion.core.config import settings
from care_companion.services.ai_service import CareAI
from care_companion.services.care_store import CareStore
from care_companion.services.storage import JsonFileStorage

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def create_app(store: Optional[CareStore] = None, ai: Optional[CareAI] = None) -> FastAPI:
    app = FastAPI(
        title="Care Companion",
        description="Prescription scanning, dose scheduling and adherence tracking",
        version="1.0.0"
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # one store per process, rehydrated from disk at construction
    app.state.care_store = store or CareStore(
        JsonFileStorage(settings.CARE_STORAGE_PATH, settings.CARE_STORAGE_NAME)
    )
    app.state.care_ai = ai or CareAI()

    app.include_router(care_routes)

    @app.get("/health")
    async def health():
        state = app.state.care_store.state
        return {
            "status": "ok",
            "medicines": len(state.medicines),
            "doses": len(state.doses),
            "time": datetime.now(timezone.utc).isoformat(),
        }

    logger.info("Care store ready with %d medicines", len(app.state.care_store.state.medicines))
    return app


app = create_app()
