from __future__ import annotations

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from jobtracker.api.deps import get_tracker_dep
from jobtracker.api.errors import register_error_handlers
from jobtracker.api.routes import router as api_router
from jobtracker.api.schemas import HealthResponse
from jobtracker.config import get_settings
from jobtracker.core.runtime import Tracker
from jobtracker.db.init import init_database


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(title=settings.app_name)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    @app.on_event("startup")
    def _startup() -> None:
        init_database()

    @app.get("/health", response_model=HealthResponse)
    def health(tracker: Tracker = Depends(get_tracker_dep)) -> HealthResponse:
        return HealthResponse(status="ok", row_counts=tracker.repo.row_counts())

    app.include_router(api_router)
    return app
