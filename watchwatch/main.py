from __future__ import annotations

import logging
from pathlib import Path

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from watchwatch.api import media
from watchwatch.api.v1.router import router as v1_router
from watchwatch.core import Settings, settings as default_settings
from watchwatch.core.logging import configure_logging
from watchwatch.realtime.hub import ConnectionHub
from watchwatch.runtime.store import RoomStore
from watchwatch.services.room_service import RoomService
from watchwatch.services.storage_service import StorageService

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, *, store: RoomStore | None = None) -> FastAPI:
    settings = settings or default_settings
    configure_logging(settings)

    app = FastAPI(title="watchwatch API", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    # One store per process; it lives as long as the app does.
    app.state.store = store or RoomStore(debounce_ms=settings.DEBOUNCE_MS)
    app.state.hub = ConnectionHub()
    app.state.room_service = RoomService(app.state.store, app.state.hub)
    app.state.storage = StorageService(
        storage_dir=settings.STORAGE_DIR,
        base_url=settings.STORAGE_BASE_URL,
        max_bytes=settings.MAX_UPLOAD_BYTES,
    )

    app.include_router(v1_router, prefix="/v1")
    app.include_router(media.make_router(settings.STORAGE_BASE_URL))

    if Path(settings.STATIC_DIR).is_dir():
        app.mount("/", StaticFiles(directory=settings.STATIC_DIR, html=True), name="static")

    return app


app = create_app()


def run() -> None:
    logger.info("watchwatch server starting on %s:%s", default_settings.HOST, default_settings.PORT)
    logger.info("uploads directory: %s", Path(default_settings.STORAGE_DIR).resolve())
    uvicorn.run(app, host=default_settings.HOST, port=default_settings.PORT, log_config=None)


if __name__ == "__main__":
    run()
