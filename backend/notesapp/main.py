"""
Notes API - FastAPI Application Entry Point.

Feature-based modular architecture:
  Each feature in notesapp/features/ has its own schemas, service and router.
  Adding a new feature = adding a new folder plus one include_router line.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from supabase import Client

from notesapp.config import get_settings
from notesapp.core.database import store_is_reachable
from notesapp.core.dependencies import get_db
from notesapp.core.exceptions import register_exception_handlers
from notesapp.background.scheduler import init_scheduler, shutdown_scheduler

# ── Feature Routers ──────────────────────────────────────
from notesapp.features.auth.router import router as auth_router
from notesapp.features.notes.router import router as notes_router
from notesapp.features.tags.router import router as tags_router
from notesapp.features.folders.router import router as folders_router
from notesapp.features.shares.router import router as shares_router
from notesapp.features.reminders.router import router as reminders_router
from notesapp.features.templates.router import router as templates_router
from notesapp.features.profile.router import router as profile_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle: startup & shutdown."""
    settings = get_settings()
    logger.info(f"{settings.APP_NAME} v{settings.APP_VERSION} starting...")
    logger.info(f"Supabase: {settings.SUPABASE_URL[:40]}...")
    if settings.SCHEDULER_ENABLED:
        init_scheduler()
    yield
    shutdown_scheduler()
    logger.info("Shutting down...")


def create_app() -> FastAPI:
    """Application factory."""
    settings = get_settings()

    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Multi-user notes API: notes, tags, folders, sharing, reminders and templates",
        lifespan=lifespan,
        debug=settings.DEBUG,
    )

    # ── CORS ─────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Error Handlers ───────────────────────────────────
    register_exception_handlers(app)

    # ── Register Feature Routers ─────────────────────────
    app.include_router(auth_router, prefix="/api/auth", tags=["Auth"])
    app.include_router(notes_router, prefix="/api/notes", tags=["Notes"])
    app.include_router(tags_router, prefix="/api/tags", tags=["Tags"])
    app.include_router(folders_router, prefix="/api/folders", tags=["Folders"])
    app.include_router(shares_router, prefix="/api/share", tags=["Share"])
    app.include_router(reminders_router, prefix="/api/reminders", tags=["Reminders"])
    app.include_router(templates_router, prefix="/api/templates", tags=["Templates"])
    app.include_router(profile_router, prefix="/api/profile", tags=["Profile"])

    # ── Health Check ─────────────────────────────────────
    @app.get("/health", tags=["System"])
    async def health_check(db: Client = Depends(get_db)):
        """Liveness plus a store round trip. Always 200; `status` reports store reachability."""
        store_ok = store_is_reachable(db)
        return {
            "status": "healthy" if store_ok else "degraded",
            "database": "ok" if store_ok else "unreachable",
            "app": settings.APP_NAME,
            "version": settings.APP_VERSION,
        }

    return app


app = create_app()
