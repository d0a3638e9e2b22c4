"""FastAPI application factory."""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from .. import __version__
from ..config import settings
from ..store import SpreadsheetStore, create_store
from .errors import register_error_handlers
from .store_routes import build_store_router
from .ui_routes import build_ui_router

TEMPLATES_DIR = Path(__file__).parent.parent / "templates"


def build_health_router(store: SpreadsheetStore) -> APIRouter:
    router = APIRouter()

    @router.get("/health")
    async def health_check():
        """Health check endpoint with configuration status."""
        return {
            "status": "ok",
            "service": "sheetsync",
            "version": __version__,
            "config": {
                "store_backend": type(store).__name__,
                "store_api_prefix": settings.store_api_prefix,
                "debug": settings.debug,
            },
        }

    return router


def create_app(
    store: Optional[SpreadsheetStore] = None,
    error_status_map: Optional[dict[str, int]] = None,
) -> FastAPI:
    """Create and configure the FastAPI application around store."""
    store = store if store is not None else create_store()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Open the store on startup and close it on shutdown."""
        if hasattr(store, "initialize"):
            await store.initialize()
        yield
        if hasattr(store, "close"):
            await store.close()

    app = FastAPI(
        title="SheetSync",
        description="Shared spreadsheet store with REST and form interfaces",
        version=__version__,
        lifespan=lifespan,
    )

    templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
    register_error_handlers(app, templates, error_status_map)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["GET", "HEAD", "PUT", "PATCH", "POST", "DELETE"],
        allow_headers=["*"],
        expose_headers=["Location"],
    )

    app.include_router(build_health_router(store), prefix="/api")
    app.include_router(build_store_router(store), prefix=settings.store_api_prefix)
    app.include_router(build_ui_router(store, templates))

    # Serve static files (stylesheets)
    static_dir = Path(__file__).parent.parent / "static"
    if static_dir.exists():
        app.mount("/static", StaticFiles(directory=str(static_dir)), name="static")

    return app
