"""FastAPI web application."""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from tinydb.storages import Storage

from .. import __version__
from ..services.context import AppContext
from ..utils.config import Settings, get_settings
from .routes import auth, entries, settings as settings_routes


def create_app(
    settings: Optional[Settings] = None,
    storage: Optional[type[Storage]] = None,
) -> FastAPI:
    """Build the app; one AppContext lives for the app's lifespan."""
    
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        with AppContext(settings or get_settings(), storage=storage) as context:
            app.state.context = context
            yield
    
    app = FastAPI(
        title="Wellness Journal",
        description="Morning, afternoon and evening check-ins on energy and feelings",
        version=__version__,
        lifespan=lifespan,
    )
    
    app.include_router(auth.router, prefix="/auth", tags=["auth"])
    app.include_router(entries.router, prefix="/entries", tags=["entries"])
    app.include_router(settings_routes.router, prefix="/settings", tags=["settings"])
    
    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "ok"}
    
    return app


app = create_app()
