import logging
from typing import Optional

from fastapi import FastAPI
from .routes import router
from .store import DirectoryStore
from ..core.config import settings

logger = logging.getLogger(__name__)

def create_app(store: Optional[DirectoryStore] = None) -> FastAPI:
    if not settings.directory_api_key:
        logger.warning("DIRECTORY_API_KEY is not set; the directory accepts unauthenticated requests")
    app = FastAPI(title="Planora Directory (dev)", version="0.1.0")
    app.state.store = store or DirectoryStore()
    app.include_router(router, prefix="/api")
    return app

app = create_app()
