"""
Application entry point: builds the FastAPI app and mounts every router.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from . import __version__
from .auth.router import router as auth_router
from .auth.router import users_router
from .catalogs.router import router as catalogs_router
from .db import create_db_and_tables
from .env import get_secret
from .errors import setup_exception_handlers
from .products.router import router as products_router
from .settings import get_settings

logger = logging.getLogger(__name__)


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    settings = get_settings()
    if settings.storage_backend == "local":
        Path(settings.media_root).mkdir(parents=True, exist_ok=True)
    create_db_and_tables()
    logger.info("Vet catalog API started")
    yield
    # Shutdown: nothing for now


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.log_level)
    app = FastAPI(title="Vet Catalog API", version=__version__, lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials="*" not in settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    setup_exception_handlers(app)

    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(catalogs_router)
    app.include_router(products_router)

    if settings.storage_backend == "local":
        app.mount(
            settings.media_url,
            StaticFiles(directory=settings.media_root, check_dir=False),
            name="media",
        )

    @app.get("/")
    def root() -> dict:
        return {"message": "Hello from the vet catalog backend!"}

    return app


app = create_app()


def run() -> None:
    import uvicorn

    port = int(get_secret("PORT") or "8080")
    uvicorn.run("vetcatalog.main:app", host="0.0.0.0", port=port)
