"""FastAPI application entrypoint. No business logic; only wiring and middleware."""

from dotenv import load_dotenv

load_dotenv()

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import timedelta
from pathlib import Path

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from portal.api.v1 import router as v1_router
from portal.api.v1.upload import UPLOADS_URL_PREFIX
from portal.core.config import Settings, get_settings
from portal.errors import StorageError
from portal.services.identity import IdentityManager
from portal.storage import Storage, build_storage

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Resolve the storage backend once and hand it to the identity manager."""
    settings: Settings = app.state.settings
    Path(settings.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)
    owns_storage = app.state.storage is None
    if owns_storage:
        app.state.storage = build_storage(settings)
    app.state.identity = IdentityManager(
        app.state.storage.accounts,
        app.state.storage.sessions,
        session_ttl=timedelta(hours=settings.SESSION_TTL_HOURS),
    )
    try:
        yield
    finally:
        if owns_storage:
            app.state.storage.close()
            app.state.storage = None


async def _storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    logger.error(
        "Request failed: storage unavailable",
        extra={"path": request.url.path, "reason": exc.message[:500]},
    )
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Storage is temporarily unavailable. Please try again later."},
    )


async def _validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Request validation failed.", "errors": jsonable_encoder(exc.errors())},
    )


def create_app(settings: Settings | None = None, storage: Storage | None = None) -> FastAPI:
    """
    Build the application.

    storage may be injected (tests); otherwise it is built from
    settings.STORAGE_BACKEND at startup and disposed at shutdown.
    """
    settings = settings or get_settings()
    app = FastAPI(
        title="Portal API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.storage = storage

    origins = settings.CORS_ALLOW_ORIGINS
    if not origins and settings.APP_ENV == "dev":
        origins = ["http://localhost:5173", "http://localhost:3000"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StorageError, _storage_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)

    app.include_router(v1_router, prefix=settings.API_V1_PREFIX)

    app.mount(
        UPLOADS_URL_PREFIX,
        StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False),
        name="uploads",
    )

    @app.get("/")
    def root() -> dict[str, str]:
        """Root route; minimal payload for discovery."""
        return {"message": "Portal API"}

    return app


app = create_app()
