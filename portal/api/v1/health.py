"""Health check endpoint with storage connectivity check."""

from typing import Annotated

from fastapi import APIRouter, Depends
from starlette.concurrency import run_in_threadpool

from portal.api.deps import get_app_settings, get_storage
from portal.core.config import Settings
from portal.core.database import check_db_connected
from portal.schemas.health import HealthResponse
from portal.storage import Storage

router = APIRouter()


@router.get("", response_model=HealthResponse)
async def get_health(
    settings: Annotated[Settings, Depends(get_app_settings)],
    storage: Annotated[Storage, Depends(get_storage)],
) -> HealthResponse:
    """
    Return service health status and, for the database backend, connectivity.
    Used by load balancers and monitoring.
    """
    db_status = None
    if storage.engine is not None:
        connected = await run_in_threadpool(check_db_connected, storage.engine)
        db_status = "connected" if connected else "disconnected"

    return HealthResponse(
        status="ok",
        environment=settings.APP_ENV,
        storage=storage.backend,
        database=db_status,
    )
