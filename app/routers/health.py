from datetime import datetime, timezone
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
import logging
import time

from app.core.context import AppContext, get_context
from app.schemas.common import ApiResponse, PageMetadata
from app.schemas.health import HealthCheckResponse

logger = logging.getLogger(__name__)

router = APIRouter()

STARTED_AT = time.monotonic()

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


@router.get("")
async def health_check(context: AppContext = Depends(get_context)):
    """Service status and database connectivity"""
    try:
        database_ok = context.database is not None and await context.database.ping()
        health = HealthCheckResponse(
            status="healthy" if database_ok else "unhealthy",
            timestamp=datetime.now(timezone.utc).isoformat(),
            uptime=time.monotonic() - STARTED_AT,
            database=database_ok,
            completion_api_configured=context.completions.is_configured,
            environment=context.settings.environment,
            version=context.settings.app_version,
        )
        body = ApiResponse[HealthCheckResponse](
            success=True,
            data=health,
            metadata=PageMetadata(total=1, page=1, limit=1),
        )
        return JSONResponse(
            content=body.model_dump(mode="json", by_alias=True),
            status_code=200 if database_ok else 503,
            headers=NO_CACHE_HEADERS,
        )
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        return JSONResponse(
            content={"success": False, "error": "Health check failed"},
            status_code=503,
            headers=NO_CACHE_HEADERS,
        )
