"""
Liveness and store-connectivity probes for load balancers and deploy checks.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException

from wardwatch.config.firebase import get_db
from wardwatch.core.settings import settings
from wardwatch.utils.firestore_helpers import run_blocking

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
async def health_check():
    """Liveness: answers as long as the process is serving requests."""
    return {
        "status": "OK",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/db")
async def database_health():
    """Readiness: 503 unless the document store answers a collections listing."""
    try:
        db = get_db()
        collections = await run_blocking(lambda: list(db.collections()))
    except Exception as e:
        raise HTTPException(status_code=503, detail=f"Database connection failed: {e}")

    return {
        "status": "OK",
        "database": "mock" if settings.USE_MOCK_DB else "firestore",
        "connected": True,
        "collections_count": len(collections),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
