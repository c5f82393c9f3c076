from datetime import datetime, timezone
import logging

from fastapi import APIRouter, Depends

from ephemeral_clip.dependencies import get_blob_store
from ephemeral_clip.domain.interfaces import BlobStore, BackendMode

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health/live")
async def liveness():
    """Liveness probe: Service is running."""
    return {"status": "ok"}


@router.get("/api/health")
async def health(store: BlobStore = Depends(get_blob_store)):
    """Report whether secrets are held durably (Redis) or best-effort (memory)."""
    body = {
        "status": "ok",
        "backend": store.mode.value,
        "redis": "fallback",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

    if store.mode == BackendMode.DURABLE:
        if await store.ping():
            body["redis"] = "connected"
        else:
            logger.error("Health check failed (redis)")
            body["redis"] = "unreachable"
            body["status"] = "degraded"

    return body
