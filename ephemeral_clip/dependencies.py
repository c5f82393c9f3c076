"""Dependency Injection Module."""
import asyncio
import logging

from fastapi import Depends, Request
from redis.exceptions import RedisError

from ephemeral_clip.adapters.memory_store.stores import MemoryBlobStore
from ephemeral_clip.adapters.redis.client import create_redis_client
from ephemeral_clip.adapters.redis.stores import RedisBlobStore
from ephemeral_clip.core.config import Settings
from ephemeral_clip.domain.interfaces import BlobStore
from ephemeral_clip.domain.secrets.service import SecretService

logger = logging.getLogger(__name__)


# --- Backend selection (once per process) ---

async def select_blob_store(config: Settings) -> BlobStore:
    """Pick the storage backend at startup.

    auto:   use Redis if a PING succeeds, otherwise commit to memory for the
            rest of the process lifetime.
    redis:  Redis is required; raise RuntimeError if unreachable.
    memory: in-process store, entries lost on restart.
    """
    backend = config.STORE_BACKEND

    if backend == "memory":
        if config.MODE.lower() == "prod":
            logger.warning("STORE_BACKEND=memory in PROD: secrets will not survive a restart")
        return MemoryBlobStore()

    client = create_redis_client(
        config.REDIS_URL,
        connect_timeout=config.STORE_CONNECT_TIMEOUT_SECONDS,
        socket_timeout=config.STORE_TIMEOUT_SECONDS,
    )
    try:
        await asyncio.wait_for(client.ping(), timeout=config.STORE_CONNECT_TIMEOUT_SECONDS)
    except (asyncio.TimeoutError, RedisError, OSError) as e:
        await client.aclose()
        if backend == "redis":
            raise RuntimeError(f"STORE_BACKEND=redis but Redis is unreachable: {e}") from e
        logger.warning(
            f"Redis unavailable ({e}); falling back to in-memory secret store. "
            "Secrets will be lost on restart."
        )
        return MemoryBlobStore()

    logger.info("Connected to Redis; using durable secret store")
    return RedisBlobStore(
        client,
        key_prefix=config.REDIS_KEY_PREFIX,
        timeout=config.STORE_TIMEOUT_SECONDS,
    )


# --- Request dependencies ---

def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_blob_store(request: Request) -> BlobStore:
    return request.app.state.blob_store


def get_secret_service(
    store: BlobStore = Depends(get_blob_store),
    config: Settings = Depends(get_settings),
) -> SecretService:
    return SecretService(store, config)
