"""Redis Store Implementation (durable expiry)."""
import asyncio
import json
import logging
from typing import Any, Awaitable, Optional

from pydantic import ValidationError as PydanticValidationError
from redis.exceptions import RedisError

from ephemeral_clip.adapters.redis.client import secret_key
from ephemeral_clip.domain.interfaces import BlobStore, BackendMode, SecretEnvelope
from ephemeral_clip.errors import BackendUnavailable

logger = logging.getLogger(__name__)


class RedisBlobStore(BlobStore):
    """Envelopes stored with SET EX so Redis itself enforces the TTL."""
    mode = BackendMode.DURABLE

    def __init__(self, redis_client, key_prefix: str = "clip:secret:", timeout: float = 2.0):
        self.redis = redis_client
        self.key_prefix = key_prefix
        self.timeout = timeout

    async def _call(self, op: str, awaitable: Awaitable[Any]) -> Any:
        try:
            return await asyncio.wait_for(awaitable, timeout=self.timeout)
        except asyncio.TimeoutError as e:
            logger.error(f"Redis {op} timed out after {self.timeout}s")
            raise BackendUnavailable("Secret store timed out, please retry") from e
        except (RedisError, OSError) as e:
            logger.error(f"Redis {op} failed: {e}")
            raise BackendUnavailable("Secret store unavailable, please retry") from e

    async def _put(self, secret_id: str, envelope: SecretEnvelope, ttl: int) -> None:
        payload = json.dumps({"ciphertext": envelope.ciphertext, "iv": envelope.iv})
        await self._call("set", self.redis.set(secret_key(self.key_prefix, secret_id), payload, ex=ttl))

    async def fetch(self, secret_id: str) -> Optional[SecretEnvelope]:
        raw = await self._call("get", self.redis.get(secret_key(self.key_prefix, secret_id)))
        if raw is None:
            return None
        try:
            return SecretEnvelope.model_validate(json.loads(raw))
        except (json.JSONDecodeError, PydanticValidationError) as e:
            # Unreadable entry is reported like any other missing secret
            logger.error(f"Corrupt envelope under secret {secret_id}: {type(e).__name__}")
            return None

    async def delete(self, secret_id: str) -> None:
        await self._call("delete", self.redis.delete(secret_key(self.key_prefix, secret_id)))

    async def ping(self) -> bool:
        try:
            return bool(await self._call("ping", self.redis.ping()))
        except BackendUnavailable:
            return False

    async def close(self) -> None:
        await self.redis.aclose()
