"""Domain interfaces for the ephemeral blob store."""
from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional

from pydantic import BaseModel

from ephemeral_clip.utils.id import new_secret_id


class BackendMode(str, Enum):
    """Whether expiry survives a process restart."""
    DURABLE = "durable"
    FALLBACK = "fallback"


class SecretEnvelope(BaseModel):
    """Opaque stored pair. The server never sees the key that opens it."""
    ciphertext: str
    iv: str


class BlobStore(ABC):
    mode: BackendMode

    async def create(self, envelope: SecretEnvelope, ttl: int) -> str:
        """Store the envelope under a fresh identifier and return it."""
        secret_id = new_secret_id()
        await self._put(secret_id, envelope, ttl)
        return secret_id

    @abstractmethod
    async def _put(self, secret_id: str, envelope: SecretEnvelope, ttl: int) -> None: pass
    @abstractmethod
    async def fetch(self, secret_id: str) -> Optional[SecretEnvelope]: pass
    @abstractmethod
    async def delete(self, secret_id: str) -> None: pass
    @abstractmethod
    async def ping(self) -> bool: pass

    async def close(self) -> None:
        pass
