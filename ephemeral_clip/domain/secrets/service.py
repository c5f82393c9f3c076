"""Secret lifecycle rules on top of a BlobStore."""
import logging
from typing import Optional

from ephemeral_clip.core.config import Settings
from ephemeral_clip.domain.interfaces import BlobStore, SecretEnvelope
from ephemeral_clip.errors import NotFoundError, ValidationError
from ephemeral_clip.utils.id import is_valid_secret_id

logger = logging.getLogger(__name__)


def clamp_ttl(ttl: Optional[int], default: int = 60, minimum: int = 1, maximum: int = 86400) -> int:
    """Clamp a requested TTL into [minimum, maximum]; None means default."""
    if ttl is None:
        ttl = default
    return min(max(int(ttl), minimum), maximum)


def require_secret_id(secret_id: str) -> str:
    if not is_valid_secret_id(secret_id):
        raise ValidationError("Invalid secret ID")
    return secret_id


class SecretService:
    def __init__(self, store: BlobStore, config: Settings):
        self.store = store
        self.config = config

    def _check_envelope(self, ciphertext: Optional[str], iv: Optional[str]) -> SecretEnvelope:
        if not ciphertext or not iv:
            raise ValidationError("Missing required fields: ciphertext and iv")
        if len(ciphertext) > self.config.MAX_CIPHERTEXT_CHARS:
            raise ValidationError(
                "Ciphertext too large",
                details={"max_chars": self.config.MAX_CIPHERTEXT_CHARS}
            )
        if len(iv) > self.config.MAX_IV_CHARS:
            raise ValidationError("IV too large", details={"max_chars": self.config.MAX_IV_CHARS})
        return SecretEnvelope(ciphertext=ciphertext, iv=iv)

    async def create(self, ciphertext: Optional[str], iv: Optional[str], ttl: Optional[int] = None) -> tuple[str, int]:
        envelope = self._check_envelope(ciphertext, iv)
        valid_ttl = clamp_ttl(
            ttl,
            default=self.config.DEFAULT_TTL_SECONDS,
            minimum=self.config.MIN_TTL_SECONDS,
            maximum=self.config.MAX_TTL_SECONDS,
        )
        secret_id = await self.store.create(envelope, valid_ttl)
        logger.info(f"Stored secret {secret_id} (ttl={valid_ttl}s, backend={self.store.mode.value})")
        return secret_id, valid_ttl

    async def fetch(self, secret_id: str) -> SecretEnvelope:
        require_secret_id(secret_id)
        envelope = await self.store.fetch(secret_id)
        if envelope is None:
            raise NotFoundError()
        return envelope

    async def delete(self, secret_id: str) -> None:
        require_secret_id(secret_id)
        await self.store.delete(secret_id)
        logger.info(f"Deleted secret {secret_id}")
