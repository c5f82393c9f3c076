"""Memory Store Implementation (best-effort fallback).

Entries live only as long as the process. Expiry is tracked in a single
min-heap keyed by expiry instant and drained by one sweeper task instead of
one timer per secret.
"""
import heapq
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from ephemeral_clip.domain.interfaces import BlobStore, BackendMode, SecretEnvelope

logger = logging.getLogger(__name__)


@dataclass
class _Entry:
    envelope: SecretEnvelope
    expires_at: float


class MemoryBlobStore(BlobStore):
    mode = BackendMode.FALLBACK

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: Dict[str, _Entry] = {}
        # (expires_at, secret_id); may hold stale ids of deleted entries
        self._expiry_heap: List[Tuple[float, str]] = []
        # Guards _entries and _expiry_heap. Critical sections never await.
        self._lock = threading.Lock()

    async def _put(self, secret_id: str, envelope: SecretEnvelope, ttl: int) -> None:
        with self._lock:
            expires_at = self._clock() + ttl
            self._entries[secret_id] = _Entry(envelope.model_copy(), expires_at)
            heapq.heappush(self._expiry_heap, (expires_at, secret_id))

    async def fetch(self, secret_id: str) -> Optional[SecretEnvelope]:
        with self._lock:
            entry = self._entries.get(secret_id)
            if not entry:
                return None
            # Expired but not yet swept
            if entry.expires_at <= self._clock():
                del self._entries[secret_id]
                return None
            return entry.envelope.model_copy()

    async def delete(self, secret_id: str) -> None:
        with self._lock:
            self._entries.pop(secret_id, None)

    async def ping(self) -> bool:
        return True

    def sweep_expired(self) -> int:
        """Drop every entry whose expiry has passed. Returns the number removed."""
        removed = 0
        with self._lock:
            now = self._clock()
            while self._expiry_heap and self._expiry_heap[0][0] <= now:
                _, secret_id = heapq.heappop(self._expiry_heap)
                entry = self._entries.get(secret_id)
                if entry and entry.expires_at <= now:
                    del self._entries[secret_id]
                    removed += 1
        if removed:
            logger.debug(f"Swept {removed} expired secrets")
        return removed

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
