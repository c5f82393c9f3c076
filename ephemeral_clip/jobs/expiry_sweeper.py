import asyncio
import logging

from ephemeral_clip.adapters.memory_store.stores import MemoryBlobStore

logger = logging.getLogger(__name__)


async def expiry_sweeper(store: MemoryBlobStore, shutdown_event: asyncio.Event, interval: float = 1.0):
    """
    Background worker evicting expired secrets from the in-process store.
    Only runs in fallback mode; Redis expires keys on its own.
    """
    logger.info("Starting expiry sweeper")

    while not shutdown_event.is_set():
        try:
            store.sweep_expired()
        except Exception as e:
            logger.error(f"Error in expiry sweeper: {e}", exc_info=True)

        try:
            await asyncio.wait_for(shutdown_event.wait(), timeout=interval)
        except asyncio.TimeoutError:
            continue

    logger.info("Expiry sweeper stopped")
