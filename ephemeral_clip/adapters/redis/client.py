"""Redis Adapter - Connection and utilities."""
import redis.asyncio as redis


def create_redis_client(redis_url: str, connect_timeout: float = 2.0, socket_timeout: float = 2.0) -> redis.Redis:
    """Create a Redis client. No connection is made until the first command."""
    return redis.from_url(
        redis_url,
        decode_responses=True,
        socket_connect_timeout=connect_timeout,
        socket_timeout=socket_timeout,
    )


def secret_key(prefix: str, secret_id: str) -> str:
    """Generate the storage key for a secret envelope."""
    return f"{prefix}{secret_id}"
