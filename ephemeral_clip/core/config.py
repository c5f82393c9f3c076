from pydantic_settings import BaseSettings  # type: ignore
from typing import Optional, Literal


class Settings(BaseSettings):
    # Core
    MODE: str = "dev"  # dev, prod
    DEV_MODE: bool = False

    # Storage
    STORE_BACKEND: Literal["auto", "redis", "memory"] = "auto"
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_KEY_PREFIX: str = "clip:secret:"
    STORE_TIMEOUT_SECONDS: float = 2.0
    STORE_CONNECT_TIMEOUT_SECONDS: float = 2.0
    SWEEP_INTERVAL_SECONDS: float = 1.0

    # Secret limits
    DEFAULT_TTL_SECONDS: int = 60
    MIN_TTL_SECONDS: int = 1
    MAX_TTL_SECONDS: int = 24 * 60 * 60
    MAX_PLAINTEXT_CHARS: int = 10_000
    # 10k chars of 4-byte UTF-8 plus the GCM tag, base64 encoded, with headroom
    MAX_CIPHERTEXT_CHARS: int = 64 * 1024
    MAX_IV_CHARS: int = 64

    # HTTP
    CORS_ORIGINS: list[str] = ["*"]

    # Observability
    TRACING_ENABLED: bool = False
    OTEL_EXPORTER_OTLP_ENDPOINT: Optional[str] = None

    model_config = {
        "case_sensitive": True,
        "env_file": ".env",
        "extra": "ignore"
    }


settings = Settings()
