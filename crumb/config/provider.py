"""Configuration provider following Black Box Design principles."""
import os
from dataclasses import dataclass, field
from typing import List, Optional, Protocol

DEFAULT_COOKIE_KEY = "crumb:session"


@dataclass
class SessionConfig:
    """Session cookie configuration."""
    domain: Optional[str] = None
    https: bool = True
    path: str = "/"
    key: str = DEFAULT_COOKIE_KEY
    secret_keys: List[str] = field(default_factory=list)
    max_age: Optional[int] = None


@dataclass
class StoreConfig:
    """Session storage configuration."""
    backend: str = "memory"
    redis_url: str = "redis://localhost:6379/0"
    prefix: str = "session:"
    expiry: int = 24 * 60 * 60

    @property
    def is_redis(self) -> bool:
        """Check if the Redis backend is selected."""
        return self.backend == "redis"


@dataclass
class APIConfig:
    """API configuration."""
    port: int
    host: str
    debug: bool
    log_level: str


class ConfigProvider(Protocol):
    """Protocol for configuration providers."""

    def get_session_config(self) -> SessionConfig:
        """Get session cookie configuration."""
        ...

    def get_store_config(self) -> StoreConfig:
        """Get session storage configuration."""
        ...

    def get_api_config(self) -> APIConfig:
        """Get API configuration."""
        ...


class EnvConfigProvider:
    """Environment-based configuration provider."""

    def get_session_config(self) -> SessionConfig:
        """Get session cookie configuration from environment variables."""
        secret_keys = os.getenv("CRUMB_SECRET_KEYS", "")
        max_age = os.getenv("CRUMB_COOKIE_MAX_AGE")

        return SessionConfig(
            domain=os.getenv("CRUMB_COOKIE_DOMAIN") or None,
            https=os.getenv("CRUMB_HTTPS", "true").lower() == "true",
            path=os.getenv("CRUMB_COOKIE_PATH", "/"),
            key=os.getenv("CRUMB_COOKIE_KEY", DEFAULT_COOKIE_KEY),
            secret_keys=[key.strip() for key in secret_keys.split(",") if key.strip()],
            max_age=int(max_age) if max_age else None,
        )

    def get_store_config(self) -> StoreConfig:
        """Get session storage configuration from environment variables."""
        backend = os.getenv("CRUMB_STORE", "memory").lower()
        if backend not in ("memory", "redis"):
            raise ValueError(f"Unknown session store backend: {backend}. Use 'memory' or 'redis'.")

        return StoreConfig(
            backend=backend,
            redis_url=os.getenv("REDIS_URL", "redis://localhost:6379/0"),
            prefix=os.getenv("CRUMB_STORE_PREFIX", "session:"),
            expiry=int(os.getenv("CRUMB_STORE_EXPIRY", str(24 * 60 * 60))),
        )

    def get_api_config(self) -> APIConfig:
        """Get API configuration from environment variables."""
        return APIConfig(
            port=int(os.getenv("API_PORT", "8080")),
            host=os.getenv("API_HOST", "0.0.0.0"),
            debug=os.getenv("DEBUG", "false").lower() == "true",
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )
