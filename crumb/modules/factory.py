"""
Session Factory following Black Box Design principles.

This factory:
- Chooses the storage backend from configuration
- Wires storage and cookie settings into a Session
- Returns only the Session (hiding implementation)
"""

import logging
from typing import Optional

from ..config.provider import ConfigProvider, StoreConfig
from .session import Session
from .storage import MemoryStorage, RedisStorage, StorageAdapter

logger = logging.getLogger(__name__)


class SessionFactory:
    """Composition root for the session stack."""

    @staticmethod
    def build_storage(store_config: StoreConfig, redis_client=None) -> StorageAdapter:
        """
        Build the configured storage backend.

        Args:
            store_config: Storage configuration
            redis_client: Optional existing Redis client to share

        Raises:
            ValueError: If the backend is unknown
        """
        if store_config.is_redis:
            logger.info(f"Building Redis session storage (prefix={store_config.prefix!r})")
            return RedisStorage(
                redis_client=redis_client,
                url=store_config.redis_url,
                prefix=store_config.prefix,
                expiry=store_config.expiry,
            )

        if store_config.backend == "memory":
            logger.info("Building in-memory session storage")
            return MemoryStorage()

        raise ValueError(f"Unknown session store backend: {store_config.backend}")

    @staticmethod
    def build(config_provider: ConfigProvider, redis_client: Optional[object] = None) -> Session:
        """
        Build a Session from configuration.

        Args:
            config_provider: Configuration provider
            redis_client: Optional Redis client for the redis backend

        Returns:
            Session ready to be installed as HTTP middleware

        Raises:
            ValueError: If no cookie secret keys are configured or the backend is unknown
        """
        session_config = config_provider.get_session_config()
        if not session_config.secret_keys:
            raise ValueError(
                "CRUMB_SECRET_KEYS is required to sign session cookies. "
                "Set it to one or more comma-separated secrets shared by all workers."
            )

        storage = SessionFactory.build_storage(config_provider.get_store_config(), redis_client)
        return Session(storage, session_config)
