"""
Redis-backed session storage with a sliding expiry.

Each session is a Redis hash at "<prefix><session_id>". Field values are
JSON-encoded, so HSET gives field-level merge semantics for free. A
bookkeeping field is written with HSETNX on load so that a freshly loaded
session exists in Redis even before anything was written to it.
"""

import json
import logging
import os
from datetime import UTC, datetime
from typing import Any, Dict, Optional

import redis.asyncio as redis

logger = logging.getLogger(__name__)

CREATED_FIELD = "_created_at"
RESERVED_FIELDS = frozenset({CREATED_FIELD})

DEFAULT_PREFIX = "session:"
DEFAULT_EXPIRY = 24 * 60 * 60  # one day, in seconds

_MISSING = object()


def _text(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        return value.decode("utf-8")
    return str(value)


class RedisStorage:
    """Session storage on Redis hashes, expiring after `expiry` seconds without a load."""

    def __init__(
        self,
        redis_client: Optional[redis.Redis] = None,
        url: Optional[str] = None,
        prefix: str = DEFAULT_PREFIX,
        expiry: int = DEFAULT_EXPIRY,
    ):
        """
        Initialize Redis storage.

        Args:
            redis_client: Existing async Redis client. Created lazily from url when omitted.
            url: Redis connection URL (defaults to REDIS_URL or localhost)
            prefix: Key prefix grouping all session records
            expiry: Seconds a record lives after its last load
        """
        self.url = url or os.getenv("REDIS_URL", "redis://localhost:6379/0")
        self.prefix = prefix
        self.expiry = expiry
        self._client = redis_client

    async def connect(self) -> redis.Redis:
        """Get storage connection."""
        if not self._client:
            self._client = redis.from_url(self.url, decode_responses=True)
        return self._client

    async def close(self) -> None:
        """Close storage connection."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def _key(self, session_id: str) -> str:
        return f"{self.prefix}{session_id}"

    @staticmethod
    def _decode(raw: Dict[Any, Any]) -> Dict[str, Any]:
        record = {}
        for field, value in raw.items():
            field = _text(field)
            if field in RESERVED_FIELDS:
                continue
            record[field] = json.loads(_text(value))
        return record

    async def load(self, session_id: str) -> Dict[str, Any]:
        """
        Load a session record, creating it when missing.

        Every load pushes the expiry horizon `expiry` seconds into the future.
        """
        client = await self.connect()
        key = self._key(session_id)

        await client.hsetnx(key, CREATED_FIELD, datetime.now(UTC).isoformat())
        await client.expire(key, self.expiry)

        return self._decode(await client.hgetall(key))

    async def setup(self) -> None:
        """Verify the connection. Redis needs no schema, so repeated calls are harmless."""
        client = await self.connect()
        await client.ping()
        logger.info(f"Redis session storage ready (prefix={self.prefix!r}, expiry={self.expiry}s)")

    async def update(self, session_id: str, value: Dict[str, Any]) -> None:
        """Merge value into the stored record. Fields not in value are left untouched."""
        fields = {
            field: json.dumps(item)
            for field, item in value.items()
            if field not in RESERVED_FIELDS
        }
        if not fields:
            return

        client = await self.connect()
        key = self._key(session_id)

        await client.hset(key, mapping=fields)
        await client.expire(key, self.expiry)

    async def expire(self, filter: Dict[str, Any]) -> int:
        """
        Remove every session whose fields match all items of filter.

        An empty filter matches every session under the prefix.

        Returns:
            Number of sessions removed
        """
        client = await self.connect()
        removed = 0

        async for key in client.scan_iter(match=f"{self.prefix}*"):
            record = self._decode(await client.hgetall(key))
            if all(record.get(field, _MISSING) == item for field, item in filter.items()):
                removed += await client.delete(key)

        logger.info(f"Expired {removed} session(s) matching {filter}")
        return removed
