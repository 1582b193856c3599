"""
Shared pytest fixtures for Crumb tests.

This module provides common fixtures including:
- FakeRedis: In-memory stand-in for the Redis hash/TTL commands the storage uses
- Request/response helpers for driving the session middleware directly
- Session and storage fixtures
"""

import fnmatch
import os
import sys
from http.cookies import SimpleCookie
from typing import Dict, Optional
from unittest.mock import AsyncMock

import pytest
from starlette.requests import Request
from starlette.responses import Response

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from crumb.config.provider import SessionConfig
from crumb.modules.session import Session
from crumb.modules.storage import MemoryStorage


# =============================================================================
# Redis double
# =============================================================================

class FakeRedis:
    """
    Minimal async Redis double covering hashes, TTLs and key scanning.

    Values are stored as strings, like a client created with
    decode_responses=True.
    """

    def __init__(self):
        self.hashes: Dict[str, Dict[str, str]] = {}
        self.ttls: Dict[str, int] = {}
        self.closed = False

    async def hsetnx(self, key: str, field: str, value: str) -> int:
        fields = self.hashes.setdefault(key, {})
        if field in fields:
            return 0
        fields[field] = str(value)
        return 1

    async def hset(self, key: str, field=None, value=None, mapping=None) -> int:
        fields = self.hashes.setdefault(key, {})
        items = dict(mapping or {})
        if field is not None:
            items[field] = value
        added = len([name for name in items if name not in fields])
        fields.update({name: str(item) for name, item in items.items()})
        return added

    async def hgetall(self, key: str) -> Dict[str, str]:
        return dict(self.hashes.get(key, {}))

    async def expire(self, key: str, seconds: int) -> bool:
        if key not in self.hashes:
            return False
        self.ttls[key] = seconds
        return True

    async def ttl(self, key: str) -> int:
        if key not in self.hashes:
            return -2
        return self.ttls.get(key, -1)

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self.hashes.pop(key, None) is not None:
                removed += 1
            self.ttls.pop(key, None)
        return removed

    async def scan_iter(self, match: Optional[str] = None):
        for key in list(self.hashes):
            if match is None or fnmatch.fnmatchcase(key, match):
                yield key

    async def ping(self) -> bool:
        return True

    async def aclose(self) -> None:
        self.closed = True


# =============================================================================
# Request helpers
# =============================================================================

def make_request(cookies: Optional[Dict[str, str]] = None, path: str = "/") -> Request:
    """Build a bare Starlette request carrying the given cookies."""
    headers = []
    if cookies:
        header = "; ".join(f"{name}={value}" for name, value in cookies.items())
        headers.append((b"cookie", header.encode("latin-1")))

    return Request(
        {
            "type": "http",
            "method": "GET",
            "path": path,
            "headers": headers,
            "query_string": b"",
        }
    )


def response_cookies(response: Response) -> Dict[str, str]:
    """Collect cookie values set on a response."""
    jar = SimpleCookie()
    for header in response.headers.getlist("set-cookie"):
        jar.load(header)
    return {name: morsel.value for name, morsel in jar.items()}


async def ok(request: Request) -> Response:
    """Downstream handler that does nothing."""
    return Response("ok")


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def fake_redis():
    """Create a fresh Redis double."""
    return FakeRedis()


@pytest.fixture
def session_config():
    """Cookie configuration used across session tests."""
    return SessionConfig(
        domain="example.com",
        https=True,
        key="test:session",
        secret_keys=["test-secret", "old-secret"],
    )


@pytest.fixture
def storage():
    """MemoryStorage with its adapter methods wrapped in AsyncMocks for call assertions."""
    memory = MemoryStorage()
    memory.load = AsyncMock(wraps=memory.load)
    memory.setup = AsyncMock(wraps=memory.setup)
    memory.update = AsyncMock(wraps=memory.update)
    return memory


@pytest.fixture
def session(storage, session_config):
    """Session over the wrapped memory storage."""
    return Session(storage, session_config)
