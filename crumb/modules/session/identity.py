"""
Session identity resolution.

A session identifier is 12 bytes shaped like a database object id: a 4-byte
timestamp, 5 random bytes fixed per process and a 3-byte counter. The same
bytes travel base64-encoded in the cookie and hex-encoded as the storage key.
"""

import base64
import binascii
import itertools
import logging
import os
import time
from dataclasses import dataclass
from typing import Optional

from starlette.requests import Request
from starlette.responses import Response

from ...config.provider import SessionConfig
from ..cookies import SignedCookies

logger = logging.getLogger(__name__)

IDENTIFIER_LENGTH = 12


class ObjectIdGenerator:
    """Generates 12-byte, time-ordered, globally unique identifiers."""

    def __init__(self):
        self._process = os.urandom(5)
        self._counter = itertools.count(int.from_bytes(os.urandom(3), "big"))

    def generate(self) -> bytes:
        timestamp = int(time.time()) & 0xFFFFFFFF
        counter = next(self._counter) & 0xFFFFFF
        return timestamp.to_bytes(4, "big") + self._process + counter.to_bytes(3, "big")


@dataclass(frozen=True)
class Identity:
    """One session identifier in both of its encodings."""
    session_id: str
    cookie_value: str
    is_new: bool = False

    @classmethod
    def from_bytes(cls, raw: bytes, is_new: bool = False) -> "Identity":
        return cls(
            session_id=raw.hex(),
            cookie_value=base64.b64encode(raw).decode("ascii"),
            is_new=is_new,
        )


class IdentityResolver:
    """Maps a request to its session identifier through a signed cookie."""

    def __init__(
        self,
        cookies: SignedCookies,
        config: SessionConfig,
        generator: Optional[ObjectIdGenerator] = None,
    ):
        self.cookies = cookies
        self.config = config
        self.generator = generator or ObjectIdGenerator()

    def identify(self, request: Request) -> Identity:
        """
        Resolve the session identifier for a request.

        A missing, unsigned, tampered or malformed cookie is not an error:
        a fresh identifier is minted instead.
        """
        value = self.cookies.get(request, self.config.key)

        if value is not None:
            raw = self._decode(value)
            if raw is not None:
                return Identity.from_bytes(raw)

        identity = Identity.from_bytes(self.generator.generate(), is_new=True)
        logger.debug(f"Minted session identifier {identity.session_id}")
        return identity

    def remember(self, response: Response, identity: Identity) -> None:
        """Write the identity cookie with the current attributes. Done on every response."""
        self.cookies.set(
            response,
            self.config.key,
            identity.cookie_value,
            domain=self.config.domain,
            path=self.config.path,
            secure=self.config.https,
            max_age=self.config.max_age,
        )

    def _decode(self, value: str) -> Optional[bytes]:
        try:
            raw = base64.b64decode(value, validate=True)
        except (binascii.Error, ValueError):
            logger.debug(f"Session cookie {self.config.key} is not valid base64")
            return None

        if len(raw) != IDENTIFIER_LENGTH:
            logger.debug(f"Session cookie {self.config.key} has unexpected length {len(raw)}")
            return None

        return raw
