"""
Signed cookie support.

Each signed cookie travels with a companion "<name>.sig" cookie holding an
HMAC of "<name>=<value>". The first configured key signs; every key in the
list verifies, so keys can be rotated without invalidating live sessions.
"""

import base64
import hashlib
import hmac
import logging
import secrets
from typing import List, Optional

from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)

SIGNATURE_SUFFIX = ".sig"


class CookieSigner:
    """HMAC signer with an ordered list of keys."""

    def __init__(self, keys: List[str], algorithm: str = "sha256"):
        """
        Initialize signer.

        Args:
            keys: Secret keys, newest first. The first key is used for signing.
            algorithm: hashlib digest name

        Raises:
            ValueError: If no usable key is given
        """
        keys = [key for key in keys if key]
        if not keys:
            raise ValueError("CookieSigner requires at least one non-empty secret key")

        self.keys = [key.encode("utf-8") for key in keys]
        self.algorithm = algorithm

    def _digest(self, key: bytes, data: str) -> str:
        mac = hmac.new(key, data.encode("utf-8"), getattr(hashlib, self.algorithm))
        return base64.urlsafe_b64encode(mac.digest()).rstrip(b"=").decode("ascii")

    def sign(self, data: str) -> str:
        """Sign data with the current (first) key."""
        return self._digest(self.keys[0], data)

    def verify(self, data: str, signature: str) -> bool:
        """Check a signature against every known key."""
        return self.index(data, signature) >= 0

    def index(self, data: str, signature: str) -> int:
        """
        Find which key produced a signature.

        Returns:
            Position of the matching key, or -1 when none matches
        """
        for position, key in enumerate(self.keys):
            if secrets.compare_digest(self._digest(key, data), signature):
                return position
        return -1


class SignedCookies:
    """Signed get/set on top of Starlette requests and responses."""

    def __init__(self, signer: CookieSigner):
        self.signer = signer

    def get(self, request: Request, name: str) -> Optional[str]:
        """
        Read a cookie value only if its signature checks out.

        Returns:
            The cookie value, or None if missing, unsigned or tampered with
        """
        value = request.cookies.get(name)
        if value is None:
            return None

        signature = request.cookies.get(name + SIGNATURE_SUFFIX)
        if not signature:
            logger.debug(f"Cookie {name} has no signature, ignoring it")
            return None

        if not self.signer.verify(f"{name}={value}", signature):
            logger.warning(f"Cookie {name} failed signature verification")
            return None

        return value

    def set(
        self,
        response: Response,
        name: str,
        value: str,
        *,
        domain: Optional[str] = None,
        path: str = "/",
        secure: bool = True,
        httponly: bool = True,
        max_age: Optional[int] = None,
    ) -> None:
        """Write a cookie together with its signature cookie."""
        attributes = {
            "domain": domain,
            "path": path,
            "secure": secure,
            "httponly": httponly,
            "max_age": max_age,
            "samesite": "lax",
        }
        response.set_cookie(name, value, **attributes)
        response.set_cookie(
            name + SIGNATURE_SUFFIX, self.signer.sign(f"{name}={value}"), **attributes
        )
