"""
Cookies Module - Black Box Interface

Purpose: Read and write tamper-evident cookie values
Interface: CookieSigner.sign(), CookieSigner.verify(), SignedCookies.get(), SignedCookies.set()
Hidden: HMAC algorithm, key rotation, signature cookie naming

Replaceable with any signing scheme that can answer "was this value issued by us".
"""

from .signer import CookieSigner, SignedCookies

__all__ = ["CookieSigner", "SignedCookies"]
