"""
Session Module - Black Box Interface

Purpose: Identify clients across requests and expose their persisted state
Interface: Session (middleware), Session.for_request(), State.read(), State.write()
Hidden: Cookie encoding, identifier minting, dirty checking, persistence policy

Works with any storage backend implementing the StorageAdapter protocol.
"""

from .identity import Identity, IdentityResolver, ObjectIdGenerator
from .session import Session, SessionNotInitializedError
from .state import State

__all__ = [
    "Identity",
    "IdentityResolver",
    "ObjectIdGenerator",
    "Session",
    "SessionNotInitializedError",
    "State",
]
