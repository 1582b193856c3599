"""
Crumb - Cookie-identified session state for FastAPI

A session layer that identifies a client through a signed cookie, loads
its state from a pluggable store and writes it back only when it changed.

Architecture:
- Each module is self-contained with clear interfaces
- Storage backends are completely replaceable
- No module knows the internals of another
- All communication through defined interfaces

Modules:
- cookies: Signed cookie values
- storage: Session persistence backends (memory, redis)
- session: Identity resolution, state container and the request middleware
- factory: Wiring of the above from configuration
"""

__version__ = "1.0.0"
