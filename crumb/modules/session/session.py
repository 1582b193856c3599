import asyncio
import logging
import secrets
from typing import Callable, Optional

from starlette.requests import Request
from starlette.responses import Response

from ...config.provider import SessionConfig
from ..cookies import CookieSigner, SignedCookies
from .identity import Identity, IdentityResolver
from .state import State

logger = logging.getLogger(__name__)


class SessionNotInitializedError(RuntimeError):
    """Session state was requested before the session middleware ran for the request."""


class Session:
    """
    Session middleware and accessor.

    Usage:
        session = Session(MemoryStorage(), SessionConfig(secret_keys=["..."]))
        app.middleware("http")(session)

        @app.get("/me")
        async def me(state: State = Depends(session.dependency())):
            return state.read()
    """

    def __init__(self, storage, config: Optional[SessionConfig] = None):
        """
        Initialize session middleware.

        Args:
            storage: Any StorageAdapter implementation (load, setup, update)
            config: Cookie configuration. Defaults to SessionConfig().
        """
        self.storage = storage
        self.config = config or SessionConfig()

        secret_keys = self.config.secret_keys
        if not secret_keys:
            logger.warning(
                "No session secret keys configured, using a random key. "
                "Sessions will not survive a restart."
            )
            secret_keys = [secrets.token_hex(32)]

        self.identity = IdentityResolver(SignedCookies(CookieSigner(secret_keys)), self.config)

        self._ready = False
        self._setup_lock = asyncio.Lock()
        self._state_attr = f"crumb_session_{id(self)}"

    @property
    def ready(self) -> bool:
        """Whether storage setup has completed."""
        return self._ready

    def for_request(self, request: Request) -> State:
        """
        Get the session state of a request.

        Raises:
            SessionNotInitializedError: If the middleware has not run for this request
        """
        state = getattr(request.state, self._state_attr, None)
        if state is None:
            raise SessionNotInitializedError(
                "It looks like you tried to access the session before it was initialized. "
                "To prevent this error from occurring in the future, install the session "
                "middleware before any other middleware or route that reads the session."
            )
        return state

    def dependency(self) -> Callable[[Request], State]:
        """FastAPI dependency resolving to the request's session state."""

        def get_session_state(request: Request) -> State:
            return self.for_request(request)

        return get_session_state

    async def __call__(self, request: Request, call_next) -> Response:
        """
        Process one request through the session lifecycle.

        Logic:
        1. Run storage setup once per Session instance
        2. Resolve the session identifier from the cookie
        3. Load the snapshot and publish its State on the request
        4. Run downstream handling
        5. Persist the state if it changed, even if downstream raised
        6. Refresh the session cookie on the response

        When downstream raises there is no response to carry the cookie, so a
        brand-new session written before the failure is persisted but cannot be
        loaded again by its client. The record is left to expire with the store.
        """
        await self._ensure_setup()

        identity = self.identity.identify(request)
        snapshot = await self.storage.load(identity.session_id)
        state = State(snapshot)
        setattr(request.state, self._state_attr, state)

        try:
            response = await call_next(request)
        except Exception as exc:
            try:
                await self._persist(identity, snapshot, state)
            except Exception as persist_exc:
                logger.error(
                    f"Failed to persist session {identity.session_id} after request error: {persist_exc}"
                )
                raise persist_exc from exc
            raise

        await self._persist(identity, snapshot, state)
        self.identity.remember(response, identity)
        return response

    async def _ensure_setup(self) -> None:
        if self._ready:
            return

        async with self._setup_lock:
            # Concurrent first requests wait here; only the first one runs setup
            if self._ready:
                return
            await self.storage.setup()
            self._ready = True
            logger.info(f"Session storage {type(self.storage).__name__} initialized")

    async def _persist(self, identity: Identity, snapshot, state: State) -> None:
        current = state.read()
        if current is snapshot:
            logger.debug(f"Session {identity.session_id} unchanged, skipping persistence")
            return

        await self.storage.update(identity.session_id, current)
        logger.debug(f"Session {identity.session_id} persisted")
