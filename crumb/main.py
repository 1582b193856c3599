#!/usr/bin/env python3
"""
Crumb - Demo Server

Thin orchestration layer that:
1. Loads configuration
2. Builds the session stack through the factory
3. Exposes a few routes reading and writing the session

All session logic is in the modules, following black box principles.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI
from pydantic import BaseModel, Field

from crumb.config.provider import ConfigProvider, EnvConfigProvider
from crumb.modules.factory import SessionFactory
from crumb.modules.session import Session, State

logger = logging.getLogger(__name__)


class LoginRequest(BaseModel):
    """Login request body."""

    username: str = Field(..., min_length=1, description="Name to store in the session")


class SessionView(BaseModel):
    """Public view of the demo session."""

    is_authenticated: bool = False
    username: Optional[str] = None
    visits: int = 0


def create_app(
    session: Optional[Session] = None,
    config_provider: Optional[ConfigProvider] = None,
) -> FastAPI:
    """
    Build the demo application.

    Args:
        session: Preconfigured Session. Built from config_provider when omitted.
        config_provider: Configuration provider (defaults to environment)
    """
    config_provider = config_provider or EnvConfigProvider()
    api_config = config_provider.get_api_config()

    if session is None:
        session = SessionFactory.build(config_provider)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting Crumb demo server...")
        yield
        close = getattr(session.storage, "close", None)
        if close is not None:
            await close()
        logger.info("Crumb demo server shutdown complete")

    app = FastAPI(title="Crumb", debug=api_config.debug, lifespan=lifespan)
    app.state.session = session
    app.middleware("http")(session)

    current_state = session.dependency()

    def view(state: State) -> SessionView:
        data = state.read()
        return SessionView(
            is_authenticated=data.get("isAuthenticated", False),
            username=data.get("username"),
            visits=data.get("visits", 0),
        )

    @app.get("/health")
    async def health():
        return {"status": "ok", "storage_ready": session.ready}

    @app.get("/session", response_model=SessionView)
    async def read_session(state: State = Depends(current_state)):
        return view(state)

    @app.post("/session/visit", response_model=SessionView)
    async def visit(state: State = Depends(current_state)):
        def count(draft):
            draft["visits"] = draft.get("visits", 0) + 1

        state.write(count)
        return view(state)

    @app.post("/login", response_model=SessionView)
    async def login(body: LoginRequest, state: State = Depends(current_state)):
        def authenticate(draft):
            draft["isAuthenticated"] = True
            draft["username"] = body.username

        state.write(authenticate)
        logger.info(f"User {body.username} logged in")
        return view(state)

    @app.post("/logout", response_model=SessionView)
    async def logout(state: State = Depends(current_state)):
        def sign_out(draft):
            draft["isAuthenticated"] = False
            draft["username"] = None

        state.write(sign_out)
        return view(state)

    return app
