"""
Process-wide web state: settings, the session store and per-session clients.

Each browser session (cookie `explorer_session`) maps to one SessionRecord
holding its tab storage and its ExplorerClient. Routers import from here
instead of from `main` so the app module stays free of import cycles.
"""

from __future__ import annotations

from typing import Callable, Optional, Tuple
import os
import logging

from fastapi import Request, Response

from ..client import CommandDispatcher, ExplorerClient
from ..config import ExplorerConfig, load_explorer_config
from ..identity_access.stores import SessionRecord, SessionStore, TabStorage
from .auth_utils import cookie_opts

logger = logging.getLogger("explorer.web")

SESSION_COOKIE_NAME = "explorer_session"
NO_STORE = {"Cache-Control": "private, no-store"}


class WebSettings:
    def __init__(self) -> None:
        self._env_override: Optional[str] = None
        self._config: Optional[ExplorerConfig] = None

    @property
    def environment(self) -> str:
        if self._env_override is not None:
            return self._env_override
        return os.getenv("EXPLORER_ENV", "dev").lower()

    def override_environment(self, env: Optional[str]) -> None:
        """Override environment for tests (e.g., "prod"), or reset with None."""
        self._env_override = env

    @property
    def config(self) -> ExplorerConfig:
        if self._config is None:
            self._config = load_explorer_config()
        return self._config

    def override_config(self, cfg: Optional[ExplorerConfig]) -> None:
        self._config = cfg


ClientFactory = Callable[[ExplorerConfig, TabStorage], ExplorerClient]


def _default_client_factory(cfg: ExplorerConfig, storage: TabStorage) -> ExplorerClient:
    return ExplorerClient(cfg, storage=storage)


SETTINGS = WebSettings()
SESSION_STORE = SessionStore()
CLIENT_FACTORY: ClientFactory = _default_client_factory


def session_for(request: Request) -> Tuple[SessionRecord, bool]:
    """Return the caller's session record, creating one when needed.

    The boolean tells the caller to set the session cookie on its response.
    """
    sid = request.cookies.get(SESSION_COOKIE_NAME)
    rec = SESSION_STORE.get(sid) if sid else None
    created = rec is None
    if rec is None:
        rec = SESSION_STORE.create()
    if rec.client is None:
        rec.client = CLIENT_FACTORY(SETTINGS.config, rec.storage)
    return rec, created


def existing_session(request: Request) -> Optional[SessionRecord]:
    sid = request.cookies.get(SESSION_COOKIE_NAME)
    return SESSION_STORE.get(sid) if sid else None


def dispatcher_for(rec: SessionRecord) -> CommandDispatcher:
    return CommandDispatcher(rec.client)


def set_session_cookie(response: Response, session_id: str) -> None:
    # No max-age: the cookie ends with the browser session, like sessionStorage.
    response.set_cookie(key=SESSION_COOKIE_NAME, value=session_id, path="/", **cookie_opts(SETTINGS.environment))


def clear_session_cookie(response: Response) -> None:
    opts = cookie_opts(SETTINGS.environment)
    response.delete_cookie(
        key=SESSION_COOKIE_NAME, path="/", secure=opts["secure"], httponly=opts["httponly"], samesite=opts["samesite"]
    )


def drop_session(rec: SessionRecord) -> None:
    SESSION_STORE.delete(rec.session_id)
