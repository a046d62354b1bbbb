"""
Authentication routes: page entry, hosted UI redirects and the callback leg.

Behavior:
    - `GET /` is the page load: it runs `check-session` and renders either the
      sign-in panel or the explorer page. A failed re-validation signs the
      session out and continues to the hosted logout endpoint.
    - `GET /callback?code=` runs the callback leg and always lands on `/`;
      failures leave the generic notice for the next page render.
    - `GET /auth/logout` drops the server-side session and expires the cookie.

Security:
    Responses carry `Cache-Control: private, no-store`. Tokens never leave the
    session record; the cookie holds only the opaque session id.
"""

from __future__ import annotations

from typing import Optional
import logging

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from ...identity_access.domain import AuthState
from ...storage.config import get_max_upload_bytes
from ..components import ExplorerPage, Layout, LoginPanel
from ..state import (
    NO_STORE,
    clear_session_cookie,
    dispatcher_for,
    drop_session,
    session_for,
    set_session_cookie,
)

auth_router = APIRouter(tags=["Auth"])
logger = logging.getLogger("explorer.web.auth")


@auth_router.get("/", response_class=HTMLResponse)
def index(request: Request):
    rec, created = session_for(request)
    dispatcher = dispatcher_for(rec)
    state = dispatcher.dispatch("check-session")
    if state is AuthState.SIGNED_OUT:
        # Stored tokens no longer valid: finish the sign-out at the hosted UI.
        response = RedirectResponse(url=rec.client.oidc.build_logout_url(), status_code=302, headers=NO_STORE)
        drop_session(rec)
        clear_session_cookie(response)
        return response

    auth = rec.client.auth
    notices = rec.pop_notices()
    auth_notice = auth.pop_notice()
    if auth_notice:
        notices.insert(0, auth_notice)

    if state is AuthState.AUTHENTICATED:
        listing = dispatcher.dispatch("list")
        content = ExplorerPage(
            listing,
            notices=notices,
            outcomes=rec.pop_uploads(),
            progress=rec.client.operations.progress.snapshot(),
            max_mb=get_max_upload_bytes() // (1024 * 1024),
        ).render()
        html = Layout("Files", content, user_email=auth.display_name).render()
    else:
        html = Layout("Sign in", LoginPanel(notices).render()).render()
    response = HTMLResponse(content=html, headers=NO_STORE)
    if created:
        set_session_cookie(response, rec.session_id)
    return response


@auth_router.get("/auth/login")
def auth_login(request: Request):
    rec, created = session_for(request)
    url = dispatcher_for(rec).dispatch("sign-in")
    response = RedirectResponse(url=url, status_code=302, headers=NO_STORE)
    if created:
        set_session_cookie(response, rec.session_id)
    return response


@auth_router.get("/callback")
def auth_callback(request: Request, code: Optional[str] = None):
    rec, created = session_for(request)
    if code:
        state = dispatcher_for(rec).dispatch("callback", code=code)
        logger.info("Callback finished: state=%s", state.value)
    response = RedirectResponse(url="/", status_code=302, headers=NO_STORE)
    if created:
        set_session_cookie(response, rec.session_id)
    return response


@auth_router.get("/auth/logout")
def auth_logout(request: Request):
    # Without a session a throwaway one still yields the hosted logout URL.
    rec, _ = session_for(request)
    url = dispatcher_for(rec).dispatch("sign-out")
    drop_session(rec)
    response = RedirectResponse(url=url, status_code=302, headers=NO_STORE)
    clear_session_cookie(response)
    return response
