"""
Auth session state machine for one tab.

States: anonymous -> awaiting-callback -> authenticated -> signed-out -> anonymous.

Behavior:
    - `init(code)` runs once per page load: a code in the query string starts
      the callback leg, otherwise stored tokens are re-validated.
    - Any failure on the callback leg fails closed: tokens are cleared, the
      session returns to anonymous and a generic notice is recorded.
    - Entering `authenticated` exchanges the ID token for temporary AWS
      credentials, held in memory only.
    - No refresh-token handling: an expired token is treated like an invalid
      one and forces a new sign-in.
"""
from __future__ import annotations

from typing import Callable, Dict, Optional
import logging

from .credentials import CredentialExchangeError, FederatedCredentialExchange, TemporaryCredentials
from .domain import (
    ACCESS_TOKEN_KEY,
    AUTH_FAILED_NOTICE,
    ID_TOKEN_KEY,
    REFRESH_TOKEN_KEY,
    AuthState,
)
from .oidc import OIDCClient, OIDCError
from .stores import TabStorage
from .tokens import IDTokenVerificationError

logger = logging.getLogger("explorer.identity_access")

IDTokenVerifier = Callable[[str], Dict[str, object]]

_AUTH_ERRORS = (OIDCError, IDTokenVerificationError, CredentialExchangeError)


class AuthSession:
    def __init__(
        self,
        *,
        oidc: OIDCClient,
        storage: TabStorage,
        exchange: FederatedCredentialExchange,
        verify_id_token: Optional[IDTokenVerifier] = None,
    ):
        self._oidc = oidc
        self._exchange = exchange
        self._verify = verify_id_token
        self.storage = storage
        self.state = AuthState.ANONYMOUS
        self.current_user: Optional[Dict[str, object]] = None
        self.credentials: Optional[TemporaryCredentials] = None
        self.notice: Optional[str] = None

    # --- Queries -----------------------------------------------------------------

    @property
    def is_authenticated(self) -> bool:
        return self.state is AuthState.AUTHENTICATED and self.credentials is not None

    @property
    def display_name(self) -> str:
        user = self.current_user or {}
        return str(user.get("email") or user.get("preferred_username") or "")

    def pop_notice(self) -> Optional[str]:
        notice, self.notice = self.notice, None
        return notice

    # --- Transitions ---------------------------------------------------------------

    def init(self, code: Optional[str] = None) -> AuthState:
        """Handle a page load: callback leg when `code` is present, else session check."""
        if self.state is AuthState.SIGNED_OUT:
            self.state = AuthState.ANONYMOUS
        if code:
            return self.handle_callback(code)
        return self.check_session()

    def sign_in(self) -> str:
        """Return the hosted UI URL to navigate to (full-page redirect)."""
        return self._oidc.build_authorization_url()

    def handle_callback(self, code: str) -> AuthState:
        self.state = AuthState.AWAITING_CALLBACK
        try:
            tokens = self._oidc.exchange_code_for_tokens(code=code)
            id_token = tokens.get("id_token")
            access_token = tokens.get("access_token")
            if not id_token or not access_token:
                raise OIDCError("incomplete_token_response")
            if self._verify is not None:
                self._verify(str(id_token))
            self._save_tokens(tokens)
            self._load_user(str(access_token))
            self._enter_authenticated()
        except _AUTH_ERRORS as exc:
            logger.warning("Auth callback failed: %s", getattr(exc, "code", exc.__class__.__name__))
            self._clear()
            self.state = AuthState.ANONYMOUS
            self.notice = AUTH_FAILED_NOTICE
        return self.state

    def check_session(self) -> AuthState:
        """Re-validate stored tokens by repeating the profile fetch."""
        id_token = self.storage.get_item(ID_TOKEN_KEY)
        access_token = self.storage.get_item(ACCESS_TOKEN_KEY)
        if not (id_token and access_token):
            self.current_user = None
            self.credentials = None
            self.state = AuthState.ANONYMOUS
            return self.state
        try:
            self._load_user(access_token)
            self._enter_authenticated()
        except _AUTH_ERRORS as exc:
            logger.warning("Session invalid: %s", getattr(exc, "code", exc.__class__.__name__))
            self.sign_out()
        return self.state

    def sign_out(self) -> str:
        """Clear tokens, identity and credentials; return the hosted logout URL."""
        self._clear()
        self.state = AuthState.SIGNED_OUT
        return self._oidc.build_logout_url()

    # --- Helpers ---------------------------------------------------------------------

    def _save_tokens(self, tokens: Dict[str, object]) -> None:
        self.storage.set_item(ID_TOKEN_KEY, tokens.get("id_token"))
        self.storage.set_item(ACCESS_TOKEN_KEY, tokens.get("access_token"))
        self.storage.set_item(REFRESH_TOKEN_KEY, tokens.get("refresh_token"))

    def _load_user(self, access_token: str) -> None:
        self.current_user = self._oidc.fetch_user_info(access_token)

    def _enter_authenticated(self) -> None:
        id_token = self.storage.get_item(ID_TOKEN_KEY) or ""
        self.credentials = self._exchange.exchange(id_token)
        self.state = AuthState.AUTHENTICATED
        logger.info("Signed in: identity=%s", self.credentials.identity_id)

    def _clear(self) -> None:
        self.storage.clear()
        self.current_user = None
        self.credentials = None


__all__ = ["AuthSession", "IDTokenVerifier"]
