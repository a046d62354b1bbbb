"""
Minimal OAuth 2.0 / OIDC client for the Cognito hosted UI.

Why: Keep web framework independent auth logic in a separate module. The web
adapter (FastAPI) and the command dispatcher call into this client to build
the authorization and logout URLs, exchange the authorization code for
tokens, and fetch the user profile.

Security: The app client is public (no secret), so the token exchange only
carries client_id, code and redirect_uri. No retries: every failure surfaces
as OIDCError and the caller forces a sign-out.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional
from urllib.parse import urlencode

# Small indirection to ease monkeypatching in tests
import requests as http

HTTP_TIMEOUT_SECONDS = 5
DEFAULT_SCOPE = "openid email profile"


def http_post(url: str, data: Dict[str, str], headers: Dict[str, str]):
    return http.post(url, data=data, headers=headers, timeout=HTTP_TIMEOUT_SECONDS)


def http_get(url: str, headers: Dict[str, str]):
    return http.get(url, headers=headers, timeout=HTTP_TIMEOUT_SECONDS)


class OIDCError(Exception):
    """Raised when a hosted UI endpoint answers with a non-success status."""

    def __init__(self, code: str, status_code: Optional[int] = None):
        super().__init__(code)
        self.code = code
        self.status_code = status_code


@dataclass(frozen=True)
class HostedUIConfig:
    domain: str  # e.g. https://s3-explorer-123.auth.us-east-1.amazoncognito.com
    client_id: str
    redirect_uri: str  # e.g. http://localhost:8000/callback
    logout_uri: str  # e.g. http://localhost:8000/
    scope: str = DEFAULT_SCOPE
    identity_provider: Optional[str] = None  # external IdP name, e.g. "Okta"

    @property
    def authorize_endpoint(self) -> str:
        return f"{self.domain.rstrip('/')}/oauth2/authorize"

    @property
    def token_endpoint(self) -> str:
        return f"{self.domain.rstrip('/')}/oauth2/token"

    @property
    def userinfo_endpoint(self) -> str:
        return f"{self.domain.rstrip('/')}/oauth2/userInfo"

    @property
    def logout_endpoint(self) -> str:
        return f"{self.domain.rstrip('/')}/logout"


class OIDCClient:
    def __init__(self, config: HostedUIConfig):
        self.cfg = config

    def build_authorization_url(self) -> str:
        """Return the hosted UI authorization URL for the code flow."""
        params = {
            "response_type": "code",
            "client_id": self.cfg.client_id,
            "redirect_uri": self.cfg.redirect_uri,
            "scope": self.cfg.scope,
        }
        if self.cfg.identity_provider:
            params["identity_provider"] = self.cfg.identity_provider
        return f"{self.cfg.authorize_endpoint}?{urlencode(params)}"

    def exchange_code_for_tokens(self, *, code: str) -> Dict[str, str]:
        """Exchange an authorization code for tokens at the token endpoint.

        Returns the token response (id_token, access_token, refresh_token, ...)
        on HTTP 200; raises OIDCError("token_exchange_failed") otherwise.
        """
        data = {
            "grant_type": "authorization_code",
            "client_id": self.cfg.client_id,
            "code": code,
            "redirect_uri": self.cfg.redirect_uri,
        }
        headers = {"Content-Type": "application/x-www-form-urlencoded"}
        try:
            resp = http_post(self.cfg.token_endpoint, data=data, headers=headers)
        except http.RequestException as exc:
            raise OIDCError("token_exchange_failed") from exc
        if resp.status_code != 200:
            raise OIDCError("token_exchange_failed", resp.status_code)
        try:
            tokens = resp.json()
        except ValueError as exc:
            raise OIDCError("token_exchange_failed", resp.status_code) from exc
        if not isinstance(tokens, dict):
            raise OIDCError("token_exchange_failed", resp.status_code)
        return tokens

    def fetch_user_info(self, access_token: str) -> Dict[str, object]:
        """Return the userInfo claims for an access token.

        Doubles as the token validity check on page reload.
        """
        headers = {"Authorization": f"Bearer {access_token}"}
        try:
            resp = http_get(self.cfg.userinfo_endpoint, headers=headers)
        except http.RequestException as exc:
            raise OIDCError("userinfo_failed") from exc
        if resp.status_code != 200:
            raise OIDCError("userinfo_failed", resp.status_code)
        try:
            profile = resp.json()
        except ValueError as exc:
            raise OIDCError("userinfo_failed", resp.status_code) from exc
        if not isinstance(profile, dict):
            raise OIDCError("userinfo_failed", resp.status_code)
        return profile

    def build_logout_url(self, logout_uri: Optional[str] = None) -> str:
        params = {"client_id": self.cfg.client_id, "logout_uri": logout_uri or self.cfg.logout_uri}
        return f"{self.cfg.logout_endpoint}?{urlencode(params)}"


__all__ = ["HostedUIConfig", "OIDCClient", "OIDCError", "http_get", "http_post"]
