"""
Auth domain constants and the session state enum.

Why:
- Centralize tab-storage key names so the auth module, the web adapter and
  tests agree on the `idToken` / `accessToken` / `refreshToken` layout.
- Keep the auth states explicit instead of inferring them from token presence.
"""

from __future__ import annotations

from enum import Enum

ID_TOKEN_KEY = "idToken"
ACCESS_TOKEN_KEY = "accessToken"
REFRESH_TOKEN_KEY = "refreshToken"
TOKEN_KEYS = (ID_TOKEN_KEY, ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY)

AUTH_FAILED_NOTICE = "Authentication failed. Please try again."


class AuthState(str, Enum):
    ANONYMOUS = "anonymous"
    AWAITING_CALLBACK = "awaiting-callback"
    AUTHENTICATED = "authenticated"
    SIGNED_OUT = "signed-out"


__all__ = [
    "ACCESS_TOKEN_KEY",
    "AUTH_FAILED_NOTICE",
    "AuthState",
    "ID_TOKEN_KEY",
    "REFRESH_TOKEN_KEY",
    "TOKEN_KEYS",
]
