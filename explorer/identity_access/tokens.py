"""
Cognito ID token verification.

The callback leg verifies the ID token before anything is written to tab
storage, and before the token is presented to the identity pool.

Checks:
    - signature against the user pool JWKS (`{issuer}/.well-known/jwks.json`),
      RS256 only whatever the key advertises
    - `iss` equals the user pool issuer, `aud` equals the app client id
    - `token_use` is `id` (Cognito access tokens carry no `aud`)
    - `exp` / `iat` within MAX_CLOCK_SKEW_SECONDS

Key rotation: an unknown `kid` triggers one forced JWKS refetch before the
token is rejected.
"""
from __future__ import annotations

from typing import Callable, Dict, Optional, Tuple
import time

import requests
from jose import jwt
from jose.exceptions import JOSEError

JWKS_TIMEOUT_SECONDS = 5
MAX_CLOCK_SKEW_SECONDS = 5
ALLOWED_ALGORITHMS = ["RS256"]

JWKS = Dict[str, object]


class IDTokenVerificationError(Exception):
    """Raised when the ID token fails verification; `code` is safe to log."""

    def __init__(self, code: str):
        super().__init__(code)
        self.code = code


def jwks_url(issuer: str) -> str:
    return f"{issuer.rstrip('/')}/.well-known/jwks.json"


def fetch_jwks(issuer: str) -> JWKS:
    try:
        resp = requests.get(jwks_url(issuer), timeout=JWKS_TIMEOUT_SECONDS)
    except requests.RequestException as exc:
        raise IDTokenVerificationError("jwks_fetch_failed") from exc
    if resp.status_code != 200:
        raise IDTokenVerificationError("jwks_fetch_failed")
    try:
        body = resp.json()
    except ValueError as exc:
        raise IDTokenVerificationError("jwks_invalid") from exc
    if not isinstance(body, dict) or not isinstance(body.get("keys"), list):
        raise IDTokenVerificationError("jwks_invalid")
    return body


class JWKSCache:
    """Per-issuer JWKS held for `ttl_seconds`; `forget` drops one issuer."""

    def __init__(self, ttl_seconds: int = 300, clock: Callable[[], float] = time.time):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._by_issuer: Dict[str, Tuple[float, JWKS]] = {}

    def get(self, issuer: str) -> JWKS:
        cached = self._by_issuer.get(issuer)
        now = self._clock()
        if cached is not None and cached[0] > now:
            return cached[1]
        jwks = fetch_jwks(issuer)
        self._by_issuer[issuer] = (now + self.ttl_seconds, jwks)
        return jwks

    def forget(self, issuer: str) -> None:
        self._by_issuer.pop(issuer, None)


JWKS_CACHE = JWKSCache()


def _signing_key(jwks: JWKS, kid: str) -> Optional[Dict[str, object]]:
    for key in jwks.get("keys") or []:
        if isinstance(key, dict) and key.get("kid") == kid:
            return key
    return None


def _lookup_key(cache, issuer: str, kid: str) -> Dict[str, object]:
    key = _signing_key(cache.get(issuer), kid)
    if key is None and hasattr(cache, "forget"):
        # Pool keys may have rotated since the last fetch
        cache.forget(issuer)
        key = _signing_key(cache.get(issuer), kid)
    if key is None:
        raise IDTokenVerificationError("unknown_kid")
    return key


def _check_lifetime(claims: Dict[str, object], now: float) -> None:
    exp = claims.get("exp")
    if not isinstance(exp, (int, float)):
        raise IDTokenVerificationError("invalid_id_token")
    if now > exp + MAX_CLOCK_SKEW_SECONDS:
        raise IDTokenVerificationError("expired_id_token")
    iat = claims.get("iat")
    if isinstance(iat, (int, float)) and iat > now + MAX_CLOCK_SKEW_SECONDS:
        raise IDTokenVerificationError("invalid_id_token")


def verify_id_token(
    *,
    id_token: str,
    issuer: str,
    client_id: str,
    cache: Optional[JWKSCache] = None,
) -> Dict[str, object]:
    """Return the claims of a valid Cognito ID token.

    Raises IDTokenVerificationError with one of: `invalid_id_token`,
    `missing_kid`, `unknown_kid`, `invalid_token_use`, `expired_id_token`,
    `jwks_fetch_failed`, `jwks_invalid`.
    """
    cache = cache or JWKS_CACHE
    try:
        kid = jwt.get_unverified_header(id_token).get("kid")
    except JOSEError as exc:
        raise IDTokenVerificationError("invalid_id_token") from exc
    if not kid:
        raise IDTokenVerificationError("missing_kid")
    key = _lookup_key(cache, issuer, kid)

    try:
        # Lifetime is checked below with the shared skew allowance
        claims = jwt.decode(
            id_token,
            key,
            algorithms=ALLOWED_ALGORITHMS,
            audience=client_id,
            issuer=issuer,
            options={"verify_exp": False, "verify_iat": False, "verify_nbf": False, "verify_at_hash": False},
        )
    except JOSEError as exc:
        raise IDTokenVerificationError("invalid_id_token") from exc

    if claims.get("token_use") != "id":
        raise IDTokenVerificationError("invalid_token_use")
    _check_lifetime(claims, time.time())
    return claims


__all__ = ["IDTokenVerificationError", "JWKSCache", "JWKS_CACHE", "fetch_jwks", "verify_id_token"]
