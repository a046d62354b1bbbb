"""
Federated identity exchange: Cognito ID token -> temporary AWS credentials.

Why: File operations are signed with credentials scoped to the signed-in
identity (the identity pool's authenticated role), never with long-lived keys.

Behavior:
    GetId + GetCredentialsForIdentity against the identity pool, presenting the
    ID token under the user pool provider name. Both calls are unauthenticated
    AWS APIs, so the client is built with unsigned requests.

Security: Returned credentials are kept in memory for the session lifetime
only; callers must not persist them.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional
import logging

import boto3
from botocore import UNSIGNED
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

_log = logging.getLogger("explorer.identity_access")


class CredentialExchangeError(Exception):
    """Raised when the identity pool refuses to issue credentials."""

    def __init__(self, code: str):
        super().__init__(code)
        self.code = code


@dataclass(frozen=True)
class TemporaryCredentials:
    identity_id: str
    access_key_id: str
    secret_access_key: str
    session_token: str
    expiration: Optional[datetime] = None

    def __repr__(self) -> str:  # keep secrets out of logs and tracebacks
        return f"TemporaryCredentials(identity_id={self.identity_id!r}, expiration={self.expiration!r})"


def build_identity_client(region: str) -> Any:
    return boto3.client("cognito-identity", region_name=region, config=Config(signature_version=UNSIGNED))


class FederatedCredentialExchange:
    def __init__(self, *, region: str, identity_pool_id: str, login_provider: str, client: Any = None):
        self.region = region
        self.identity_pool_id = identity_pool_id
        self.login_provider = login_provider
        self._client = client if client is not None else build_identity_client(region)

    def exchange(self, id_token: str) -> TemporaryCredentials:
        """Return temporary credentials for the identity behind `id_token`.

        Raises CredentialExchangeError on any service or transport failure.
        """
        if not id_token:
            raise CredentialExchangeError("missing_id_token")
        logins = {self.login_provider: id_token}
        try:
            identity = self._client.get_id(IdentityPoolId=self.identity_pool_id, Logins=logins)
            identity_id = identity["IdentityId"]
            resp = self._client.get_credentials_for_identity(IdentityId=identity_id, Logins=logins)
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code", "Unknown")
            _log.warning("credential exchange rejected: code=%s", code)
            raise CredentialExchangeError("credential_exchange_failed") from exc
        except BotoCoreError as exc:
            _log.warning("credential exchange failed: error=%s", type(exc).__name__)
            raise CredentialExchangeError("credential_exchange_failed") from exc
        creds = resp.get("Credentials") or {}
        try:
            return TemporaryCredentials(
                identity_id=resp.get("IdentityId") or identity_id,
                access_key_id=creds["AccessKeyId"],
                secret_access_key=creds["SecretKey"],
                session_token=creds["SessionToken"],
                expiration=creds.get("Expiration"),
            )
        except KeyError as exc:
            raise CredentialExchangeError("credentials_incomplete") from exc


__all__ = [
    "CredentialExchangeError",
    "FederatedCredentialExchange",
    "TemporaryCredentials",
    "build_identity_client",
]
