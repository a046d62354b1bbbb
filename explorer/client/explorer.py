"""
Per-session context of the explorer client.

One ExplorerClient exists per browser session. It owns the auth state machine
and, once authenticated, the object operations signed with that session's
temporary credentials. Nothing here is module-global, so two sessions never
share tokens, credentials or upload progress.
"""
from __future__ import annotations

from typing import Callable, Optional
import logging

from ..config import ExplorerConfig
from ..identity_access.credentials import FederatedCredentialExchange, TemporaryCredentials
from ..identity_access.oidc import HostedUIConfig, OIDCClient
from ..identity_access.session import AuthSession, IDTokenVerifier
from ..identity_access.stores import TabStorage
from ..identity_access.tokens import verify_id_token
from ..storage.operations import ObjectOperations
from ..storage.ports import NullObjectStore, ObjectStorePort
from ..storage.s3_adapter import S3ObjectStore

logger = logging.getLogger("explorer.client")

StoreFactory = Callable[[TemporaryCredentials], ObjectStorePort]


class NotAuthenticatedError(Exception):
    """Raised when a storage action runs outside the authenticated state."""

    def __init__(self, code: str = "not_authenticated"):
        super().__init__(code)
        self.code = code


def hosted_ui_config(cfg: ExplorerConfig) -> HostedUIConfig:
    return HostedUIConfig(
        domain=cfg.hosted_domain,
        client_id=cfg.user_pool_client_id,
        redirect_uri=cfg.redirect_uri,
        logout_uri=cfg.logout_uri,
        identity_provider=cfg.identity_provider,
    )


def id_token_verifier(cfg: ExplorerConfig) -> IDTokenVerifier:
    def _verify(token: str):
        return verify_id_token(id_token=token, issuer=cfg.issuer, client_id=cfg.user_pool_client_id)

    return _verify


class ExplorerClient:
    def __init__(
        self,
        config: ExplorerConfig,
        *,
        storage: Optional[TabStorage] = None,
        oidc: Optional[OIDCClient] = None,
        exchange: Optional[FederatedCredentialExchange] = None,
        verify: Optional[IDTokenVerifier] = None,
        store_factory: Optional[StoreFactory] = None,
    ):
        self.config = config
        self.oidc = oidc or OIDCClient(hosted_ui_config(config))
        exchange = exchange or FederatedCredentialExchange(
            region=config.region,
            identity_pool_id=config.identity_pool_id,
            login_provider=config.login_provider,
        )
        self.auth = AuthSession(
            oidc=self.oidc,
            storage=storage if storage is not None else TabStorage(),
            exchange=exchange,
            verify_id_token=verify if verify is not None else id_token_verifier(config),
        )
        self._store_factory = store_factory or self._default_store
        self._operations: Optional[ObjectOperations] = None
        self._operations_for: Optional[TemporaryCredentials] = None

    def _default_store(self, credentials: TemporaryCredentials) -> ObjectStorePort:
        if "data_bucket_name" in self.config.placeholders():
            logger.warning("No data bucket configured; storage commands will fail")
            return NullObjectStore()
        return S3ObjectStore.from_credentials(
            credentials, region=self.config.region, bucket=self.config.data_bucket_name
        )

    @property
    def operations(self) -> ObjectOperations:
        """Object operations bound to the current credentials.

        The operations object lives as long as the session so upload progress
        survives page loads; its store is re-signed whenever the credential
        exchange ran again.
        """
        creds = self.auth.credentials
        if not self.auth.is_authenticated or creds is None:
            raise NotAuthenticatedError()
        if self._operations is None:
            self._operations = ObjectOperations(self._store_factory(creds), uploaded_by=self.auth.display_name)
        elif self._operations_for is not creds:
            self._operations.store = self._store_factory(creds)
            self._operations.uploaded_by = self.auth.display_name
        self._operations_for = creds
        return self._operations

    def reset(self) -> None:
        self._operations = None
        self._operations_for = None


__all__ = ["ExplorerClient", "NotAuthenticatedError", "hosted_ui_config", "id_token_verifier"]
