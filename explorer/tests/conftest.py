"""
Pytest configuration for the explorer tests.

Why: Force AnyIO to use the asyncio backend (Trio is not installed) and keep
configuration-related environment variables from leaking into tests.
"""
import pytest


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def _clean_explorer_env(monkeypatch: pytest.MonkeyPatch):
    """Drop EXPLORER_* / OKTA_* variables from the developer shell."""
    import os

    for name in list(os.environ):
        if name.startswith(("EXPLORER_", "OKTA_")):
            monkeypatch.delenv(name, raising=False)
    yield


class _FakeOIDC:
    """Hosted UI stand-in: any code except "bad" yields tokens."""

    def __init__(self):
        self.userinfo_ok = True

    def build_authorization_url(self):
        return "https://auth.example.com/oauth2/authorize?response_type=code&client_id=c"

    def exchange_code_for_tokens(self, *, code):
        from explorer.identity_access.oidc import OIDCError

        if code == "bad":
            raise OIDCError("token_exchange_failed", 400)
        return {"id_token": "id-1", "access_token": "at-1", "refresh_token": "rt-1"}

    def fetch_user_info(self, access_token):
        from explorer.identity_access.oidc import OIDCError

        if not self.userinfo_ok:
            raise OIDCError("userinfo_failed", 401)
        return {"email": "user@example.com"}

    def build_logout_url(self, logout_uri=None):
        return "https://auth.example.com/logout?client_id=c&logout_uri=http%3A%2F%2Flocalhost%3A8000%2F"


class _FakeExchange:
    def exchange(self, id_token):
        from explorer.identity_access.credentials import TemporaryCredentials

        return TemporaryCredentials(
            identity_id="us-east-1:abc", access_key_id="ASIA", secret_access_key="s", session_token="t"
        )


class _MemoryStore:
    """Bucket stand-in keyed by object key."""

    def __init__(self):
        self.objects = {}
        self.fail = set()

    def list_objects(self):
        from datetime import datetime, timezone

        from explorer.storage.s3_adapter import StorageOperationError

        if "list" in self.fail:
            raise StorageOperationError("list_failed", "AccessDenied")
        stamp = datetime(2024, 5, 1, tzinfo=timezone.utc)
        return [{"Key": k, "Size": len(v), "LastModified": stamp} for k, v in sorted(self.objects.items())]

    def upload(self, *, key, body, content_type, metadata, progress=None):
        data = body.read()
        if progress:
            progress(len(data))
        self.objects[key] = data

    def presign_download(self, *, key, expires_in):
        from explorer.storage.s3_adapter import StorageOperationError

        if "presign" in self.fail:
            raise StorageOperationError("presign_failed", "Boom")
        return f"https://bucket.s3.amazonaws.com/{key}?X-Amz-Expires={expires_in}"

    def copy_object(self, *, source_key, dest_key):
        self.objects[dest_key] = self.objects[source_key]

    def delete_object(self, *, key):
        from explorer.storage.s3_adapter import StorageOperationError

        if "delete" in self.fail:
            raise StorageOperationError("delete_failed", "AccessDenied")
        self.objects.pop(key, None)


@pytest.fixture
def memory_store():
    return _MemoryStore()


@pytest.fixture
def make_client(memory_store):
    """Build an ExplorerClient wired to fakes; `storage` is the tab storage."""
    from explorer.client import ExplorerClient
    from explorer.config import ExplorerConfig

    def _make(cfg=None, storage=None):
        return ExplorerClient(
            cfg or ExplorerConfig(),
            storage=storage,
            oidc=_FakeOIDC(),
            exchange=_FakeExchange(),
            verify=lambda token: {"sub": "u1"},
            store_factory=lambda creds: memory_store,
        )

    return _make
