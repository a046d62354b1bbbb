"""Object store interface for the data bucket."""
from __future__ import annotations

from typing import Any, BinaryIO, Callable, Dict, List, Optional, Protocol

ProgressCallback = Callable[[int], None]

NOT_CONFIGURED = "object_store_not_configured"


class StorageOperationError(Exception):
    """Raised when a bucket call fails; `code` names the failed operation."""

    def __init__(self, code: str, detail: str = ""):
        super().__init__(code)
        self.code = code
        self.detail = detail


class ObjectStorePort(Protocol):
    """Protocol describing the bucket operations the explorer needs.

    Keep it small and SDK-agnostic so tests can supply simple fakes.
    Implementations raise StorageOperationError on failure.
    """

    def list_objects(self) -> List[Dict[str, Any]]: ...

    def upload(
        self,
        *,
        key: str,
        body: BinaryIO,
        content_type: str,
        metadata: Dict[str, str],
        progress: Optional[ProgressCallback] = None,
    ) -> None: ...

    def presign_download(self, *, key: str, expires_in: int) -> str: ...

    def copy_object(self, *, source_key: str, dest_key: str) -> None: ...

    def delete_object(self, *, key: str) -> None: ...


class NullObjectStore:
    """Fallback store used while no data bucket is configured."""

    def list_objects(self) -> List[Dict[str, Any]]:
        raise StorageOperationError("list_failed", NOT_CONFIGURED)

    def upload(self, *, key, body, content_type, metadata, progress=None) -> None:
        raise StorageOperationError("upload_failed", NOT_CONFIGURED)

    def presign_download(self, *, key: str, expires_in: int) -> str:
        raise StorageOperationError("presign_failed", NOT_CONFIGURED)

    def copy_object(self, *, source_key: str, dest_key: str) -> None:
        raise StorageOperationError("copy_failed", NOT_CONFIGURED)

    def delete_object(self, *, key: str) -> None:
        raise StorageOperationError("delete_failed", NOT_CONFIGURED)


__all__ = ["NOT_CONFIGURED", "NullObjectStore", "ObjectStorePort", "ProgressCallback", "StorageOperationError"]
