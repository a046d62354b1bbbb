"""
Use cases on the data bucket: list, upload batch, download link, rename.

Behavior:
    - Every call is independent; nothing is retried and nothing is rolled back.
    - Uploads over the size ceiling, and repeats of a name already in the
      batch, are rejected before any storage call.
      Accepted files of one batch run concurrently, one worker per file, and
      the listing is fetched once after the whole batch settles.
    - Rename is copy-then-delete. A failed delete leaves both keys in the
      bucket and is reported as `partial`; the listing is refreshed anyway.

Permissions:
    Callers pass a store signed with the session's temporary credentials; this
    module never sees tokens or keys.
"""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import BinaryIO, Callable, Dict, Iterable, List, Optional
import logging
import threading

from .config import DEFAULT_CONTENT_TYPE, DOWNLOAD_URL_TTL_SECONDS, get_max_upload_bytes
from .models import BatchResult, DownloadLink, ListResult, ObjectItem, RenameOutcome, UploadOutcome
from .ports import ObjectStorePort, StorageOperationError

logger = logging.getLogger("explorer.storage")

LIST_FAILED_NOTICE = "Failed to load files"
DOWNLOAD_FAILED_NOTICE = "Failed to download file"
RENAME_FAILED_NOTICE = "Failed to rename file"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def duplicate_notice(name: str) -> str:
    return f'File "{name}" appears more than once in this upload'


@dataclass
class PendingUpload:
    """One file picked for upload; `name` becomes the object key."""

    name: str
    body: BinaryIO
    size: int
    content_type: str = DEFAULT_CONTENT_TYPE


class UploadProgress:
    """Thread-safe per-file percentages for the batch in flight."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._totals: Dict[str, int] = {}
        self._sent: Dict[str, int] = {}
        self._status: Dict[str, str] = {}

    def start(self, name: str, total: int) -> None:
        with self._lock:
            self._totals[name] = max(int(total), 0)
            self._sent[name] = 0
            self._status[name] = "uploading"

    def advance(self, name: str, num_bytes: int) -> None:
        with self._lock:
            self._sent[name] = self._sent.get(name, 0) + int(num_bytes)

    def finish(self, name: str, status: str) -> None:
        with self._lock:
            self._status[name] = status
            if status == "uploaded":
                self._sent[name] = self._totals.get(name, 0)

    def percent(self, name: str) -> int:
        with self._lock:
            return self._percent_locked(name)

    def _percent_locked(self, name: str) -> int:
        total = self._totals.get(name, 0)
        if total <= 0:
            return 100 if self._status.get(name) == "uploaded" else 0
        sent = min(self._sent.get(name, 0), total)
        return int(round(sent * 100 / total))

    def snapshot(self) -> Dict[str, Dict[str, object]]:
        with self._lock:
            return {
                name: {"percent": self._percent_locked(name), "status": self._status.get(name, "")}
                for name in self._totals
            }

    def reset(self) -> None:
        with self._lock:
            self._totals.clear()
            self._sent.clear()
            self._status.clear()


def _to_item(raw: Dict[str, object]) -> ObjectItem:
    modified = raw.get("LastModified")
    return ObjectItem(
        key=str(raw.get("Key") or ""),
        size=int(raw.get("Size") or 0),
        last_modified=modified if isinstance(modified, datetime) else None,
    )


class ObjectOperations:
    def __init__(
        self,
        store: ObjectStorePort,
        *,
        uploaded_by: str = "",
        max_upload_bytes: Optional[int] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.store = store
        self.uploaded_by = uploaded_by
        self.max_upload_bytes = max_upload_bytes if max_upload_bytes is not None else get_max_upload_bytes()
        self.progress = UploadProgress()
        self._clock = clock

    # --- List ----------------------------------------------------------------------

    def list_files(self) -> ListResult:
        try:
            raw = self.store.list_objects()
        except StorageOperationError:
            return ListResult(items=[], error=LIST_FAILED_NOTICE)
        return ListResult(items=[_to_item(r) for r in raw])

    # --- Upload --------------------------------------------------------------------

    def rejection_notice(self, name: str) -> str:
        limit_mb = self.max_upload_bytes // (1024 * 1024)
        return f'File "{name}" exceeds {limit_mb}MB limit'

    def upload_files(self, files: Iterable[PendingUpload]) -> BatchResult:
        """Upload a batch and return per-file outcomes plus the refreshed listing."""
        files = list(files)
        self.progress.reset()
        outcomes: Dict[int, UploadOutcome] = {}
        accepted: List[tuple[int, PendingUpload]] = []
        seen: set[str] = set()
        for index, f in enumerate(files):
            # Progress and object keys are both the file name
            if f.name in seen:
                logger.info("upload rejected: duplicate name=%s", f.name)
                outcomes[index] = UploadOutcome(name=f.name, status="rejected", message=duplicate_notice(f.name))
                continue
            seen.add(f.name)
            if f.size > self.max_upload_bytes:
                logger.info("upload rejected: name=%s size=%d", f.name, f.size)
                outcomes[index] = UploadOutcome(name=f.name, status="rejected", message=self.rejection_notice(f.name))
                continue
            self.progress.start(f.name, f.size)
            accepted.append((index, f))
        if accepted:
            with ThreadPoolExecutor(max_workers=len(accepted)) as pool:
                futures = {index: pool.submit(self._upload_one, f) for index, f in accepted}
                for index, future in futures.items():
                    outcomes[index] = future.result()
        return BatchResult(outcomes=[outcomes[i] for i in range(len(files))], listing=self.list_files())

    def _upload_one(self, f: PendingUpload) -> UploadOutcome:
        metadata = {
            "uploaded-by": self.uploaded_by,
            "upload-time": self._clock().isoformat(),
        }

        def on_progress(num_bytes: int) -> None:
            self.progress.advance(f.name, num_bytes)

        try:
            self.store.upload(
                key=f.name,
                body=f.body,
                content_type=f.content_type or DEFAULT_CONTENT_TYPE,
                metadata=metadata,
                progress=on_progress,
            )
        except StorageOperationError as exc:
            self.progress.finish(f.name, "failed")
            return UploadOutcome(
                name=f.name,
                status="failed",
                message=f"Failed to upload {f.name}: {exc.detail or exc.code}",
                percent=self.progress.percent(f.name),
            )
        self.progress.finish(f.name, "uploaded")
        logger.info("uploaded: key=%s", f.name)
        return UploadOutcome(
            name=f.name,
            status="uploaded",
            message=f"Successfully uploaded {f.name}",
            percent=self.progress.percent(f.name),
        )

    # --- Download ------------------------------------------------------------------

    def download_link(self, key: str) -> DownloadLink:
        """Return a presigned GET URL valid for five minutes.

        Raises StorageOperationError when signing fails.
        """
        issued_at = self._clock()
        url = self.store.presign_download(key=key, expires_in=DOWNLOAD_URL_TTL_SECONDS)
        return DownloadLink(key=key, url=url, expires_at=issued_at + timedelta(seconds=DOWNLOAD_URL_TTL_SECONDS))

    # --- Rename --------------------------------------------------------------------

    def rename(self, old_key: str, new_key: str) -> RenameOutcome:
        new_key = (new_key or "").strip()
        if not new_key or new_key == old_key:
            return RenameOutcome(old_key=old_key, new_key=new_key, status="noop")
        try:
            self.store.copy_object(source_key=old_key, dest_key=new_key)
        except StorageOperationError:
            return RenameOutcome(
                old_key=old_key, new_key=new_key, status="failed",
                listing=self.list_files(), message=RENAME_FAILED_NOTICE,
            )
        try:
            self.store.delete_object(key=old_key)
        except StorageOperationError:
            logger.warning("rename left both keys: old=%s new=%s", old_key, new_key)
            return RenameOutcome(
                old_key=old_key, new_key=new_key, status="partial",
                listing=self.list_files(),
                message=f'Copied to "{new_key}" but could not remove "{old_key}"; both files now exist.',
            )
        logger.info("renamed: %s -> %s", old_key, new_key)
        return RenameOutcome(old_key=old_key, new_key=new_key, status="renamed", listing=self.list_files())


__all__ = [
    "DOWNLOAD_FAILED_NOTICE",
    "LIST_FAILED_NOTICE",
    "ObjectOperations",
    "PendingUpload",
    "RENAME_FAILED_NOTICE",
    "UploadProgress",
    "duplicate_notice",
]
