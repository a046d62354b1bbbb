"""
Object operations against an in-memory fake store.

Goals:
- Oversized files and repeated names are rejected before any storage call
- Accepted files upload concurrently and the list is fetched once per batch
- Rename is copy-then-delete: no-op, success, copy failure and partial failure
- Download links expire 300 s after issuance
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
import io
import threading

import pytest

from explorer.storage.operations import (
    LIST_FAILED_NOTICE,
    RENAME_FAILED_NOTICE,
    ObjectOperations,
    PendingUpload,
)
from explorer.storage.s3_adapter import StorageOperationError

MiB = 1024 * 1024
NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class FakeStore:
    def __init__(self):
        self.objects = {}
        self.calls = []
        self.fail = set()
        self.barrier = None

    def list_objects(self):
        self.calls.append(("list",))
        if "list" in self.fail:
            raise StorageOperationError("list_failed", "AccessDenied")
        return [{"Key": k, "Size": len(v), "LastModified": NOW} for k, v in sorted(self.objects.items())]

    def upload(self, *, key, body, content_type, metadata, progress=None):
        self.calls.append(("upload", key, content_type, dict(metadata)))
        if self.barrier is not None:
            self.barrier.wait()
        if key in self.fail:
            raise StorageOperationError("upload_failed", "AccessDenied")
        data = b""
        while True:
            chunk = body.read(MiB)
            if not chunk:
                break
            data += chunk
            if progress:
                progress(len(chunk))
        self.objects[key] = data

    def presign_download(self, *, key, expires_in):
        self.calls.append(("presign", key, expires_in))
        return f"https://bucket.s3.amazonaws.com/{key}?X-Amz-Expires={expires_in}"

    def copy_object(self, *, source_key, dest_key):
        self.calls.append(("copy", source_key, dest_key))
        if "copy" in self.fail:
            raise StorageOperationError("copy_failed", "AccessDenied")
        self.objects[dest_key] = self.objects[source_key]

    def delete_object(self, *, key):
        self.calls.append(("delete", key))
        if "delete" in self.fail:
            raise StorageOperationError("delete_failed", "AccessDenied")
        self.objects.pop(key, None)


def _ops(store=None):
    return ObjectOperations(store or FakeStore(), uploaded_by="user@example.com", clock=lambda: NOW)


def _file(name, data=b"hello", size=None, content_type="text/plain"):
    return PendingUpload(name=name, body=io.BytesIO(data), size=len(data) if size is None else size, content_type=content_type)


def test_empty_bucket_is_empty_state_not_error():
    listing = _ops().list_files()
    assert listing.is_empty
    assert listing.error is None


def test_list_failure_reports_error_text():
    store = FakeStore()
    store.fail.add("list")
    listing = _ops(store).list_files()
    assert listing.error == LIST_FAILED_NOTICE
    assert listing.items == []


def test_upload_then_list_includes_key():
    store = FakeStore()
    result = _ops(store).upload_files([_file("notes.txt")])

    assert [o.status for o in result.outcomes] == ["uploaded"]
    assert result.listing.keys() == ["notes.txt"]
    upload = next(c for c in store.calls if c[0] == "upload")
    assert upload[2] == "text/plain"
    assert upload[3] == {"uploaded-by": "user@example.com", "upload-time": NOW.isoformat()}


def test_ten_mib_report_reaches_full_progress():
    store = FakeStore()
    ops = _ops(store)
    result = ops.upload_files([_file("report.pdf", data=b"\0" * (10 * MiB), content_type="application/pdf")])

    outcome = result.outcomes[0]
    assert outcome.ok and outcome.percent == 100
    assert ops.progress.snapshot() == {"report.pdf": {"percent": 100, "status": "uploaded"}}
    item = result.listing.items[0]
    assert (item.key, item.display_size) == ("report.pdf", "10.00 MB")


def test_oversized_file_rejected_without_storage_call():
    store = FakeStore()
    result = _ops(store).upload_files([_file("huge.bin", data=b"x", size=100 * MiB + 1)])

    assert result.outcomes[0].status == "rejected"
    assert result.notices == ['File "huge.bin" exceeds 100MB limit']
    assert [c for c in store.calls if c[0] == "upload"] == []
    # The list is still refreshed once after the batch
    assert store.calls == [("list",)]


def test_file_of_exactly_100_mib_is_accepted():
    store = FakeStore()
    ops = _ops(store)
    outcome = ops.upload_files([_file("edge.bin", data=b"x", size=100 * MiB)]).outcomes[0]
    assert outcome.status == "uploaded"


def test_batch_uploads_run_concurrently():
    store = FakeStore()
    # Each upload waits for the other; a sequential batch would break the barrier.
    store.barrier = threading.Barrier(2, timeout=5)
    result = _ops(store).upload_files([_file("a.txt"), _file("b.txt")])
    assert [o.status for o in result.outcomes] == ["uploaded", "uploaded"]


def test_failed_file_does_not_block_the_rest():
    store = FakeStore()
    store.fail.add("bad.txt")
    result = _ops(store).upload_files([_file("bad.txt"), _file("good.txt"), _file("big.bin", size=101 * MiB)])

    assert [o.status for o in result.outcomes] == ["failed", "uploaded", "rejected"]
    assert result.listing.keys() == ["good.txt"]
    assert result.notices[0].startswith("Failed to upload bad.txt")
    assert [c for c in store.calls if c[0] == "list"] == [("list",)]


def test_repeated_name_in_batch_is_rejected():
    store = FakeStore()
    ops = _ops(store)
    result = ops.upload_files([_file("dup.txt", data=b"first"), _file("dup.txt", data=b"second-longer")])

    assert [o.status for o in result.outcomes] == ["uploaded", "rejected"]
    assert result.outcomes[1].message == 'File "dup.txt" appears more than once in this upload'
    assert store.objects == {"dup.txt": b"first"}
    assert [c[1] for c in store.calls if c[0] == "upload"] == ["dup.txt"]
    assert ops.progress.snapshot() == {"dup.txt": {"percent": 100, "status": "uploaded"}}


def test_download_link_expires_after_five_minutes():
    store = FakeStore()
    link = _ops(store).download_link("report.pdf")
    assert store.calls == [("presign", "report.pdf", 300)]
    assert link.expires_at - NOW == timedelta(seconds=300)
    assert link.url.endswith("X-Amz-Expires=300")


@pytest.mark.parametrize("new_key", ["a.txt", "", "   ", " a.txt "])
def test_rename_noop_makes_no_calls(new_key):
    store = FakeStore()
    store.objects["a.txt"] = b"1"
    outcome = _ops(store).rename("a.txt", new_key)
    assert outcome.status == "noop"
    assert store.calls == []


def test_rename_success_moves_key():
    store = FakeStore()
    store.objects["a.txt"] = b"1"
    outcome = _ops(store).rename("a.txt", "  b.txt ")

    assert outcome.status == "renamed"
    assert store.calls[:2] == [("copy", "a.txt", "b.txt"), ("delete", "a.txt")]
    assert outcome.listing.keys() == ["b.txt"]


def test_rename_copy_failure_aborts_before_delete():
    store = FakeStore()
    store.objects["a.txt"] = b"1"
    store.fail.add("copy")
    outcome = _ops(store).rename("a.txt", "b.txt")

    assert outcome.status == "failed"
    assert outcome.message == RENAME_FAILED_NOTICE
    assert ("delete", "a.txt") not in store.calls
    assert outcome.listing.keys() == ["a.txt"]


def test_rename_delete_failure_leaves_both_keys():
    store = FakeStore()
    store.objects["a.txt"] = b"1"
    store.fail.add("delete")
    outcome = _ops(store).rename("a.txt", "b.txt")

    assert outcome.status == "partial"
    assert outcome.listing.keys() == ["a.txt", "b.txt"]
    assert "both files now exist" in outcome.message
