"""Value objects returned by the storage operations."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from .formatting import format_file_size, format_timestamp


@dataclass(frozen=True)
class ObjectItem:
    key: str
    size: int
    last_modified: Optional[datetime] = None

    @property
    def display_size(self) -> str:
        return format_file_size(self.size)

    @property
    def display_modified(self) -> str:
        return format_timestamp(self.last_modified)


@dataclass(frozen=True)
class ListResult:
    items: list[ObjectItem] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.error is None and not self.items

    def keys(self) -> list[str]:
        return [item.key for item in self.items]


@dataclass
class UploadOutcome:
    name: str
    status: str  # "uploaded" | "rejected" | "failed"
    message: str = ""
    percent: int = 0

    @property
    def ok(self) -> bool:
        return self.status == "uploaded"


@dataclass(frozen=True)
class BatchResult:
    outcomes: list[UploadOutcome]
    listing: ListResult

    @property
    def notices(self) -> list[str]:
        return [o.message for o in self.outcomes if not o.ok and o.message]


@dataclass(frozen=True)
class DownloadLink:
    key: str
    url: str
    expires_at: datetime


@dataclass(frozen=True)
class RenameOutcome:
    old_key: str
    new_key: str
    status: str  # "noop" | "renamed" | "failed" | "partial"
    listing: Optional[ListResult] = None
    message: str = ""
