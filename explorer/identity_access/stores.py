"""
In-memory stores for the local client: TabStorage and SessionStore.

Why: The browser keeps OAuth tokens in `sessionStorage`, scoped to one tab and
gone when the tab closes. The local client reproduces that with one
`TabStorage` per session cookie; the cookie has no max-age so the browser
drops it with the browsing session.

Security: Cookies carry only an opaque session id. Tokens and temporary AWS
credentials stay in process memory and are never written to disk.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional
import secrets
import time


def _now() -> int:
    return int(time.time())


class TabStorage:
    """Key/value storage with the `sessionStorage` surface."""

    def __init__(self) -> None:
        self._items: Dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: Optional[str]) -> None:
        # sessionStorage stringifies; a missing token is stored as absent instead
        if value is None:
            self._items.pop(key, None)
            return
        self._items[key] = str(value)

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def clear(self) -> None:
        self._items.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._items

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)


@dataclass
class SessionRecord:
    session_id: str
    storage: TabStorage = field(default_factory=TabStorage)
    expires_at: Optional[int] = None
    client: Any = None  # per-session ExplorerClient, attached by the web adapter
    notices: List[str] = field(default_factory=list)
    uploads: List[Any] = field(default_factory=list)  # outcomes of the last plain-form upload batch

    def pop_notices(self) -> List[str]:
        notices, self.notices = self.notices, []
        return notices

    def pop_uploads(self) -> List[Any]:
        uploads, self.uploads = self.uploads, []
        return uploads


class SessionStore:
    def __init__(self, ttl_seconds: int = 12 * 3600):
        self.ttl_seconds = ttl_seconds
        self._data: Dict[str, SessionRecord] = {}

    def create(self) -> SessionRecord:
        sid = secrets.token_urlsafe(24)
        rec = SessionRecord(session_id=sid, expires_at=_now() + self.ttl_seconds)
        self._data[sid] = rec
        return rec

    def get(self, session_id: str) -> Optional[SessionRecord]:
        rec = self._data.get(session_id)
        if not rec:
            return None
        if rec.expires_at and rec.expires_at < _now():
            self.delete(session_id)
            return None
        return rec

    def delete(self, session_id: str) -> None:
        rec = self._data.pop(session_id, None)
        if rec is not None:
            rec.storage.clear()

    def __len__(self) -> int:
        return len(self._data)
