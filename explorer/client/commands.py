"""
Named commands: the single entry point for every user action.

The web adapter (or any other front end) calls `dispatch(name, **payload)`
instead of reaching into the auth session or the object operations directly.
Storage commands require the `authenticated` state.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Dict, Iterable, List
import logging

from ..storage.operations import PendingUpload

if TYPE_CHECKING:
    from .explorer import ExplorerClient

logger = logging.getLogger("explorer.client")


class UnknownCommandError(Exception):
    def __init__(self, name: str):
        super().__init__(f"unknown_command:{name}")
        self.name = name


class CommandDispatcher:
    def __init__(self, client: "ExplorerClient"):
        self.client = client
        self._handlers: Dict[str, Callable[..., Any]] = {
            "sign-in": self._sign_in,
            "callback": self._callback,
            "check-session": self._check_session,
            "sign-out": self._sign_out,
            "list": self._list,
            "upload": self._upload,
            "download": self._download,
            "rename": self._rename,
        }

    @property
    def commands(self) -> List[str]:
        return sorted(self._handlers)

    def dispatch(self, name: str, **payload: Any) -> Any:
        handler = self._handlers.get(name)
        if handler is None:
            raise UnknownCommandError(name)
        logger.debug("dispatch %s", name)
        return handler(**payload)

    # --- Auth ------------------------------------------------------------------

    def _sign_in(self) -> str:
        return self.client.auth.sign_in()

    def _callback(self, *, code: str):
        return self.client.auth.init(code=code)

    def _check_session(self):
        return self.client.auth.init()

    def _sign_out(self) -> str:
        url = self.client.auth.sign_out()
        self.client.reset()
        return url

    # --- Storage ---------------------------------------------------------------

    def _list(self):
        return self.client.operations.list_files()

    def _upload(self, *, files: Iterable[PendingUpload]):
        return self.client.operations.upload_files(files)

    def _download(self, *, key: str):
        return self.client.operations.download_link(key)

    def _rename(self, *, old_key: str, new_key: str):
        return self.client.operations.rename(old_key, new_key)


__all__ = ["CommandDispatcher", "UnknownCommandError"]
