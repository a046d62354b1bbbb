"""
File list fragment.

Behavior:
    - Error listing: a single danger alert, no items.
    - Empty listing: the empty-state marker "No files uploaded yet".
    - Otherwise one row per object with size, modified time, a download link
      and an inline rename form pre-filled with the current key.
"""

from urllib.parse import urlencode

from ...storage.models import ListResult, ObjectItem
from .base import Component

EMPTY_STATE_TEXT = "No files uploaded yet"


class RenameForm(Component):
    def __init__(self, key: str):
        self.key = key

    def render(self) -> str:
        attrs = self.attributes(
            method="post",
            action="/files/rename",
            class_="rename-form",
            hx_post="/files/rename",
            hx_target="#explorerContent",
            hx_swap="innerHTML",
        )
        return f"""<form {attrs}>
            <input {self.attributes(type="hidden", name="old_key", value=self.key)}>
            <input {self.attributes(type="text", name="new_key", value=self.key, aria_label="New file name", required=True)}>
            <button type="submit" class="btn btn-sm btn-outline-secondary">Rename</button>
        </form>"""


class FileItem(Component):
    def __init__(self, item: ObjectItem):
        self.item = item

    def render(self) -> str:
        href = "/files/download?" + urlencode({"key": self.item.key})
        modified = self.item.display_modified
        meta = self.escape(self.item.display_size)
        if modified:
            meta += f" &bull; Modified: {self.escape(modified)}"
        return f"""<div class="file-item" {self.attributes(data_key=self.item.key)}>
        <div class="file-name">{self.escape(self.item.key)}</div>
        <div class="file-meta small">{meta}</div>
        <a {self.attributes(href=href, class_="btn btn-sm btn-outline-primary")}>Download</a>
        {RenameForm(self.item.key).render()}
    </div>"""


class FileList(Component):
    def __init__(self, listing: ListResult):
        self.listing = listing

    def render(self) -> str:
        if self.listing.error:
            inner = f'<div class="alert alert-danger">{self.escape(self.listing.error)}</div>'
        elif not self.listing.items:
            inner = f'<div class="empty-state text-muted"><p>{EMPTY_STATE_TEXT}</p></div>'
        else:
            inner = "".join(FileItem(item).render() for item in self.listing.items)
        return f'<div id="fileList" class="file-list">{inner}</div>'
