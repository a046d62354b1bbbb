from typing import Dict, Iterable, Mapping, Optional

from ...storage.models import UploadOutcome
from .base import Component

PROGRESS_POLL_TRIGGER = "load delay:1s"
PROGRESS_START_TRIGGER = "submit from:#uploadForm delay:500ms"


class UploadForm(Component):
    """Multipart form for one or more files; the size ceiling is shown, not enforced, here.

    Plain browsers post and follow the redirect back to `/`; with htmx the
    batch result replaces `#explorerContent` in place.
    """

    def __init__(self, max_mb: int = 100):
        self.max_mb = max_mb

    def render(self) -> str:
        attrs = self.attributes(
            id="uploadForm",
            method="post",
            action="/files/upload",
            enctype="multipart/form-data",
            hx_post="/files/upload",
            hx_encoding="multipart/form-data",
            hx_target="#explorerContent",
            hx_swap="innerHTML",
        )
        return f"""<form {attrs}>
        <label for="fileInput">Upload files (max {self.max_mb}MB each)</label>
        <input id="fileInput" type="file" name="files" multiple required>
        <button type="submit" class="btn btn-primary">Upload</button>
    </form>"""


class UploadResults(Component):
    def __init__(self, outcomes: Iterable[UploadOutcome]):
        self.outcomes = list(outcomes)

    def render(self) -> str:
        if not self.outcomes:
            return ""
        rows = []
        for o in self.outcomes:
            css = self.classes("upload-result", ok=o.ok, error=not o.ok)
            rows.append(
                f'<li {self.attributes(class_=css, data_status=o.status)}>'
                f'<span class="percent">{o.percent}%</span> {self.escape(o.message or o.name)}</li>'
            )
        return f'<ul id="uploadStatus" class="upload-results">{"".join(rows)}</ul>'


class ProgressPanel(Component):
    """Per-file transfer percentages of the batch in flight.

    The panel re-fetches itself from `/files/uploads` shortly after the upload
    form is submitted, then once a second while any file is still uploading.
    """

    def __init__(self, uploads: Optional[Mapping[str, Mapping[str, object]]] = None):
        self.uploads: Dict[str, Mapping[str, object]] = dict(uploads or {})

    @property
    def in_flight(self) -> bool:
        return any(u.get("status") == "uploading" for u in self.uploads.values())

    def render(self) -> str:
        triggers = [PROGRESS_START_TRIGGER]
        if self.in_flight:
            triggers.append(PROGRESS_POLL_TRIGGER)
        rows = []
        for name, upload in self.uploads.items():
            percent = int(upload.get("percent") or 0)
            rows.append(
                f'<li {self.attributes(data_file=name, data_status=upload.get("status"))}>'
                f'{self.escape(name)} <progress max="100" value="{percent}">{percent}%</progress> {percent}%</li>'
            )
        attrs = self.attributes(
            id="uploadProgress",
            class_="upload-progress",
            hx_get="/files/uploads",
            hx_trigger=", ".join(triggers),
            hx_swap="outerHTML",
        )
        return f'<div {attrs}><ul>{"".join(rows)}</ul></div>'
