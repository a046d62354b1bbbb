from typing import Iterable, Mapping, Optional

from ...storage.models import ListResult, UploadOutcome
from .base import Component
from .file_list import FileList
from .notices import Notices
from .upload import ProgressPanel, UploadForm, UploadResults


class ExplorerPage(Component):
    """Main content for authenticated sessions.

    `#explorerContent` holds the last batch result and the file list; the
    htmx upload, rename and refresh requests swap its contents.
    """

    def __init__(
        self,
        listing: ListResult,
        *,
        notices: Iterable[str] = (),
        outcomes: Optional[Iterable[UploadOutcome]] = None,
        progress: Optional[Mapping[str, Mapping[str, object]]] = None,
        max_mb: int = 100,
    ):
        self.listing = listing
        self.notices = list(notices)
        self.outcomes = list(outcomes or [])
        self.progress = progress
        self.max_mb = max_mb

    def render(self) -> str:
        return f"""<section id="appSection">
    {Notices(self.notices, level="warning").render()}
    {UploadForm(self.max_mb).render()}
    {ProgressPanel(self.progress).render()}
    <div class="list-header">
        <h2>Files</h2>
        <a href="/" class="btn btn-sm" id="refreshButton" hx-get="/files" hx-target="#explorerContent" hx-swap="innerHTML">Refresh</a>
    </div>
    <div id="explorerContent">
        {UploadResults(self.outcomes).render()}
        {FileList(self.listing).render()}
    </div>
</section>"""
