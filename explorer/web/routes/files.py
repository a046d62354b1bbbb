"""
File routes: list, upload batch, progress, download redirect and rename.

All routes require an authenticated session and act through the session's
command dispatcher. Form posts follow post/redirect/get for plain browsers
and return fragments for HTMX requests (`HX-Request` header).
"""

from __future__ import annotations

from typing import List, Optional
import logging

from fastapi import APIRouter, File, Form, Request, UploadFile
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse, Response

from ...identity_access.stores import SessionRecord
from ...storage.config import DEFAULT_CONTENT_TYPE
from ...storage.operations import DOWNLOAD_FAILED_NOTICE, PendingUpload
from ...storage.s3_adapter import StorageOperationError
from ..components import FileList, Notices, ProgressPanel, UploadResults
from ..state import NO_STORE, dispatcher_for, existing_session

files_router = APIRouter(tags=["Files"])
logger = logging.getLogger("explorer.web.files")


def _is_hx(request: Request) -> bool:
    return "HX-Request" in request.headers


def _authenticated(request: Request) -> Optional[SessionRecord]:
    rec = existing_session(request)
    if rec is None or rec.client is None or not rec.client.auth.is_authenticated:
        return None
    return rec


def _unauthenticated(request: Request, *, json: bool = False) -> Response:
    if json:
        return JSONResponse({"error": "unauthenticated"}, status_code=401, headers=NO_STORE)
    if _is_hx(request):
        return Response(status_code=401, headers={"HX-Redirect": "/", **NO_STORE})
    return RedirectResponse(url="/", status_code=302, headers=NO_STORE)


def _file_size(upload: UploadFile) -> int:
    fh = upload.file
    fh.seek(0, 2)
    size = fh.tell()
    fh.seek(0)
    return size


@files_router.get("/files", response_class=HTMLResponse)
def list_files(request: Request):
    rec = _authenticated(request)
    if rec is None:
        return _unauthenticated(request)
    listing = dispatcher_for(rec).dispatch("list")
    return HTMLResponse(content=FileList(listing).render(), headers=NO_STORE)


@files_router.post("/files/upload")
def upload_files(request: Request, files: List[UploadFile] = File(...)):
    rec = _authenticated(request)
    if rec is None:
        return _unauthenticated(request)
    pending = [
        PendingUpload(
            name=f.filename or "upload",
            body=f.file,
            size=_file_size(f),
            content_type=f.content_type or DEFAULT_CONTENT_TYPE,
        )
        for f in files
    ]
    result = dispatcher_for(rec).dispatch("upload", files=pending)
    if not _is_hx(request):
        rec.notices.extend(result.notices)
        rec.uploads = list(result.outcomes)
        return RedirectResponse(url="/", status_code=303, headers=NO_STORE)
    html = (
        Notices(result.notices, level="warning").render()
        + UploadResults(result.outcomes).render()
        + FileList(result.listing).render()
    )
    return HTMLResponse(content=html, headers=NO_STORE)


@files_router.get("/files/uploads")
def upload_progress(request: Request):
    """Progress of the batch in flight: JSON, or the progress panel for htmx."""
    rec = _authenticated(request)
    if rec is None:
        return _unauthenticated(request, json=not _is_hx(request))
    snapshot = rec.client.operations.progress.snapshot()
    if _is_hx(request):
        return HTMLResponse(content=ProgressPanel(snapshot).render(), headers=NO_STORE)
    return JSONResponse({"uploads": snapshot}, headers=NO_STORE)


@files_router.get("/files/download")
def download_file(request: Request, key: str):
    rec = _authenticated(request)
    if rec is None:
        return _unauthenticated(request)
    try:
        link = dispatcher_for(rec).dispatch("download", key=key)
    except StorageOperationError as exc:
        logger.warning("Download failed: key=%s code=%s", key, exc.code)
        rec.notices.append(DOWNLOAD_FAILED_NOTICE)
        return RedirectResponse(url="/", status_code=302, headers=NO_STORE)
    return RedirectResponse(url=link.url, status_code=302, headers=NO_STORE)


@files_router.post("/files/rename")
def rename_file(request: Request, old_key: str = Form(...), new_key: str = Form("")):
    rec = _authenticated(request)
    if rec is None:
        return _unauthenticated(request)
    dispatcher = dispatcher_for(rec)
    outcome = dispatcher.dispatch("rename", old_key=old_key, new_key=new_key)
    notices = [outcome.message] if outcome.message else []
    if not _is_hx(request):
        rec.notices.extend(notices)
        return RedirectResponse(url="/", status_code=303, headers=NO_STORE)
    listing = outcome.listing if outcome.listing is not None else dispatcher.dispatch("list")
    html = Notices(notices, level="warning").render() + FileList(listing).render()
    return HTMLResponse(content=html, headers=NO_STORE)
