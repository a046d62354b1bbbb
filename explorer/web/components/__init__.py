from .base import Component
from .explorer_page import ExplorerPage
from .file_list import EMPTY_STATE_TEXT, FileItem, FileList, RenameForm
from .layout import Layout
from .login import LoginPanel
from .notices import Notices
from .upload import ProgressPanel, UploadForm, UploadResults

__all__ = [
    "Component",
    "EMPTY_STATE_TEXT",
    "ExplorerPage",
    "FileItem",
    "FileList",
    "Layout",
    "LoginPanel",
    "Notices",
    "ProgressPanel",
    "RenameForm",
    "UploadForm",
    "UploadResults",
]
