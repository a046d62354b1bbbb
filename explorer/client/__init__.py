from .commands import CommandDispatcher, UnknownCommandError
from .explorer import ExplorerClient, NotAuthenticatedError

__all__ = ["CommandDispatcher", "ExplorerClient", "NotAuthenticatedError", "UnknownCommandError"]
