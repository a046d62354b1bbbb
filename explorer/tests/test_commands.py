"""
Command dispatcher tests: every user action enters through `dispatch`.
"""

from __future__ import annotations

import io

import pytest

from explorer.client import CommandDispatcher, NotAuthenticatedError, UnknownCommandError
from explorer.identity_access.domain import AuthState
from explorer.storage.operations import PendingUpload


def test_known_commands(make_client):
    dispatcher = CommandDispatcher(make_client())
    assert dispatcher.commands == sorted(
        ["sign-in", "callback", "check-session", "sign-out", "list", "upload", "download", "rename"]
    )


def test_unknown_command_raises(make_client):
    with pytest.raises(UnknownCommandError) as exc:
        CommandDispatcher(make_client()).dispatch("delete-everything")
    assert exc.value.name == "delete-everything"


@pytest.mark.parametrize(
    "name, payload",
    [("list", {}), ("download", {"key": "a"}), ("rename", {"old_key": "a", "new_key": "b"}), ("upload", {"files": []})],
)
def test_storage_commands_require_authentication(make_client, name, payload):
    dispatcher = CommandDispatcher(make_client())
    assert dispatcher.dispatch("check-session") is AuthState.ANONYMOUS
    with pytest.raises(NotAuthenticatedError):
        dispatcher.dispatch(name, **payload)


def test_full_session_through_dispatcher(make_client, memory_store):
    dispatcher = CommandDispatcher(make_client())

    assert dispatcher.dispatch("sign-in").startswith("https://auth.example.com/oauth2/authorize")
    assert dispatcher.dispatch("callback", code="abc") is AuthState.AUTHENTICATED

    upload = PendingUpload(name="notes.txt", body=io.BytesIO(b"hi"), size=2)
    batch = dispatcher.dispatch("upload", files=[upload])
    assert batch.listing.keys() == ["notes.txt"]
    assert memory_store.objects["notes.txt"] == b"hi"

    outcome = dispatcher.dispatch("rename", old_key="notes.txt", new_key="renamed.txt")
    assert outcome.status == "renamed"
    assert dispatcher.dispatch("list").keys() == ["renamed.txt"]

    link = dispatcher.dispatch("download", key="renamed.txt")
    assert "X-Amz-Expires=300" in link.url

    assert dispatcher.dispatch("sign-out").startswith("https://auth.example.com/logout")
    with pytest.raises(NotAuthenticatedError):
        dispatcher.dispatch("list")


def test_uploads_are_attributed_to_signed_in_user(make_client):
    client = make_client()
    dispatcher = CommandDispatcher(client)
    dispatcher.dispatch("callback", code="abc")
    assert client.operations.uploaded_by == "user@example.com"


def test_failed_callback_stays_anonymous(make_client):
    client = make_client()
    assert CommandDispatcher(client).dispatch("callback", code="bad") is AuthState.ANONYMOUS
    assert len(client.auth.storage) == 0


def test_unconfigured_bucket_lists_inline_error(make_client):
    from explorer.client import ExplorerClient

    base = make_client()
    client = ExplorerClient(
        base.config, oidc=base.oidc, exchange=base.auth._exchange, verify=lambda token: {"sub": "u1"}
    )
    dispatcher = CommandDispatcher(client)
    assert dispatcher.dispatch("callback", code="ok") is AuthState.AUTHENTICATED
    listing = dispatcher.dispatch("list")
    assert listing.error == "Failed to load files"
    assert listing.items == []
