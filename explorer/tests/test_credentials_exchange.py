"""
Federated credential exchange tests using botocore's Stubber.

The cognito-identity client is real (unsigned); no network is touched.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from botocore.stub import Stubber

from explorer.identity_access.credentials import (
    CredentialExchangeError,
    FederatedCredentialExchange,
    build_identity_client,
)

POOL = "us-east-1:11111111-2222-3333-4444-555555555555"
PROVIDER = "cognito-idp.us-east-1.amazonaws.com/us-east-1_pool"


def _exchange():
    client = build_identity_client("us-east-1")
    return FederatedCredentialExchange(
        region="us-east-1", identity_pool_id=POOL, login_provider=PROVIDER, client=client
    ), client


def test_exchange_returns_temporary_credentials():
    exchange, client = _exchange()
    expiration = datetime(2030, 1, 1, tzinfo=timezone.utc)
    with Stubber(client) as stub:
        stub.add_response(
            "get_id",
            {"IdentityId": "us-east-1:identity"},
            {"IdentityPoolId": POOL, "Logins": {PROVIDER: "id-token"}},
        )
        stub.add_response(
            "get_credentials_for_identity",
            {
                "IdentityId": "us-east-1:identity",
                "Credentials": {
                    "AccessKeyId": "ASIAEXAMPLE",
                    "SecretKey": "secret",
                    "SessionToken": "session",
                    "Expiration": expiration,
                },
            },
            {"IdentityId": "us-east-1:identity", "Logins": {PROVIDER: "id-token"}},
        )
        creds = exchange.exchange("id-token")
        stub.assert_no_pending_responses()

    assert creds.identity_id == "us-east-1:identity"
    assert creds.access_key_id == "ASIAEXAMPLE"
    assert creds.session_token == "session"
    assert creds.expiration == expiration
    assert "secret" not in repr(creds)


def test_exchange_rejected_by_identity_pool():
    exchange, client = _exchange()
    with Stubber(client) as stub:
        stub.add_client_error("get_id", service_error_code="NotAuthorizedException", http_status_code=400)
        with pytest.raises(CredentialExchangeError) as exc:
            exchange.exchange("id-token")
    assert exc.value.code == "credential_exchange_failed"


def test_exchange_requires_token():
    exchange, _ = _exchange()
    with pytest.raises(CredentialExchangeError) as exc:
        exchange.exchange("")
    assert exc.value.code == "missing_id_token"
