"""
Deployment settings resolution: context beats environment beats defaults,
and invalid combinations fail before any construct is created.
"""

from __future__ import annotations

import pytest

from explorer.infra.settings import TopologyConfigurationError, load_topology_settings


def test_defaults_are_native_us_east_1():
    s = load_topology_settings({}, {})
    assert s.variant == "native"
    assert s.region == "us-east-1"
    assert s.okta_domain == "nearfoundation.okta.com"
    assert s.client_app_bases == ("http://localhost:8000",)
    assert not s.external_idp


def test_context_wins_over_environment():
    s = load_topology_settings(
        {"region": "eu-central-1", "variant": "external-idp", "oktaClientId": "ctx-client"},
        {"CDK_DEFAULT_REGION": "us-west-2", "EXPLORER_VARIANT": "native", "OKTA_CLIENT_ID": "env-client"},
    )
    assert (s.region, s.variant, s.okta_client_id) == ("eu-central-1", "external-idp", "ctx-client")


def test_environment_fills_missing_context():
    s = load_topology_settings(
        {},
        {
            "CDK_DEFAULT_ACCOUNT": "123456789012",
            "EXPLORER_VARIANT": "external-idp",
            "OKTA_DOMAIN": "example.okta.com",
            "OKTA_CLIENT_ID": "env-client",
            "EXPLORER_APP_BASE": "http://localhost:8000, http://127.0.0.1:9000/",
        },
    )
    assert s.account == "123456789012"
    assert s.issuer_url == "https://example.okta.com"
    assert s.client_app_bases == ("http://localhost:8000", "http://127.0.0.1:9000")


def test_external_idp_requires_client_id():
    with pytest.raises(TopologyConfigurationError, match="Okta Client ID is required"):
        load_topology_settings({"variant": "external-idp"}, {})


def test_native_variant_does_not_need_client_id():
    assert load_topology_settings({"variant": "native"}, {}).okta_client_id is None


def test_unknown_variant_rejected():
    with pytest.raises(TopologyConfigurationError, match="Unknown variant"):
        load_topology_settings({"variant": "saml"}, {})


def test_blank_context_falls_back():
    s = load_topology_settings({"oktaDomain": "  "}, {"OKTA_DOMAIN": "corp.okta.com"})
    assert s.okta_domain == "corp.okta.com"
