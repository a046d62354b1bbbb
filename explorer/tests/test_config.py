"""
Client configuration tests: outputs file, env overrides and the startup guard.
"""

from __future__ import annotations

import json

import pytest

from explorer.config import ExplorerConfig, config_from_outputs, ensure_secure_config_on_startup, load_explorer_config

OUTPUTS = {
    "S3ExplorerStack": {
        "Region": "eu-west-1",
        "UserPoolId": "eu-west-1_pool",
        "UserPoolClientId": "client-1",
        "IdentityPoolId": "eu-west-1:ident",
        "DataBucketName": "s3-explorer-data-123-eu-west-1",
        "HostedUIDomain": "https://s3-explorer-123.auth.eu-west-1.amazoncognito.com",
        "CloudFrontURL": "https://d111.cloudfront.net",
    }
}


def test_config_from_nested_outputs():
    values = config_from_outputs(OUTPUTS)
    assert values["region"] == "eu-west-1"
    assert values["cognito_domain"].startswith("https://")
    assert "CloudFrontURL" not in values


def test_external_idp_outputs_select_provider_on_sign_in(tmp_path):
    from explorer.client import ExplorerClient

    outputs = {"S3ExplorerStack": {**OUTPUTS["S3ExplorerStack"], "IdentityProvider": "Okta"}}
    path = tmp_path / "outputs.json"
    path.write_text(json.dumps(outputs), encoding="utf-8")
    cfg = load_explorer_config({"EXPLORER_OUTPUTS_FILE": str(path)})

    assert cfg.identity_provider == "Okta"
    url = ExplorerClient(cfg, exchange=object()).oidc.build_authorization_url()
    assert "identity_provider=Okta" in url


def test_native_outputs_leave_provider_unset():
    assert ExplorerConfig(**config_from_outputs(OUTPUTS)).identity_provider is None


def test_load_config_prefers_env_over_outputs_file(tmp_path):
    path = tmp_path / "outputs.json"
    path.write_text(json.dumps(OUTPUTS), encoding="utf-8")
    cfg = load_explorer_config(
        {"EXPLORER_OUTPUTS_FILE": str(path), "EXPLORER_DATA_BUCKET": "other-bucket", "EXPLORER_IDENTITY_PROVIDER": "Okta"}
    )
    assert cfg.user_pool_id == "eu-west-1_pool"
    assert cfg.data_bucket_name == "other-bucket"
    assert cfg.identity_provider == "Okta"
    assert cfg.login_provider == "cognito-idp.eu-west-1.amazonaws.com/eu-west-1_pool"
    assert cfg.issuer == "https://cognito-idp.eu-west-1.amazonaws.com/eu-west-1_pool"


def test_default_config_derives_local_urls():
    cfg = load_explorer_config({})
    assert cfg.region == "us-east-1"
    assert cfg.redirect_uri == "http://localhost:8000/callback"
    assert cfg.logout_uri == "http://localhost:8000/"
    assert cfg.placeholders()


def test_guard_dev_tolerates_placeholders():
    ensure_secure_config_on_startup(ExplorerConfig(), environment="dev")


def test_guard_prod_rejects_placeholders():
    with pytest.raises(SystemExit):
        ensure_secure_config_on_startup(ExplorerConfig(), environment="prod")


def test_guard_prod_rejects_plain_http_domain():
    values = config_from_outputs(OUTPUTS)
    values["cognito_domain"] = "http://s3-explorer.example"
    with pytest.raises(SystemExit):
        ensure_secure_config_on_startup(ExplorerConfig(**values), environment="production")


def test_guard_prod_accepts_complete_config():
    ensure_secure_config_on_startup(ExplorerConfig(**config_from_outputs(OUTPUTS)), environment="prod")
