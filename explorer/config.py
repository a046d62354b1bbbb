"""
Client configuration and startup safety checks for the S3 Explorer.

Why: The client consumes values emitted by the CDK stack (pool ids, bucket
name, hosted UI domain). Keep their resolution in one place so the web adapter,
the auth module and tests agree on names and defaults.

Sources (later wins):
    1. A CDK outputs file (`cdk deploy --outputs-file outputs.json`) pointed to
       by EXPLORER_OUTPUTS_FILE.
    2. Individual EXPLORER_* environment variables.

Permissions: Pure configuration; reads files and environment only.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional
import json
import os


DEFAULT_REGION = "us-east-1"
DEFAULT_APP_BASE = "http://localhost:8000"
PLACEHOLDER_PREFIX = "YOUR_"

# CloudFormation output name -> ExplorerConfig field
_OUTPUT_FIELDS = {
    "Region": "region",
    "UserPoolId": "user_pool_id",
    "UserPoolClientId": "user_pool_client_id",
    "IdentityPoolId": "identity_pool_id",
    "DataBucketName": "data_bucket_name",
    "HostedUIDomain": "cognito_domain",
    "IdentityProvider": "identity_provider",  # external-IdP stack only
}

_ENV_FIELDS = {
    "EXPLORER_REGION": "region",
    "EXPLORER_USER_POOL_ID": "user_pool_id",
    "EXPLORER_USER_POOL_CLIENT_ID": "user_pool_client_id",
    "EXPLORER_IDENTITY_POOL_ID": "identity_pool_id",
    "EXPLORER_DATA_BUCKET": "data_bucket_name",
    "EXPLORER_COGNITO_DOMAIN": "cognito_domain",
    "EXPLORER_IDENTITY_PROVIDER": "identity_provider",
    "EXPLORER_APP_BASE": "app_base",
}


@dataclass(frozen=True)
class ExplorerConfig:
    region: str = DEFAULT_REGION
    user_pool_id: str = f"{PLACEHOLDER_PREFIX}USER_POOL_ID"
    user_pool_client_id: str = f"{PLACEHOLDER_PREFIX}USER_POOL_CLIENT_ID"
    identity_pool_id: str = f"{PLACEHOLDER_PREFIX}IDENTITY_POOL_ID"
    data_bucket_name: str = f"{PLACEHOLDER_PREFIX}DATA_BUCKET_NAME"
    cognito_domain: str = f"{PLACEHOLDER_PREFIX}COGNITO_DOMAIN"
    identity_provider: Optional[str] = None  # e.g. "Okta" for the external-IdP stack
    app_base: str = DEFAULT_APP_BASE  # browser-facing base of the local client

    @property
    def hosted_domain(self) -> str:
        return self.cognito_domain.rstrip("/")

    @property
    def redirect_uri(self) -> str:
        return f"{self.app_base.rstrip('/')}/callback"

    @property
    def logout_uri(self) -> str:
        return f"{self.app_base.rstrip('/')}/"

    @property
    def login_provider(self) -> str:
        """Key under which the ID token is presented to the identity pool."""
        return f"cognito-idp.{self.region}.amazonaws.com/{self.user_pool_id}"

    @property
    def issuer(self) -> str:
        return f"https://cognito-idp.{self.region}.amazonaws.com/{self.user_pool_id}"

    def placeholders(self) -> list[str]:
        """Return names of fields still holding a `YOUR_...` placeholder."""
        names = []
        for name in ("user_pool_id", "user_pool_client_id", "identity_pool_id", "data_bucket_name", "cognito_domain"):
            value = getattr(self, name) or ""
            if not value or value.startswith(PLACEHOLDER_PREFIX):
                names.append(name)
        return names


def config_from_outputs(outputs: Mapping[str, Any]) -> dict[str, str]:
    """Map CDK stack outputs to ExplorerConfig keyword arguments.

    Accepts both the flat `{OutputName: value}` shape and the nested
    `{StackName: {OutputName: value}}` shape written by `--outputs-file`.
    """
    flat: Mapping[str, Any] = outputs
    if outputs and all(isinstance(v, Mapping) for v in outputs.values()):
        # Nested shape: take the first stack exposing a UserPoolId
        flat = next((v for v in outputs.values() if "UserPoolId" in v), {})
    values: dict[str, str] = {}
    for output_name, field_name in _OUTPUT_FIELDS.items():
        raw = flat.get(output_name)
        if isinstance(raw, str) and raw.strip():
            values[field_name] = raw.strip()
    return values


def load_explorer_config(environ: Optional[Mapping[str, str]] = None) -> ExplorerConfig:
    """Resolve the client configuration from an outputs file and environment."""
    env = os.environ if environ is None else environ
    values: dict[str, str] = {}
    outputs_path = (env.get("EXPLORER_OUTPUTS_FILE") or "").strip()
    if outputs_path:
        with open(outputs_path, "r", encoding="utf-8") as fh:
            values.update(config_from_outputs(json.load(fh)))
    for var, field_name in _ENV_FIELDS.items():
        raw = (env.get(var) or "").strip()
        if raw:
            values[field_name] = raw
    return ExplorerConfig(**values)


def _is_prod_like(env: str) -> bool:
    return (env or "").lower() in {"prod", "production", "stage", "staging"}


def ensure_secure_config_on_startup(cfg: ExplorerConfig, environment: Optional[str] = None) -> None:
    """Fail fast on unusable configuration in production-like environments.

    Checks:
    - No stack output may still be a `YOUR_...` placeholder.
    - The hosted UI domain must use https.

    Development stays permissive so the sign-in page renders without a stack.
    """
    env = environment if environment is not None else os.getenv("EXPLORER_ENV", "dev")
    if not _is_prod_like(env):
        return
    missing = cfg.placeholders()
    if missing:
        raise SystemExit(
            "Refusing to start: stack outputs not configured: " + ", ".join(missing)
        )
    if not cfg.hosted_domain.lower().startswith("https://"):
        raise SystemExit("Refusing to start: EXPLORER_COGNITO_DOMAIN must use https in production.")


__all__ = [
    "ExplorerConfig",
    "config_from_outputs",
    "ensure_secure_config_on_startup",
    "load_explorer_config",
]
