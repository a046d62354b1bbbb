"""
Deployment settings for the explorer stack.

Sources (first hit wins):
    1. CDK context (`cdk deploy -c variant=external-idp -c oktaClientId=...`).
    2. Environment (`EXPLORER_VARIANT`, `OKTA_DOMAIN`, `OKTA_CLIENT_ID`, ...).
    3. Defaults.

Validation happens here, before any construct exists, so a bad invocation
fails without a partial synthesis.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple
import logging
import os

logger = logging.getLogger("explorer.infra")

VARIANT_NATIVE = "native"
VARIANT_EXTERNAL_IDP = "external-idp"
VARIANTS = (VARIANT_NATIVE, VARIANT_EXTERNAL_IDP)

DEFAULT_REGION = "us-east-1"
DEFAULT_OKTA_DOMAIN = "nearfoundation.okta.com"
DEFAULT_CLIENT_APP_BASE = "http://localhost:8000"
EXTERNAL_PROVIDER_NAME = "Okta"

# context key -> environment variable
CONTEXT_ENV = {
    "account": "CDK_DEFAULT_ACCOUNT",
    "region": "CDK_DEFAULT_REGION",
    "variant": "EXPLORER_VARIANT",
    "oktaDomain": "OKTA_DOMAIN",
    "oktaClientId": "OKTA_CLIENT_ID",
    "oktaClientSecret": "OKTA_CLIENT_SECRET",
    "clientAppBase": "EXPLORER_APP_BASE",
}


class TopologyConfigurationError(Exception):
    """Raised for unusable deployment settings; nothing has been synthesized yet."""


@dataclass(frozen=True)
class TopologySettings:
    account: Optional[str] = None
    region: str = DEFAULT_REGION
    variant: str = VARIANT_NATIVE
    okta_domain: str = DEFAULT_OKTA_DOMAIN
    okta_client_id: Optional[str] = None
    okta_client_secret: Optional[str] = None
    client_app_bases: Tuple[str, ...] = (DEFAULT_CLIENT_APP_BASE,)

    @property
    def external_idp(self) -> bool:
        return self.variant == VARIANT_EXTERNAL_IDP

    @property
    def issuer_url(self) -> str:
        domain = self.okta_domain.strip().rstrip("/")
        if domain.startswith("https://"):
            return domain
        return f"https://{domain}"


def _lookup(key: str, context: Mapping[str, Any], environ: Mapping[str, str]) -> Optional[str]:
    value = context.get(key)
    if value is None or str(value).strip() == "":
        value = environ.get(CONTEXT_ENV[key])
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def load_topology_settings(
    context: Optional[Mapping[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> TopologySettings:
    """Resolve and validate the stack settings.

    Raises TopologyConfigurationError for an unknown variant, or when the
    external-IdP variant has no client id.
    """
    context = context or {}
    env = os.environ if environ is None else environ

    variant = (_lookup("variant", context, env) or VARIANT_NATIVE).lower()
    if variant not in VARIANTS:
        raise TopologyConfigurationError(
            f"Unknown variant {variant!r}; expected one of: {', '.join(VARIANTS)}"
        )
    client_id = _lookup("oktaClientId", context, env)
    if variant == VARIANT_EXTERNAL_IDP and not client_id:
        raise TopologyConfigurationError(
            "Okta Client ID is required. Set via context (-c oktaClientId=xxx) or OKTA_CLIENT_ID env var"
        )
    bases = _lookup("clientAppBase", context, env) or DEFAULT_CLIENT_APP_BASE
    settings = TopologySettings(
        account=_lookup("account", context, env),
        region=_lookup("region", context, env) or DEFAULT_REGION,
        variant=variant,
        okta_domain=_lookup("oktaDomain", context, env) or DEFAULT_OKTA_DOMAIN,
        okta_client_id=client_id,
        okta_client_secret=_lookup("oktaClientSecret", context, env),
        client_app_bases=tuple(b.strip().rstrip("/") for b in bases.split(",") if b.strip()),
    )
    logger.info("Topology settings: variant=%s region=%s", settings.variant, settings.region)
    return settings


__all__ = [
    "EXTERNAL_PROVIDER_NAME",
    "TopologyConfigurationError",
    "TopologySettings",
    "VARIANT_EXTERNAL_IDP",
    "VARIANT_NATIVE",
    "load_topology_settings",
]
