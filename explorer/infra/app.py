"""CDK app entry point (`cdk.json`: `python -m explorer.infra.app`)."""

import logging
import os

import aws_cdk as cdk

from .settings import CONTEXT_ENV, load_topology_settings
from .stack import ExplorerStack

logger = logging.getLogger("explorer.infra")


def main() -> None:
    app = cdk.App()
    context = {key: app.node.try_get_context(key) for key in CONTEXT_ENV}
    # Raises TopologyConfigurationError before the stack is constructed.
    settings = load_topology_settings(context, os.environ)
    ExplorerStack(
        app,
        "S3ExplorerStack",
        settings=settings,
        env=cdk.Environment(account=settings.account, region=settings.region),
        description="Secure S3 Explorer with Cognito sign-in",
    )
    app.synth()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    main()
