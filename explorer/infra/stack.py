"""CDK stack for the S3 Explorer.

Resources:
    • Private, versioned data bucket (the only bucket users touch)
    • Web bucket with a setup page, served over HTTPS by CloudFront
    • CloudTrail data-event trail on the data bucket
    • Cognito user pool, app client and hosted UI domain; in the external-IdP
      variant the pool federates to an OIDC provider named "Okta"
    • Cognito identity pool and the authenticated IAM role it hands out
    • Named outputs consumed by the explorer client
"""

from typing import List, Optional

from aws_cdk import CfnOutput, Duration, RemovalPolicy, SecretValue, Stack
from aws_cdk import aws_cloudfront as cloudfront
from aws_cdk import aws_cloudfront_origins as origins
from aws_cdk import aws_cloudtrail as cloudtrail
from aws_cdk import aws_cognito as cognito
from aws_cdk import aws_iam as iam
from aws_cdk import aws_s3 as s3
from aws_cdk import aws_s3_deployment as s3deploy
from constructs import Construct

from .settings import EXTERNAL_PROVIDER_NAME, TopologySettings
from .setup_page import render_setup_page

OKTA_SECRET_NAME = "s3-explorer/okta-client-secret"
ROLE_ACTIONS = [
    "s3:DeleteObject",
    "s3:PutObjectAcl",
    "s3:GetObjectAcl",
    "s3:ListBucketVersions",
]


class ExplorerStack(Stack):
    """Stack wiring identity pool -> authenticated role -> data bucket.

    Both variants share everything except the user pool's sign-in source.
    """

    def __init__(self, scope: Construct, construct_id: str, *, settings: TopologySettings, **kwargs) -> None:
        """
        Args:
            scope: CDK construct scope
            construct_id: Stack identifier
            settings: Validated deployment settings
            **kwargs: Additional stack arguments (env, description, ...)
        """
        super().__init__(scope, construct_id, **kwargs)
        self.settings = settings

        self.data_bucket = self._create_data_bucket()
        self.web_bucket = self._create_web_bucket()
        self.trail = self._create_audit_trail()
        self.distribution = self._create_distribution()

        self.user_pool = self._create_user_pool()
        self.identity_provider = self._create_external_provider() if settings.external_idp else None
        self.user_pool_client = self._create_user_pool_client()
        self.user_pool_domain = self._create_domain()

        self.identity_pool = self._create_identity_pool()
        self.authenticated_role = self._create_authenticated_role()
        self._attach_role()

        self._deploy_setup_page()
        self._create_outputs()

    # --- Storage -------------------------------------------------------------------

    def _create_data_bucket(self) -> s3.Bucket:
        return s3.Bucket(
            self,
            "DataBucket",
            bucket_name=f"s3-explorer-data-{self.account}-{self.region}",
            versioned=True,
            encryption=s3.BucketEncryption.S3_MANAGED,
            block_public_access=s3.BlockPublicAccess.BLOCK_ALL,
            removal_policy=RemovalPolicy.RETAIN,
            lifecycle_rules=[s3.LifecycleRule(noncurrent_version_expiration=Duration.days(30))],
            cors=[
                s3.CorsRule(
                    allowed_methods=[
                        s3.HttpMethods.GET,
                        s3.HttpMethods.PUT,
                        s3.HttpMethods.POST,
                        s3.HttpMethods.DELETE,
                        s3.HttpMethods.HEAD,
                    ],
                    allowed_origins=list(self.settings.client_app_bases),
                    allowed_headers=["*"],
                    exposed_headers=["ETag", "x-amz-version-id"],
                    max_age=3000,
                )
            ],
        )

    def _create_web_bucket(self) -> s3.Bucket:
        return s3.Bucket(
            self,
            "WebBucket",
            bucket_name=self._web_bucket_name,
            website_index_document="index.html",
            website_error_document="error.html",
            block_public_access=s3.BlockPublicAccess.BLOCK_ALL,
            removal_policy=RemovalPolicy.DESTROY,
            auto_delete_objects=True,
        )

    @property
    def _web_bucket_name(self) -> str:
        return f"s3-explorer-web-{self.account}-{self.region}"

    def _create_audit_trail(self) -> cloudtrail.Trail:
        trail = cloudtrail.Trail(
            self,
            "S3ExplorerTrail",
            trail_name="s3-explorer-audit-trail",
            send_to_cloud_watch_logs=True,
            include_global_service_events=False,
            is_multi_region_trail=False,
        )
        trail.add_s3_event_selector(
            [cloudtrail.S3EventSelector(bucket=self.data_bucket, object_prefix="")],
            read_write_type=cloudtrail.ReadWriteType.ALL,
            include_management_events=False,
        )
        return trail

    def _create_distribution(self) -> cloudfront.Distribution:
        return cloudfront.Distribution(
            self,
            "Distribution",
            default_behavior=cloudfront.BehaviorOptions(
                origin=origins.S3BucketOrigin.with_origin_access_control(self.web_bucket),
                viewer_protocol_policy=cloudfront.ViewerProtocolPolicy.REDIRECT_TO_HTTPS,
                cache_policy=cloudfront.CachePolicy.CACHING_DISABLED,
            ),
            default_root_object="index.html",
            # OAC-signed reads of a missing key come back as 403, not 404
            error_responses=[
                cloudfront.ErrorResponse(http_status=status, response_http_status=200, response_page_path="/index.html")
                for status in (403, 404)
            ],
        )

    # --- Identity ------------------------------------------------------------------

    def _create_user_pool(self) -> cognito.UserPool:
        if self.settings.external_idp:
            # Users live in the external directory; keep federated profiles on stack removal.
            return cognito.UserPool(
                self,
                "UserPool",
                user_pool_name="s3-explorer-users",
                self_sign_up_enabled=False,
                sign_in_aliases=cognito.SignInAliases(email=True),
                removal_policy=RemovalPolicy.RETAIN,
            )
        return cognito.UserPool(
            self,
            "UserPool",
            user_pool_name="s3-explorer-users",
            self_sign_up_enabled=False,
            sign_in_aliases=cognito.SignInAliases(email=True),
            account_recovery=cognito.AccountRecovery.EMAIL_ONLY,
            password_policy=cognito.PasswordPolicy(
                min_length=8,
                require_lowercase=True,
                require_uppercase=True,
                require_digits=True,
                require_symbols=False,
            ),
            removal_policy=RemovalPolicy.DESTROY,
        )

    def _client_secret(self) -> str:
        if self.settings.okta_client_secret:
            return self.settings.okta_client_secret
        # Resolved by CloudFormation at deploy time; never rendered into the template.
        return SecretValue.secrets_manager(OKTA_SECRET_NAME).unsafe_unwrap()

    def _create_external_provider(self) -> cognito.UserPoolIdentityProviderOidc:
        return cognito.UserPoolIdentityProviderOidc(
            self,
            "OktaProvider",
            user_pool=self.user_pool,
            name=EXTERNAL_PROVIDER_NAME,
            client_id=self.settings.okta_client_id or "",
            client_secret=self._client_secret(),
            issuer_url=self.settings.issuer_url,
            scopes=["openid", "email", "profile"],
            attribute_mapping=cognito.AttributeMapping(email=cognito.ProviderAttribute.other("email")),
        )

    def _callback_urls(self) -> List[str]:
        urls = [f"https://{self.distribution.distribution_domain_name}/callback"]
        urls.extend(f"{base}/callback" for base in self.settings.client_app_bases)
        return urls

    def _logout_urls(self) -> List[str]:
        urls = [f"https://{self.distribution.distribution_domain_name}/"]
        urls.extend(f"{base}/" for base in self.settings.client_app_bases)
        return urls

    def _create_user_pool_client(self) -> cognito.UserPoolClient:
        if self.identity_provider is not None:
            providers = [cognito.UserPoolClientIdentityProvider.custom(EXTERNAL_PROVIDER_NAME)]
        else:
            providers = [cognito.UserPoolClientIdentityProvider.COGNITO]
        client = cognito.UserPoolClient(
            self,
            "UserPoolClient",
            user_pool=self.user_pool,
            generate_secret=False,
            prevent_user_existence_errors=True,
            supported_identity_providers=providers,
            o_auth=cognito.OAuthSettings(
                flows=cognito.OAuthFlows(authorization_code_grant=True),
                scopes=[cognito.OAuthScope.OPENID, cognito.OAuthScope.EMAIL, cognito.OAuthScope.PROFILE],
                callback_urls=self._callback_urls(),
                logout_urls=self._logout_urls(),
            ),
        )
        if self.identity_provider is not None:
            client.node.add_dependency(self.identity_provider)
        return client

    def _create_domain(self) -> cognito.UserPoolDomain:
        return cognito.UserPoolDomain(
            self,
            "CognitoDomain",
            user_pool=self.user_pool,
            cognito_domain=cognito.CognitoDomainOptions(domain_prefix=f"s3-explorer-{self.account}"),
        )

    @property
    def hosted_ui_domain(self) -> str:
        return f"https://{self.user_pool_domain.domain_name}.auth.{self.region}.amazoncognito.com"

    def _create_identity_pool(self) -> cognito.CfnIdentityPool:
        return cognito.CfnIdentityPool(
            self,
            "IdentityPool",
            identity_pool_name="s3-explorer-identity-pool",
            allow_unauthenticated_identities=False,
            cognito_identity_providers=[
                cognito.CfnIdentityPool.CognitoIdentityProviderProperty(
                    client_id=self.user_pool_client.user_pool_client_id,
                    provider_name=self.user_pool.user_pool_provider_name,
                )
            ],
        )

    def _create_authenticated_role(self) -> iam.Role:
        role = iam.Role(
            self,
            "AuthenticatedRole",
            assumed_by=iam.FederatedPrincipal(
                "cognito-identity.amazonaws.com",
                conditions={
                    "StringEquals": {"cognito-identity.amazonaws.com:aud": self.identity_pool.ref},
                    "ForAnyValue:StringLike": {"cognito-identity.amazonaws.com:amr": "authenticated"},
                },
                assume_role_action="sts:AssumeRoleWithWebIdentity",
            ),
            description="Role for authenticated S3 Explorer users",
        )
        self.data_bucket.grant_read(role)
        self.data_bucket.grant_put(role)
        # Rename is copy + delete
        role.add_to_policy(
            iam.PolicyStatement(
                effect=iam.Effect.ALLOW,
                actions=ROLE_ACTIONS,
                resources=[self.data_bucket.bucket_arn, f"{self.data_bucket.bucket_arn}/*"],
            )
        )
        return role

    def _attach_role(self) -> None:
        cognito.CfnIdentityPoolRoleAttachment(
            self,
            "IdentityPoolRoleAttachment",
            identity_pool_id=self.identity_pool.ref,
            roles={"authenticated": self.authenticated_role.role_arn},
        )

    # --- Setup page & outputs --------------------------------------------------------

    def _client_config(self) -> dict:
        config = {
            "region": self.region,
            "userPoolId": self.user_pool.user_pool_id,
            "userPoolClientId": self.user_pool_client.user_pool_client_id,
            "identityPoolId": self.identity_pool.ref,
            "dataBucketName": self.data_bucket.bucket_name,
            "cognitoDomain": self.hosted_ui_domain,
        }
        if self.settings.external_idp:
            config["identityProvider"] = EXTERNAL_PROVIDER_NAME
        return config

    def _deploy_setup_page(self) -> None:
        urls = {
            "Application (HTTPS)": f"https://{self.distribution.distribution_domain_name}",
            "Application (HTTP)": self._website_url,
            "Cognito Login": f"{self.hosted_ui_domain}/login",
        }
        s3deploy.BucketDeployment(
            self,
            "DeployWebsite",
            sources=[s3deploy.Source.data("index.html", render_setup_page(self._client_config(), urls))],
            destination_bucket=self.web_bucket,
            distribution=self.distribution,
            distribution_paths=["/*"],
        )

    @property
    def _website_url(self) -> str:
        return f"http://{self._web_bucket_name}.s3-website-{self.region}.amazonaws.com"

    def _output(self, name: str, value: str, description: str) -> CfnOutput:
        return CfnOutput(self, name, value=value, description=description)

    def _create_outputs(self) -> None:
        self._output(
            "CloudFrontURL",
            f"https://{self.distribution.distribution_domain_name}",
            "CloudFront distribution URL with HTTPS support",
        )
        self._output("S3WebsiteURL", self._website_url, "S3 Website URL for direct access")
        self._output("UserPoolId", self.user_pool.user_pool_id, "Cognito User Pool ID")
        self._output("UserPoolClientId", self.user_pool_client.user_pool_client_id, "Cognito User Pool Client ID")
        self._output("IdentityPoolId", self.identity_pool.ref, "Cognito Identity Pool ID")
        self._output("DataBucketName", self.data_bucket.bucket_name, "S3 bucket for storing uploaded files")
        self._output("HostedUIDomain", self.hosted_ui_domain, "Cognito hosted UI domain")
        self._output("UserPoolDomain", self.hosted_ui_domain, "Cognito User Pool domain for authentication")
        self._output("Region", self.region, "Region of the explorer resources")
        if self.settings.external_idp:
            self._output(
                "IdentityProvider",
                EXTERNAL_PROVIDER_NAME,
                "Identity provider name passed to the hosted UI authorize endpoint",
            )
            self._output(
                "OktaCallbackURL",
                f"{self.hosted_ui_domain}/oauth2/idpresponse",
                "Redirect URI to register in the Okta application",
            )
