"""
Contact-form mail relay: SES identity, mail Lambda and an HTTP API.

The form on a site POSTs its JSON body (``name``, ``email``, ``message``) to
the API; the Lambda turns it into a plain-text mail sent through SES from the
configured sender to the configured recipient. CORS preflight is answered by
the API itself, restricted to the site origin.

The SES identity for the mail domain is always declared. When
``verify_domain`` is set, the ``_amazonses`` TXT record is also published in
the domain's hosted zone and the update waits until SES verified it.
"""

import pulumi
import pulumi_aws as aws

from staticsites.dns import HostedZoneResolver
from staticsites.lambdas import (
    HANDLER,
    RUNTIME,
    attach_logging,
    attach_policy,
    function_archive,
    lambda_role,
)

ID: str = "staticsites:aws:MailRelay"

SES_ACTIONS: list[str] = ["ses:SendEmail", "ses:SendRawEmail"]

STAGE_NAME: str = "prod"


class MailRelay(pulumi.ComponentResource):
    """
    SES-backed contact-form endpoint.

    Resources: DomainIdentity (and optionally its verification record),
    Role, SES and logging policies, Function, HTTP Api, Integration, Route,
    Stage, Lambda Permission.
    """

    def __init__(
        self,
        name: str,
        mail_domain: str,
        recipient: str,
        sender: str,
        allowed_origin: str,
        resolver: HostedZoneResolver | None = None,
        verify_domain: bool = False,
        opts: pulumi.ResourceOptions | None = None,
    ):
        """
        Create the identity, function and API.

        Args:
            name: Pulumi resource name prefix.
            mail_domain: Domain SES sends from (e.g. "example.com").
            recipient: Address receiving the form mails.
            sender: From address; must belong to ``mail_domain``.
            allowed_origin: Site origin allowed to call the API
                (e.g. "https://www.example.com").
            resolver: Hosted zone resolver, needed when ``verify_domain``.
            verify_domain: Publish the SES verification record and wait for it.
            opts: Component resource options.

        Outputs (set on self, registered for the component):
            url: Invoke URL of the form endpoint.
        """
        super().__init__(ID, name, None, opts)

        child_opts = pulumi.ResourceOptions(parent=self)

        pulumi.log.info(f"Setting AWS SES email identity for {mail_domain}")
        identity = aws.ses.DomainIdentity(
            resource_name=mail_domain,
            domain=mail_domain,
            opts=child_opts,
        )
        if verify_domain:
            self._verify(mail_domain, identity, resolver, child_opts)

        role = lambda_role(f"{name}-iam", opts=child_opts)
        attach_policy(
            f"{name}-ses",
            role,
            "Policy to allow sending mails through lambda",
            SES_ACTIONS,
            opts=child_opts,
        )
        logging = attach_logging(name, role, opts=child_opts)

        pulumi.log.info("Creating email form lambda")
        self.function = aws.lambda_.Function(
            resource_name=name,
            name=f"lambda-{name}",
            code=function_archive("send_mail"),
            role=role.arn,
            handler=HANDLER,
            runtime=RUNTIME,
            environment=aws.lambda_.FunctionEnvironmentArgs(
                variables={
                    "MAIL_RECIPIENT": recipient,
                    "MAIL_SENDER": sender,
                    "ALLOWED_ORIGIN": allowed_origin,
                },
            ),
            opts=pulumi.ResourceOptions(parent=self, depends_on=[logging]),
        )

        pulumi.log.info("Creating email form API")
        cors = aws.apigatewayv2.ApiCorsConfigurationArgs(
            allow_origins=[allowed_origin],
            allow_methods=["OPTIONS", "POST"],
            allow_headers=["*"],
        )
        api = aws.apigatewayv2.Api(
            resource_name=f"{name}-api",
            protocol_type="HTTP",
            cors_configuration=cors,
            opts=child_opts,
        )
        integration = aws.apigatewayv2.Integration(
            resource_name=f"{name}-integration",
            api_id=api.id,
            integration_type="AWS_PROXY",
            integration_uri=self.function.invoke_arn,
            payload_format_version="2.0",
            opts=child_opts,
        )
        aws.apigatewayv2.Route(
            resource_name=f"{name}-route",
            api_id=api.id,
            route_key="POST /",
            target=integration.id.apply(lambda integration_id: f"integrations/{integration_id}"),
            opts=child_opts,
        )
        stage = aws.apigatewayv2.Stage(
            resource_name=f"{name}-stage",
            api_id=api.id,
            name=STAGE_NAME,
            auto_deploy=True,
            opts=child_opts,
        )
        aws.lambda_.Permission(
            resource_name=f"{name}-invoke",
            action="lambda:InvokeFunction",
            function=self.function.name,
            principal="apigateway.amazonaws.com",
            source_arn=api.execution_arn.apply(lambda arn: f"{arn}/*/*"),
            opts=child_opts,
        )

        self.url: pulumi.Output[str] = stage.invoke_url
        self.register_outputs({"url": self.url})

    def _verify(
        self,
        mail_domain: str,
        identity: aws.ses.DomainIdentity,
        resolver: HostedZoneResolver | None,
        opts: pulumi.ResourceOptions,
    ) -> aws.ses.DomainIdentityVerification:
        resolver = resolver or HostedZoneResolver()
        record = aws.route53.Record(
            resource_name=f"{mail_domain}-ses-verification",
            name=f"_amazonses.{mail_domain}",
            type="TXT",
            ttl=600,
            records=[identity.verification_token],
            zone_id=resolver.resolve_parent(mail_domain),
            opts=opts,
        )
        return aws.ses.DomainIdentityVerification(
            resource_name=f"{mail_domain}-verification",
            domain=identity.id,
            opts=pulumi.ResourceOptions(parent=self, depends_on=[record]),
        )
