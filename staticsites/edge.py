"""
Lambda@Edge function redirecting apex requests to the ``www.`` host.

Attached to every distribution on ``viewer-request``: a request whose Host does
not start with ``www.`` gets a permanent redirect to ``https://www.<host><uri>``.
Edge functions are replicated from ``us-east-1`` (the CloudFront control
plane), so the function is always deployed there through its own provider,
and must be published: CloudFront only accepts a qualified (versioned) ARN.
"""

import pulumi
import pulumi_aws as aws

from staticsites.certificate import CERTIFICATE_REGION
from staticsites.lambdas import (
    HANDLER,
    RUNTIME,
    attach_logging,
    attach_policy,
    function_archive,
    lambda_role,
)

ID: str = "staticsites:aws:WwwRedirect"

EDGE_REPLICATION_ACTIONS: list[str] = [
    "lambda:GetFunction",
    "lambda:EnableReplication*",
    "lambda:DisableReplication*",
    "iam:CreateServiceLinkedRole",
    "cloudfront:UpdateDistribution",
]


class WwwRedirect(pulumi.ComponentResource):
    """
    Published edge function for the apex -> www redirect.

    Resources: Provider (us-east-1), Role, replication and logging policies,
    Function.
    """

    def __init__(
        self,
        name: str = "lambda-redirect",
        opts: pulumi.ResourceOptions | None = None,
    ):
        super().__init__(ID, name, None, opts)

        child_opts = pulumi.ResourceOptions(parent=self)
        self.provider = aws.Provider(
            resource_name=f"{name}-east",
            region=CERTIFICATE_REGION,
            opts=child_opts,
        )

        # Edge functions are assumed by both Lambda and its edge replicas.
        role = lambda_role(
            f"{name}-iam",
            services=["lambda.amazonaws.com", "edgelambda.amazonaws.com"],
            opts=child_opts,
        )
        attach_policy(
            f"{name}-cloudfront",
            role,
            "Policy to allow lambda edge execution",
            EDGE_REPLICATION_ACTIONS,
            opts=child_opts,
        )
        logging = attach_logging(name, role, opts=child_opts)

        pulumi.log.info("Creating redirect lambda")
        self.function = aws.lambda_.Function(
            resource_name=name,
            name=name,
            code=function_archive("www_redirect"),
            role=role.arn,
            handler=HANDLER,
            runtime=RUNTIME,
            publish=True,
            memory_size=128,
            opts=pulumi.ResourceOptions(
                parent=self,
                provider=self.provider,
                depends_on=[logging],
            ),
        )

        self.qualified_arn: pulumi.Output[str] = self.function.qualified_arn
        self.register_outputs({"qualified_arn": self.qualified_arn})
