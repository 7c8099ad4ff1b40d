"""
Shared plumbing for the stack's Lambda functions: IAM roles, policies and
code archives.

Policies are plain JSON documents built here rather than looked up with
``get_policy_document``, so no invoke is needed at program time. Handler code
lives in the ``functions`` package; each handler module is shipped alone as
``handler.py`` inside its archive, so every function's entrypoint is
``handler.handler``.
"""

import json
from pathlib import Path
from typing import Sequence

import pulumi
import pulumi_aws as aws

FUNCTIONS_DIR: Path = Path(__file__).resolve().parent.parent / "functions"

HANDLER: str = "handler.handler"
RUNTIME: str = "python3.12"

LOGGING_ACTIONS: list[str] = [
    "logs:CreateLogGroup",
    "logs:CreateLogStream",
    "logs:PutLogEvents",
]


def assume_role_policy(
    services: Sequence[str],
) -> str:
    """Trust policy letting the given AWS services assume a role."""
    return json.dumps(
        {
            "Version": "2012-10-17",
            "Statement": [
                {
                    "Effect": "Allow",
                    "Principal": {"Service": list(services)},
                    "Action": "sts:AssumeRole",
                }
            ],
        }
    )


def allow_policy(
    actions: Sequence[str],
    resource: str = "*",
) -> str:
    """Single-statement policy allowing ``actions`` on ``resource``."""
    return json.dumps(
        {
            "Version": "2012-10-17",
            "Statement": [
                {
                    "Effect": "Allow",
                    "Action": list(actions),
                    "Resource": resource,
                }
            ],
        }
    )


def function_archive(
    module: str,
) -> pulumi.AssetArchive:
    """Zip ``functions/<module>.py`` as ``handler.py``."""
    return pulumi.AssetArchive(
        {"handler.py": pulumi.FileAsset(str(FUNCTIONS_DIR / f"{module}.py"))}
    )


def lambda_role(
    name: str,
    services: Sequence[str] = ("lambda.amazonaws.com",),
    opts: pulumi.ResourceOptions | None = None,
) -> aws.iam.Role:
    """Execution role assumable by ``services``."""
    pulumi.log.info(f"Creating IAM role {name}")
    return aws.iam.Role(
        resource_name=name,
        name=name,
        assume_role_policy=assume_role_policy(services),
        opts=opts,
    )


def attach_policy(
    name: str,
    role: aws.iam.Role,
    description: str,
    actions: Sequence[str],
    resource: str = "*",
    opts: pulumi.ResourceOptions | None = None,
) -> aws.iam.RolePolicyAttachment:
    """Create a managed policy allowing ``actions`` and attach it to ``role``."""
    policy = aws.iam.Policy(
        resource_name=name,
        name=name,
        path="/",
        description=description,
        policy=allow_policy(actions, resource),
        opts=opts,
    )
    return aws.iam.RolePolicyAttachment(
        resource_name=f"{name}-attachment",
        role=role.name,
        policy_arn=policy.arn,
        opts=opts,
    )


def attach_logging(
    name: str,
    role: aws.iam.Role,
    opts: pulumi.ResourceOptions | None = None,
) -> aws.iam.RolePolicyAttachment:
    """Let a function write its CloudWatch logs."""
    return attach_policy(
        f"{name}-logging",
        role,
        "IAM policy for logging from a lambda",
        LOGGING_ACTIONS,
        resource="arn:aws:logs:*:*:*",
        opts=opts,
    )
