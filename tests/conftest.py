"""Pulumi mocks shared by the component tests."""

import pulumi
import pytest

ACCOUNT = "123456789012"

HOSTED_ZONES = {
    "example.com": "Z0EXAMPLE",
    "example.org": "Z0ORG",
}


class StaticSitesMocks(pulumi.runtime.Mocks):
    """
    Records every resource and invoke, and fills in the outputs AWS would.

    Certificates get one validation option per requested domain, in request
    order (or reversed, like the set ACM may return), with per-domain sentinel
    values so tests can tell them apart.
    """

    def __init__(self, zones: dict[str, str] | None = None):
        self.zones = HOSTED_ZONES if zones is None else zones
        self.reverse_validation_options = False
        self.resources: list[pulumi.runtime.MockResourceArgs] = []
        self.calls: list[pulumi.runtime.MockCallArgs] = []

    def created(self, typ: str) -> list[pulumi.runtime.MockResourceArgs]:
        return [r for r in self.resources if r.typ == typ]

    def new_resource(self, args: pulumi.runtime.MockResourceArgs):
        self.resources.append(args)
        outputs = dict(args.inputs)
        resource_id = f"{args.name}_id"

        if args.typ == "aws:acm/certificate:Certificate":
            domains = args.inputs.get("subjectAlternativeNames") or [
                args.inputs["domainName"]
            ]
            outputs["arn"] = f"arn:aws:acm:us-east-1:{ACCOUNT}:certificate/{args.name}"
            outputs["domainValidationOptions"] = [
                {
                    "domainName": domain,
                    "resourceRecordName": f"_challenge{index}.{domain}.",
                    "resourceRecordType": "CNAME",
                    "resourceRecordValue": f"_value{index}.acm-validations.aws.",
                }
                for index, domain in enumerate(domains)
            ]
            if self.reverse_validation_options:
                outputs["domainValidationOptions"].reverse()
        elif args.typ == "aws:route53/record:Record":
            outputs["fqdn"] = args.inputs["name"].rstrip(".")
        elif args.typ == "aws:cloudfront/distribution:Distribution":
            outputs["domainName"] = "d111111abcdef8.cloudfront.net"
            outputs["hostedZoneId"] = "Z2FDTNDATAQYW2"
        elif args.typ == "aws:s3/bucket:Bucket":
            resource_id = args.inputs.get("bucket", args.name)
            outputs["bucketDomainName"] = f"{resource_id}.s3.amazonaws.com"
            outputs["websiteEndpoint"] = f"{resource_id}.s3-website.eu-central-1.amazonaws.com"
        elif args.typ == "aws:lambda/function:Function":
            arn = f"arn:aws:lambda:us-east-1:{ACCOUNT}:function:{args.name}"
            outputs["arn"] = arn
            outputs["qualifiedArn"] = f"{arn}:1"
            outputs["invokeArn"] = f"arn:aws:apigateway:us-east-1:lambda:path/{arn}/invocations"
        elif args.typ == "aws:iam/policy:Policy":
            outputs["arn"] = f"arn:aws:iam::{ACCOUNT}:policy/{args.name}"
        elif args.typ == "aws:iam/role:Role":
            outputs["arn"] = f"arn:aws:iam::{ACCOUNT}:role/{args.name}"
        elif args.typ == "aws:apigatewayv2/api:Api":
            outputs["executionArn"] = f"arn:aws:execute-api:eu-central-1:{ACCOUNT}:abc123"
        elif args.typ == "aws:apigatewayv2/stage:Stage":
            outputs["invokeUrl"] = "https://abc123.execute-api.eu-central-1.amazonaws.com/prod"
        elif args.typ == "aws:ses/domainIdentity:DomainIdentity":
            outputs["verificationToken"] = "ses-token"

        return [resource_id, outputs]

    def call(self, args: pulumi.runtime.MockCallArgs):
        self.calls.append(args)
        if args.token == "aws:route53/getZone:getZone":
            name = args.args["name"]
            if name not in self.zones:
                raise Exception(f"no matching Route 53 Hosted Zone found for {name}")
            return {"id": self.zones[name], "name": name}
        return {}


@pytest.fixture
def mocks() -> StaticSitesMocks:
    instance = StaticSitesMocks()
    pulumi.runtime.set_mocks(instance, project="static-sites", stack="test", preview=False)
    return instance


class FakeConfig:
    """Stands in for pulumi.Config in tests: require/get over a dict."""

    def __init__(self, values: dict):
        self.values = values

    def get(self, key):
        value = self.values.get(key)
        return None if value is None else str(value)

    def require(self, key):
        if key not in self.values:
            raise KeyError(key)
        return str(self.values[key])

    def get_bool(self, key):
        value = self.values.get(key)
        return None if value is None else bool(value)

    def full_key(self, key):
        return f"test:{key}"

    def require_object(self, key):
        if key not in self.values:
            raise KeyError(key)
        return self.values[key]


@pytest.fixture
def fake_config():
    return FakeConfig
