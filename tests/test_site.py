"""End-to-end tests for a static site, with and without a custom domain"""

import pulumi
import pytest

from staticsites.dns import HostedZoneResolver
from staticsites.errors import InvalidDomainFormat, ZoneNotFound
from staticsites.site import StaticSite
from staticsites.storage import create_log_bucket

REDIRECT_ARN = "arn:aws:lambda:us-east-1:123456789012:function:lambda-redirect:1"


class Lookup:
    def __init__(self, zones):
        self.zones = zones
        self.requested = []

    def __call__(self, domain):
        self.requested.append(domain)
        if domain not in self.zones:
            raise Exception(f"no matching Route 53 Hosted Zone found for {domain}")
        return self.zones[domain]


@pytest.fixture
def site_dir(tmp_path):
    (tmp_path / "css").mkdir()
    (tmp_path / "index.html").write_text("<html></html>")
    (tmp_path / "css" / "site.css").write_text("body {}")
    return str(tmp_path)


def _deploy(site_dir, domain, lookup, outputs=None, **kwargs):
    @pulumi.runtime.test
    def deploy():
        site = StaticSite(
            "garden",
            site_dir=site_dir,
            index_doc="index.html",
            error_doc="404.html",
            logs_bucket=create_log_bucket("request-logs"),
            redirect_arn=REDIRECT_ARN,
            resolver=HostedZoneResolver(lookup),
            domain=domain,
            **kwargs,
        )
        if outputs is not None and site.cloudfront_domain_name is not None:
            return site.cloudfront_domain_name.apply(outputs.append)

    deploy()


class TestSiteWithDomain:
    def test_certificate_covers_apex_and_www(self, mocks, site_dir):
        _deploy(site_dir, "example.com", Lookup({"example.com": "Z1"}))

        (certificate,) = mocks.created("aws:acm/certificate:Certificate")
        assert certificate.inputs["subjectAlternativeNames"] == [
            "example.com",
            "www.example.com",
        ]

    def test_zone_resolved_once_for_certificate_and_aliases(self, mocks, site_dir):
        lookup = Lookup({"example.com": "Z1"})
        _deploy(site_dir, "example.com", lookup)

        records = mocks.created("aws:route53/record:Record")
        assert sorted((r.inputs["type"], r.inputs["zoneId"]) for r in records) == [
            ("A", "Z1"),
            ("A", "Z1"),
            ("CNAME", "Z1"),
            ("CNAME", "Z1"),
        ]
        assert lookup.requested == ["example.com"]

    def test_distribution_receives_validated_certificate(self, mocks, site_dir):
        outputs = []
        _deploy(site_dir, "example.com", Lookup({"example.com": "Z1"}), outputs)

        (validation,) = mocks.created("aws:acm/certificateValidation:CertificateValidation")
        (distribution,) = mocks.created("aws:cloudfront/distribution:Distribution")
        assert distribution.name == "example.com-cdn"
        assert distribution.inputs["aliases"] == ["example.com", "www.example.com"]
        viewer_certificate = distribution.inputs["viewerCertificate"]
        assert viewer_certificate["acmCertificateArn"] == validation.inputs["certificateArn"]
        assert viewer_certificate["sslSupportMethod"] == "sni-only"
        assert outputs == ["d111111abcdef8.cloudfront.net"]

    def test_distribution_runs_redirect_and_logs_per_site(self, mocks, site_dir):
        _deploy(site_dir, "example.com", Lookup({"example.com": "Z1"}))

        (distribution,) = mocks.created("aws:cloudfront/distribution:Distribution")
        behavior = distribution.inputs["defaultCacheBehavior"]
        (association,) = behavior["lambdaFunctionAssociations"]
        assert association["eventType"] == "viewer-request"
        assert association["lambdaArn"] == REDIRECT_ARN
        assert behavior["viewerProtocolPolicy"] == "redirect-to-https"
        assert distribution.inputs["loggingConfig"]["prefix"] == "garden/"
        assert distribution.inputs["loggingConfig"]["bucket"] == "request-logs.s3.amazonaws.com"

    def test_unregistered_domain_aborts(self, mocks, site_dir):
        with pytest.raises(ZoneNotFound):
            _deploy(site_dir, "unregistered.dev", Lookup({}))

        assert mocks.created("aws:acm/certificate:Certificate") == []
        assert mocks.created("aws:cloudfront/distribution:Distribution") == []


class TestSiteWithoutDomain:
    def test_only_content_bucket_is_created(self, mocks, site_dir):
        lookup = Lookup({})
        _deploy(site_dir, "", lookup)

        assert mocks.created("aws:acm/certificate:Certificate") == []
        assert mocks.created("aws:cloudfront/distribution:Distribution") == []
        assert mocks.created("aws:route53/record:Record") == []
        assert lookup.requested == []
        buckets = [b.name for b in mocks.created("aws:s3/bucket:Bucket")]
        assert "garden-bucket" in buckets

    def test_uploads_site_files(self, mocks, site_dir):
        _deploy(site_dir, "", Lookup({}), bucket_path="site")

        objects = {o.inputs["key"]: o for o in mocks.created("aws:s3/bucketObject:BucketObject")}
        assert sorted(objects) == ["site/css/site.css", "site/index.html"]
        assert objects["site/index.html"].inputs["contentType"] == "text/html"
        assert objects["site/css/site.css"].inputs["contentType"] == "text/css"
        assert objects["site/index.html"].inputs["acl"] == "public-read"

    def test_cors_rule_only_when_configured(self, mocks, site_dir):
        _deploy(site_dir, "", Lookup({}), cors_origin="https://www.example.com")

        (cors,) = mocks.created("aws:s3/bucketCorsConfigurationV2:BucketCorsConfigurationV2")
        (rule,) = cors.inputs["corsRules"]
        assert rule["allowedOrigins"] == ["https://www.example.com"]
        assert rule["allowedMethods"] == ["GET"]


class TestSiteWithInvalidDomain:
    def test_subdomain_is_rejected(self, mocks, site_dir):
        with pytest.raises(InvalidDomainFormat):
            _deploy(site_dir, "sub.example.com", Lookup({"example.com": "Z1"}))

        assert mocks.created("aws:acm/certificate:Certificate") == []
        assert mocks.created("aws:s3/bucketObject:BucketObject") == []
