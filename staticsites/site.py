"""
One static website: content bucket, and for a custom domain the certificate,
CloudFront distribution and alias records.

A site without a domain only gets its content bucket, served from the S3
website endpoint. A site with a domain ``example.com`` is served on
``example.com`` and ``www.example.com`` through CloudFront with a certificate
validated in the domain's hosted zone. The domain is expanded before any
resource is declared, so a bad domain fails the update without side effects.
"""

import pulumi
import pulumi_aws as aws

from staticsites._helpers import expand_domain
from staticsites.cdn import create_distribution
from staticsites.certificate import DEFAULT_VALIDATION_TIMEOUT, ValidatedCertificate
from staticsites.dns import HostedZoneResolver, create_alias_records
from staticsites.storage import ContentBucket

ID: str = "staticsites:aws:StaticSite"


class StaticSite(pulumi.ComponentResource):
    """
    Content bucket, plus certificate, distribution and DNS for a custom domain.
    """

    def __init__(
        self,
        name: str,
        site_dir: str,
        index_doc: str,
        error_doc: str,
        logs_bucket: aws.s3.Bucket,
        redirect_arn: pulumi.Input[str],
        resolver: HostedZoneResolver,
        domain: str = "",
        bucket_path: str = "",
        cors_origin: str = "",
        validation_timeout: str = DEFAULT_VALIDATION_TIMEOUT,
        opts: pulumi.ResourceOptions | None = None,
    ):
        """
        Deploy the site.

        Args:
            name: Site name; prefixes child resources and log paths.
            site_dir: Local directory uploaded to the content bucket.
            index_doc: Index document, also the distribution root object.
            error_doc: Website error document.
            logs_bucket: Shared bucket receiving CloudFront access logs.
            redirect_arn: Qualified ARN of the www-redirect edge function.
            resolver: Hosted zone resolver shared by all sites.
            domain: Apex domain; empty skips certificate, CDN and DNS.
            bucket_path: Key prefix for uploaded files.
            cors_origin: Optional origin allowed to GET bucket objects.
            validation_timeout: Create timeout of the certificate validation.
            opts: Component resource options.

        Outputs (set on self, registered for the component):
            bucket_name: Content bucket id.
            website_url: HTTP URL of the bucket website endpoint.
            cloudfront_domain_name: Distribution domain, None without a domain.

        Raises:
            InvalidDomainFormat: ``domain`` is not an apex domain.
        """
        domains = expand_domain(domain)
        super().__init__(ID, name, None, opts)

        pulumi.log.info(f"Deploy site {name}, dir: {site_dir}, domains: {domains}")
        child_opts = pulumi.ResourceOptions(parent=self)

        self.content = ContentBucket(
            name,
            site_dir=site_dir,
            index_doc=index_doc,
            error_doc=error_doc,
            bucket_path=bucket_path,
            cors_origin=cors_origin,
            opts=child_opts,
        )

        self.certificate: ValidatedCertificate | None = None
        self.distribution: aws.cloudfront.Distribution | None = None
        self.cloudfront_domain_name: pulumi.Output[str] | None = None
        if domains:
            self.certificate = ValidatedCertificate(
                f"{name}-certificate",
                domains=domains,
                resolver=resolver,
                validation_timeout=validation_timeout,
                opts=child_opts,
            )
            self.distribution = create_distribution(
                name,
                domains=domains,
                origin_endpoint=self.content.website_endpoint,
                index_doc=index_doc,
                certificate_arn=self.certificate.certificate_arn,
                redirect_arn=redirect_arn,
                logs_bucket=logs_bucket,
                opts=child_opts,
            )
            create_alias_records(resolver, self.distribution, domains, opts=child_opts)
            self.cloudfront_domain_name = self.distribution.domain_name
        else:
            pulumi.log.info(f"No domain for {name}, skipping CloudFront distribution")

        self.bucket_name: pulumi.Output[str] = self.content.bucket_name
        self.website_url: pulumi.Output[str] = self.content.website_url
        self.register_outputs(
            {
                "bucket_name": self.bucket_name,
                "website_url": self.website_url,
                "cloudfront_domain_name": self.cloudfront_domain_name,
            }
        )
