"""
CloudFront distribution in front of a site's content bucket.

The distribution is the only consumer of the validated certificate: it serves
every domain of the site as an alias over HTTPS (SNI only) with the issued
ACM certificate. The origin is the bucket's website endpoint, reached over
plain HTTP since S3 website endpoints do not speak TLS. Requests pass the
www-redirect edge function first, and access logs go to the shared log
bucket under ``<site>/``.
"""

from typing import Sequence

import pulumi
import pulumi_aws as aws

# Seconds responses stay cached at the edge.
CACHE_TTL: int = 60 * 10

PRICE_CLASS: str = "PriceClass_100"


def create_distribution(
    name: str,
    domains: Sequence[str],
    origin_endpoint: pulumi.Input[str],
    index_doc: str,
    certificate_arn: pulumi.Input[str],
    redirect_arn: pulumi.Input[str],
    logs_bucket: aws.s3.Bucket,
    opts: pulumi.ResourceOptions | None = None,
) -> aws.cloudfront.Distribution:
    """
    Bind the validated certificate to a new distribution for ``domains``.

    Args:
        name: Site name, used as the access-log prefix.
        domains: Aliases served; the first names the distribution resource.
        origin_endpoint: Website endpoint host of the content bucket.
        index_doc: Default root object.
        certificate_arn: ARN of the validated certificate. Passing the
            validation's output (not the certificate's own ARN) makes the
            distribution wait until the certificate is issued.
        redirect_arn: Qualified ARN of the www-redirect edge function.
        logs_bucket: Bucket receiving access logs.
        opts: Resource options.
    """
    primary = domains[0]
    origin_id = f"{name}-website"
    pulumi.log.info(f"Creating CloudFront distribution for {name}")

    origin = aws.cloudfront.DistributionOriginArgs(
        origin_id=origin_id,
        domain_name=origin_endpoint,
        custom_origin_config=aws.cloudfront.DistributionOriginCustomOriginConfigArgs(
            origin_protocol_policy="http-only",
            http_port=80,
            https_port=443,
            origin_ssl_protocols=["TLSv1.2"],
        ),
    )

    # The edge function redirects the apex domain to www.
    redirect = aws.cloudfront.DistributionDefaultCacheBehaviorLambdaFunctionAssociationArgs(
        event_type="viewer-request",
        lambda_arn=redirect_arn,
        include_body=False,
    )
    forwarded_values = aws.cloudfront.DistributionDefaultCacheBehaviorForwardedValuesArgs(
        query_string=False,
        cookies=aws.cloudfront.DistributionDefaultCacheBehaviorForwardedValuesCookiesArgs(
            forward="none",
        ),
    )
    default_cache_behavior = aws.cloudfront.DistributionDefaultCacheBehaviorArgs(
        target_origin_id=origin_id,
        viewer_protocol_policy="redirect-to-https",
        allowed_methods=["GET", "HEAD"],
        cached_methods=["GET", "HEAD"],
        forwarded_values=forwarded_values,
        lambda_function_associations=[redirect],
        min_ttl=0,
        default_ttl=CACHE_TTL,
        max_ttl=CACHE_TTL,
        compress=True,
    )

    logging_config = aws.cloudfront.DistributionLoggingConfigArgs(
        bucket=logs_bucket.bucket_domain_name,
        include_cookies=False,
        prefix=f"{name}/",
    )
    restrictions = aws.cloudfront.DistributionRestrictionsArgs(
        geo_restriction=aws.cloudfront.DistributionRestrictionsGeoRestrictionArgs(
            restriction_type="none",
        ),
    )
    viewer_certificate = aws.cloudfront.DistributionViewerCertificateArgs(
        acm_certificate_arn=certificate_arn,
        ssl_support_method="sni-only",
    )

    return aws.cloudfront.Distribution(
        resource_name=f"{primary}-cdn",
        enabled=True,
        aliases=list(domains),
        default_root_object=index_doc,
        origins=[origin],
        default_cache_behavior=default_cache_behavior,
        price_class=PRICE_CLASS,
        logging_config=logging_config,
        restrictions=restrictions,
        viewer_certificate=viewer_certificate,
        # Distributions take ~15 minutes to deploy; do not block the update.
        wait_for_deployment=False,
        opts=opts,
    )
