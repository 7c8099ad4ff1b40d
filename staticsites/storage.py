"""
S3 buckets: per-site content bucket and the shared request-log bucket.

The content bucket is configured for static website hosting and serves as the
CloudFront origin through its website endpoint, so objects are uploaded with a
``public-read`` ACL. Every regular file of the site directory becomes one
``BucketObject`` whose key is its path relative to that directory (under the
optional ``bucket_path`` prefix) and whose Content-Type is guessed from the
extension.

The log bucket is private and receives CloudFront access logs from every
distribution, each under its own ``<site>/`` prefix.
"""

import pulumi
import pulumi_aws as aws

from staticsites._helpers import iter_site_files

ID: str = "staticsites:aws:ContentBucket"

CORS_MAX_AGE_SECONDS: int = 3000


def create_log_bucket(
    bucket_name: str,
) -> aws.s3.Bucket:
    """
    Create the private bucket receiving CloudFront access logs.

    CloudFront writes logs with ACLs, so ownership is ``BucketOwnerPreferred``
    rather than ACLs disabled.
    """
    bucket = aws.s3.Bucket(
        resource_name=f"{bucket_name}-s3-bucket",
        bucket=bucket_name,
        acl="private",
    )
    aws.s3.BucketOwnershipControls(
        resource_name=f"{bucket_name}-ownership-controls",
        bucket=bucket.id,
        rule=aws.s3.BucketOwnershipControlsRuleArgs(
            object_ownership="BucketOwnerPreferred",
        ),
    )
    return bucket


class ContentBucket(pulumi.ComponentResource):
    """
    Website bucket holding one site's files.

    Resources: Bucket (website hosting), BucketOwnershipControls,
    BucketPublicAccessBlock, optional BucketCorsConfigurationV2, and one
    BucketObject per uploaded file.
    """

    def __init__(
        self,
        name: str,
        site_dir: str,
        index_doc: str,
        error_doc: str,
        bucket_path: str = "",
        cors_origin: str = "",
        block_public_acls: bool = False,
        opts: pulumi.ResourceOptions | None = None,
    ):
        """
        Create the bucket and upload the site.

        Args:
            name: Site name; prefixes every child resource name.
            site_dir: Local directory whose files are uploaded.
            index_doc: Website index document (e.g. "index.html").
            error_doc: Website error document (e.g. "404.html").
            bucket_path: Key prefix for uploaded files; empty uploads to the
                bucket root.
            cors_origin: If set, allow GET from this origin.
            block_public_acls: Block public ACLs. Left off since objects are
                uploaded ``public-read`` for the website endpoint.
            opts: Component resource options.

        Outputs (set on self, registered for the component):
            bucket_name: Bucket id.
            website_endpoint: Website endpoint host (CloudFront origin).
            website_url: HTTP URL of the website endpoint.
        """
        super().__init__(ID, name, None, opts)

        child_opts = pulumi.ResourceOptions(parent=self)

        pulumi.log.info(f"Creating content bucket for {name}, index document: {index_doc}")
        self.bucket = aws.s3.Bucket(
            resource_name=f"{name}-bucket",
            website=aws.s3.BucketWebsiteArgs(
                index_document=index_doc,
                error_document=error_doc,
            ),
            opts=child_opts,
        )

        # Uploads use ACLs, which S3 only honours with ObjectWriter ownership.
        ownership = aws.s3.BucketOwnershipControls(
            resource_name=f"{name}-ownership-controls",
            bucket=self.bucket.id,
            rule=aws.s3.BucketOwnershipControlsRuleArgs(
                object_ownership="ObjectWriter",
            ),
            opts=child_opts,
        )
        access_block = aws.s3.BucketPublicAccessBlock(
            resource_name=f"{name}-public-access-block",
            bucket=self.bucket.id,
            block_public_acls=block_public_acls,
            opts=child_opts,
        )

        if cors_origin:
            aws.s3.BucketCorsConfigurationV2(
                resource_name=f"{name}-cors-setting",
                bucket=self.bucket.id,
                cors_rules=[
                    aws.s3.BucketCorsConfigurationV2CorsRuleArgs(
                        allowed_headers=["*"],
                        allowed_methods=["GET"],
                        allowed_origins=[cors_origin],
                        max_age_seconds=CORS_MAX_AGE_SECONDS,
                    )
                ],
                opts=child_opts,
            )

        # Objects need the ACL settings in place before they can be public-read.
        upload_opts = pulumi.ResourceOptions(
            parent=self,
            depends_on=[ownership, access_block],
        )
        self.objects = self._upload(name, site_dir, bucket_path, upload_opts)

        self.bucket_name: pulumi.Output[str] = self.bucket.id
        self.website_endpoint: pulumi.Output[str] = self.bucket.website_endpoint
        self.website_url: pulumi.Output[str] = pulumi.Output.concat(
            "http://", self.bucket.website_endpoint
        )
        self.register_outputs(
            {
                "bucket_name": self.bucket_name,
                "website_endpoint": self.website_endpoint,
                "website_url": self.website_url,
            }
        )

    def _upload(
        self,
        name: str,
        site_dir: str,
        bucket_path: str,
        opts: pulumi.ResourceOptions,
    ) -> list[aws.s3.BucketObject]:
        pulumi.log.info(f"Uploading {site_dir} to the {name} bucket")
        objects = []
        for local_path, key, mime_type in iter_site_files(site_dir, bucket_path):
            pulumi.log.debug(f"Uploading {local_path} as {key} ({mime_type})")
            objects.append(
                aws.s3.BucketObject(
                    resource_name=f"{name}/{key}",
                    key=key,
                    bucket=self.bucket.id,
                    acl="public-read",
                    source=pulumi.FileAsset(local_path),
                    content_type=mime_type,
                    opts=opts,
                )
            )
        return objects
