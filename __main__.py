"""
Static sites - AWS IaC entrypoint.

Wires the stack's components using Pulumi config and output chaining:

- **Log bucket**: one private bucket for the access logs of every distribution.
- **WwwRedirect**: one Lambda@Edge function (us-east-1) shared by every
  distribution, redirecting apex requests to www.
- **StaticSite**: per configured site, a content bucket and, when the site has
  a domain, a DNS-validated certificate, a CloudFront distribution and alias
  records. Hosted zones are resolved through one shared resolver, so each
  parent domain is looked up once per run.
- **MailRelay**: contact-form endpoint, only when ``mail-domain`` is set.

Stack exports per site: <site>-bucketName, <site>-bucketEndpoint and, with a
domain, <site>-cloudfrontDomain. Also lambda_redirect_arn and, with the mail
relay, email_form_url.
"""

import pulumi

from config import StackConfig
from staticsites import HostedZoneResolver, MailRelay, StaticSite, WwwRedirect
from staticsites.storage import create_log_bucket


def main():
    """
    Build the shared resources, every site and the mail relay, and export
    the stack outputs.
    """
    pulumi.log.info("Deploying static website infrastructure")
    config = StackConfig.from_pulumi_config(pulumi.Config())
    resolver = HostedZoneResolver()

    logs_bucket = create_log_bucket(config.logs_bucket)

    pulumi.log.info("Deploying global lambda functions")
    redirect = WwwRedirect()
    pulumi.export("lambda_redirect_arn", redirect.qualified_arn)

    pulumi.log.info("Deploying websites")
    for site_config in config.site_configs():
        site = StaticSite(
            site_config.name,
            site_dir=site_config.dir,
            index_doc=site_config.index_doc,
            error_doc=site_config.error_doc,
            logs_bucket=logs_bucket,
            redirect_arn=redirect.qualified_arn,
            resolver=resolver,
            domain=site_config.domain,
            bucket_path=site_config.bucket_path,
            cors_origin=site_config.cors,
            validation_timeout=config.validation_timeout,
        )
        pulumi.export(f"{site_config.name}-bucketName", site.bucket_name)
        pulumi.export(f"{site_config.name}-bucketEndpoint", site.website_url)
        if site.cloudfront_domain_name is not None:
            pulumi.export(f"{site_config.name}-cloudfrontDomain", site.cloudfront_domain_name)

    if config.mail_domain:
        mail = MailRelay(
            "email-form",
            mail_domain=config.mail_domain,
            recipient=config.mail_recipient,
            sender=config.mail_sender,
            allowed_origin=config.mail_origin,
            resolver=resolver,
            verify_domain=config.verify_mail_domain,
        )
        pulumi.export("email_form_url", mail.url)


if __name__ == "__main__":
    main()
