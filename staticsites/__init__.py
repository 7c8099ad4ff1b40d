"""
Building blocks of the static sites stack, wired together by __main__.py.

A site is one component owning its bucket, certificate and DNS; the pieces
shared across sites are components of their own:

- **StaticSite**: content bucket; with a domain, also certificate, CloudFront
  distribution and alias records. Exposes bucket_name, website_url and
  cloudfront_domain_name.
- **ValidatedCertificate**: DNS-validated ACM certificate in us-east-1;
  exposes certificate_arn once issued.
- **WwwRedirect**: Lambda@Edge apex -> www redirect; exposes qualified_arn.
- **MailRelay**: SES contact-form endpoint; exposes url.
- **HostedZoneResolver**: memoized Route 53 zone lookup shared by all of them.
"""

from staticsites.certificate import ValidatedCertificate
from staticsites.dns import HostedZoneResolver
from staticsites.edge import WwwRedirect
from staticsites.mail import MailRelay
from staticsites.site import StaticSite

__all__ = [
    "HostedZoneResolver",
    "MailRelay",
    "StaticSite",
    "ValidatedCertificate",
    "WwwRedirect",
]
