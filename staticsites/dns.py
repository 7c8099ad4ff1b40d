"""
Route 53 lookups and alias records.

Hosted zones are never created here: they belong to the DNS provider and must
already exist (delegated out of band). ``HostedZoneResolver`` looks each parent
domain up once per program run and hands the zone id to every record that
needs it, so the apex and ``www.`` records of a site, and the certificate
validation records, all land in the same zone.
"""

from typing import Callable, Sequence

import pulumi
import pulumi_aws as aws

from staticsites._helpers import get_domain_and_subdomain
from staticsites.errors import ZoneNotFound

# Maps a parent domain (e.g. "example.com") to its hosted zone id.
ZoneLookup = Callable[[str], str]


def lookup_zone_id(domain: str) -> str:
    """Read the public hosted zone id for ``domain`` from Route 53."""
    return aws.route53.get_zone(name=domain, private_zone=False).id


class HostedZoneResolver:
    """
    Memoized hosted zone lookup keyed by parent domain.

    Repeated calls for the same domain return the same zone id and hit
    Route 53 once. The lookup is injectable so callers can resolve zones from
    another source (e.g. a fixed map in tests).
    """

    def __init__(
        self,
        lookup: ZoneLookup = lookup_zone_id,
    ):
        self._lookup = lookup
        self._zones: dict[str, str] = {}

    def resolve(
        self,
        domain: str,
    ) -> str:
        """
        Return the hosted zone id for a parent domain.

        Callers strip the subdomain first (see ``resolve_parent``).

        Raises:
            ZoneNotFound: Route 53 has no hosted zone for ``domain``.
        """
        if domain in self._zones:
            return self._zones[domain]

        pulumi.log.info(f"Looking up hosted zone for domain {domain}")
        try:
            zone_id = self._lookup(domain)
        except Exception as exc:
            # Invoke failures come back as plain Exceptions from the engine;
            # keep their reason first, it may not be a missing zone.
            raise ZoneNotFound(domain, f"{exc} (looking up hosted zone for {domain})") from exc
        if not zone_id:
            raise ZoneNotFound(domain, f"No hosted zone found for {domain}")

        pulumi.log.info(f"DNS hosted zone for {domain}: {zone_id}")
        self._zones[domain] = zone_id
        return zone_id

    def resolve_parent(
        self,
        domain: str,
    ) -> str:
        """Resolve the zone of ``domain``'s parent (``www.example.com`` -> ``example.com``)."""
        parent, _ = get_domain_and_subdomain(domain)
        return self.resolve(parent)


def create_alias_records(
    resolver: HostedZoneResolver,
    distribution: aws.cloudfront.Distribution,
    domains: Sequence[str],
    opts: pulumi.ResourceOptions | None = None,
) -> list[aws.route53.Record]:
    """
    Point every domain at the CloudFront distribution with an ``A`` alias.

    Each record goes into the zone of the domain's parent, resolved through
    ``resolver`` so a shared parent is looked up once.
    """
    records = []
    for domain in domains:
        pulumi.log.info(f"Creating alias for domain {domain}")
        zone_id = resolver.resolve_parent(domain)
        alias = aws.route53.RecordAliasArgs(
            name=distribution.domain_name,
            zone_id=distribution.hosted_zone_id,
            evaluate_target_health=True,
        )
        records.append(
            aws.route53.Record(
                resource_name=domain,
                name=domain,
                zone_id=zone_id,
                type="A",
                aliases=[alias],
                opts=opts,
            )
        )
    return records
