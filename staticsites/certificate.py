"""
ACM certificate for a site's domains, validated through Route 53.

The workflow runs in four steps, chained by Pulumi outputs so the engine
orders them:

1. resolve the hosted zone of the primary domain (once);
2. request a DNS-validated certificate covering every domain;
3. publish one validation record per domain from the challenges ACM returns;
4. wait for ACM to observe all records and issue the certificate.

Certificates used by CloudFront must live in ``us-east-1`` whatever region
the rest of the stack uses, so the certificate and its validation are created
through a dedicated provider bound to that region. Validation records are
regular Route 53 resources and use the default provider.

Records have no dependencies on one another and are created concurrently;
the validation resource consumes all their FQDNs, so it waits for every one.
``certificate_arn`` is only known once validation succeeded and is the value
handed to the distribution.
"""

from typing import Any, Callable, Sequence

import pulumi
import pulumi_aws as aws

from staticsites._helpers import (
    ValidationChallenge,
    get_domain_and_subdomain,
    select_challenge,
)
from staticsites.dns import HostedZoneResolver
from staticsites.errors import CertificateRequestFailed

ID: str = "staticsites:aws:ValidatedCertificate"

# Region of the CloudFront control plane; not configurable.
CERTIFICATE_REGION: str = "us-east-1"

# Validation records only matter until ACM has seen them.
VALIDATION_RECORD_TTL: int = 60

DEFAULT_VALIDATION_TIMEOUT: str = "45m"


def request_certificate(
    primary: str,
    domains: Sequence[str],
    opts: pulumi.ResourceOptions | None = None,
) -> aws.acm.Certificate:
    """
    Request a public certificate for ``primary`` with ``domains`` as SANs.

    Raises:
        CertificateRequestFailed: ``primary`` is empty, is not the first of
            ``domains``, or ``domains`` holds duplicates.
    """
    if not primary or not domains or domains[0] != primary:
        raise CertificateRequestFailed(
            primary or "<empty>",
            f"Primary domain must be the first of {list(domains)}",
        )
    if len(set(domains)) != len(domains):
        raise CertificateRequestFailed(primary, f"Duplicate domains in {list(domains)}")

    return aws.acm.Certificate(
        resource_name=f"{primary}-certificate",
        domain_name=primary,
        validation_method="DNS",
        subject_alternative_names=list(domains),
        opts=opts,
    )


def _challenge_selector(
    index: int,
    domain: str,
) -> Callable[[Any], ValidationChallenge]:
    # index and domain are bound here, per record, so every apply callback
    # reads its own position even though they all run after the loop ends.
    def select(options: Any) -> ValidationChallenge:
        challenge = select_challenge(options, index, domain)
        pulumi.log.debug(
            f"Domain {domain}, DNS validation record "
            f"{challenge.type} {challenge.name} -> {challenge.value}"
        )
        return challenge

    return select


def publish_validation_records(
    domains: Sequence[str],
    certificate: aws.acm.Certificate,
    zone_id: pulumi.Input[str],
    opts: pulumi.ResourceOptions | None = None,
) -> list[aws.route53.Record]:
    """
    Create one validation record per domain, in ``domains`` order.

    ``records[i]`` carries the challenge ACM issued for ``domains[i]``. All
    records go into ``zone_id``; the zone is resolved by the caller once.
    """
    pulumi.log.info(f"Creating validation records for domains {list(domains)}")

    records = []
    for index, domain in enumerate(domains):
        challenge = certificate.domain_validation_options.apply(
            _challenge_selector(index, domain)
        )
        records.append(
            aws.route53.Record(
                resource_name=f"validation-record-{domain}",
                name=challenge.apply(lambda c: c.name),
                type=challenge.apply(lambda c: c.type),
                records=[challenge.apply(lambda c: c.value)],
                zone_id=zone_id,
                ttl=VALIDATION_RECORD_TTL,
                # Take over a record left by an earlier request for the same name.
                allow_overwrite=True,
                opts=opts,
            )
        )
    return records


def await_validation(
    primary: str,
    certificate: aws.acm.Certificate,
    records: Sequence[aws.route53.Record],
    timeout: str = DEFAULT_VALIDATION_TIMEOUT,
    opts: pulumi.ResourceOptions | None = None,
) -> aws.acm.CertificateValidation:
    """
    Wait until ACM sees every validation record and issues the certificate.

    ``timeout`` is the create deadline (e.g. "45m"); past it the engine fails
    this resource and the update stops. Re-running is safe: an issued
    certificate validates immediately.
    """
    # No in-process timeout error: the engine fails this resource past ``timeout``.
    timeouts = pulumi.ResourceOptions(custom_timeouts=pulumi.CustomTimeouts(create=timeout))
    return aws.acm.CertificateValidation(
        resource_name=f"{primary}-certificate-validation",
        certificate_arn=certificate.arn,
        validation_record_fqdns=[record.fqdn for record in records],
        opts=pulumi.ResourceOptions.merge(opts, timeouts),
    )


class ValidatedCertificate(pulumi.ComponentResource):
    """
    DNS-validated ACM certificate in ``us-east-1`` for a site's domains.

    Resources: Provider (us-east-1), Certificate, one Record per domain,
    CertificateValidation.
    """

    def __init__(
        self,
        name: str,
        domains: Sequence[str],
        resolver: HostedZoneResolver,
        validation_timeout: str = DEFAULT_VALIDATION_TIMEOUT,
        opts: pulumi.ResourceOptions | None = None,
    ):
        """
        Request and validate the certificate.

        Args:
            name: Pulumi resource name for the component.
            domains: Domains covered by the certificate; the first is the
                primary domain and names the child resources.
            resolver: Hosted zone resolver shared with the rest of the stack.
            validation_timeout: Create timeout of the validation resource.
            opts: Component resource options.

        Outputs (set on self, registered for the component):
            certificate_arn: ARN of the issued certificate, known only after
                validation succeeded.

        Raises:
            ZoneNotFound: The primary domain has no hosted zone. Raised before
                the certificate is requested.
            CertificateRequestFailed: ``domains`` is empty or invalid.
        """
        if not domains:
            raise CertificateRequestFailed(name, "No domains to certify")
        super().__init__(ID, name, None, opts)

        primary = domains[0]

        parent_domain, _ = get_domain_and_subdomain(primary)
        zone_id = resolver.resolve(parent_domain)

        child_opts = pulumi.ResourceOptions(parent=self)

        # ACM for CloudFront is only available in us-east-1.
        self.provider = aws.Provider(
            resource_name=f"{primary}-east",
            region=CERTIFICATE_REGION,
            opts=child_opts,
        )
        east_opts = pulumi.ResourceOptions(parent=self, provider=self.provider)

        self.certificate = request_certificate(primary, domains, opts=east_opts)
        self.validation_records = publish_validation_records(
            domains, self.certificate, zone_id, opts=child_opts
        )
        self.validation = await_validation(
            primary,
            self.certificate,
            self.validation_records,
            timeout=validation_timeout,
            opts=east_opts,
        )

        self.certificate_arn: pulumi.Output[str] = self.validation.certificate_arn
        self.register_outputs({"certificate_arn": self.certificate_arn})
