"""
Errors raised while building the static sites program.

Every error is terminal to the current ``pulumi up``: nothing here is retried.
Each carries the name of the resource (or configured domain) it concerns so
the operator can see what failed and why. Re-running the update is safe since
resources that already exist are left as they are.

Validation timeouts are not raised in-process: the engine fails the named
``CertificateValidation`` resource once its create timeout elapses.
"""


class StaticSitesError(Exception):
    """Base class for errors raised by the static sites components."""

    def __init__(
        self,
        resource: str,
        message: str,
    ):
        self.resource = resource
        self.message = message
        super().__init__(f"{resource}: {message}")


class InvalidDomainFormat(StaticSitesError):
    """Configured domain is not an apex domain like ``example.com``."""


class ZoneNotFound(StaticSitesError):
    """No Route 53 hosted zone exists for the domain; delegate it out of band."""


class CertificateRequestFailed(StaticSitesError):
    """Certificate request is invalid or ACM did not issue a DNS challenge."""
