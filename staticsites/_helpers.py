"""
Domain parsing, ACM challenge selection and site file listing.

The certificate component picks its challenges with select_challenge, sites
expand their domain with expand_domain, the resolver strips subdomains with
get_domain_and_subdomain and the content bucket walks its directory with
iter_site_files. Challenge options are read by attribute or by key, so both
SDK objects and raw dicts from the engine work.
"""

import mimetypes
import os
import posixpath
import re
from dataclasses import dataclass
from typing import Any, Iterator, Sequence

from staticsites.errors import CertificateRequestFailed, InvalidDomainFormat

WWW = "www"

DEFAULT_CONTENT_TYPE = "application/octet-stream"

_LABEL = re.compile(r"^[a-z0-9]([a-z0-9-]{0,61}[a-z0-9])?$", re.IGNORECASE)


def get_domain_and_subdomain(
    domain: str,
) -> tuple[str, str]:
    """
    Split a domain into its parent domain and subdomain label.

    ``www.example.com`` gives ``("example.com", "www")``. A domain with two
    labels or fewer is its own parent and its own subdomain:
    ``example.com`` gives ``("example.com", "example.com")``.
    """
    labels = domain.split(".")
    if len(labels) > 2:
        return ".".join(labels[1:]), labels[0]
    return domain, domain


def expand_domain(
    domain: str,
) -> list[str]:
    """
    Return the hostnames served by one site: the apex and its ``www.`` variant.

    Args:
        domain: Apex domain (e.g. "example.com"). Empty means the site has no
            custom domain and an empty list is returned, so every certificate,
            DNS and CDN alias step is skipped.

    Returns:
        ``[domain, "www." + domain]``. Index 0 is the primary domain used to
        name the certificate, validation and distribution resources.

    Raises:
        InvalidDomainFormat: The domain has more than two labels (only apex
            domains are expanded) or a label is not a valid hostname label.
    """
    if not domain:
        return []
    labels = domain.split(".")
    if len(labels) > 2:
        raise InvalidDomainFormat(
            domain, f"Invalid domain format: {domain}, must be in format 'example.com'"
        )
    if not all(_LABEL.match(label) for label in labels):
        raise InvalidDomainFormat(domain, f"Invalid hostname: {domain}")
    return [domain, f"{WWW}.{domain}"]


@dataclass(frozen=True)
class ValidationChallenge:
    """DNS record ACM asks for before it issues the certificate for ``domain``."""

    domain: str
    name: str
    type: str
    value: str


def _option_field(option: Any, field: str) -> Any:
    value = getattr(option, field, None)
    if value is None and isinstance(option, dict):
        value = option.get(field)
    return value


def select_challenge(
    options: Sequence[Any] | None,
    index: int,
    domain: str,
) -> ValidationChallenge:
    """
    Pick the validation challenge for ``domain`` out of a certificate's
    ``domain_validation_options``.

    The option at ``index`` (the domain's position in the requested domain
    list) is used when it names the same domain. ACM returns the options as a
    set, so when that position holds another domain the option is matched by
    ``domain_name`` instead. Either way the challenge returned always belongs
    to ``domain``, never to a neighbour.

    Raises:
        CertificateRequestFailed: ACM issued no complete challenge for the
            domain.
    """
    candidates = list(options or [])
    if 0 <= index < len(candidates) and _option_field(
        candidates[index], "domain_name"
    ) in (domain, None):
        option = candidates[index]
    else:
        option = next(
            (c for c in candidates if _option_field(c, "domain_name") == domain),
            None,
        )
    if option is None:
        raise CertificateRequestFailed(
            domain, f"No DNS validation challenge issued for {domain}"
        )

    name = _option_field(option, "resource_record_name")
    record_type = _option_field(option, "resource_record_type")
    value = _option_field(option, "resource_record_value")
    if not (name and record_type and value):
        raise CertificateRequestFailed(
            domain, f"Incomplete DNS validation challenge for {domain}"
        )
    return ValidationChallenge(domain=domain, name=name, type=record_type, value=value)


def object_key(
    relative_path: str,
    bucket_path: str = "",
) -> str:
    """
    Build the S3 key for a file, relative to the site directory.

    Keys always use forward slashes and never start with one, so
    ``("css/site.css", "assets")`` gives ``"assets/css/site.css"``.
    """
    key = posixpath.join(bucket_path.strip("/"), relative_path.replace(os.sep, "/"))
    return key.lstrip("/")


def content_type(
    path: str,
) -> str:
    """Guess the Content-Type served for ``path`` from its extension."""
    guessed, _ = mimetypes.guess_type(path)
    return guessed or DEFAULT_CONTENT_TYPE


def iter_site_files(
    site_dir: str,
    bucket_path: str = "",
) -> Iterator[tuple[str, str, str]]:
    """
    Walk a site directory and yield ``(local_path, key, content_type)``.

    Files are yielded in a stable (sorted) order so resource names do not
    churn between runs. Only regular files are uploaded.
    """
    for root, dirs, files in os.walk(site_dir):
        dirs.sort()
        for file_name in sorted(files):
            local_path = os.path.join(root, file_name)
            if not os.path.isfile(local_path):
                continue
            relative = os.path.relpath(local_path, site_dir)
            yield local_path, object_key(relative, bucket_path), content_type(local_path)
