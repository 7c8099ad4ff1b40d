"""
Typed settings for the static sites stack.

Values come from Pulumi config (Pulumi.<stack>.yaml or pulumi config set).
The stack namespace lists the sites and holds stack-wide settings; each site has its own
namespace named after it:

    config:
      static-sites:sites: ["garden-center", "transportation"]
      static-sites:logs-bucket: request-logs-static-sites
      garden-center:dir: ../www/garden-center
      garden-center:domain: example.com
      garden-center:index-doc: index.html
      garden-center:error-doc: 404.html

Mail settings are only required once ``mail-domain`` is set.
"""

from dataclasses import dataclass
from typing import Any, Callable

import pulumi

from staticsites.certificate import DEFAULT_VALIDATION_TIMEOUT

DEFAULT_LOGS_BUCKET = "request-logs-static-sites"


def _require_str(config: pulumi.Config, key: str) -> str:
    return config.require(key)


def _get_str(config: pulumi.Config, key: str) -> str:
    return config.get(key) or ""


def _get_bool(config: pulumi.Config, key: str) -> bool:
    return bool(config.get_bool(key))


def _require_names(config: pulumi.Config, key: str) -> tuple[str, ...]:
    names = config.require_object(key)
    if not isinstance(names, list):
        raise pulumi.ConfigTypeError(config.full_key(key), str(names), "list")
    return tuple(str(name) for name in names)


def _get_str_or(default: str) -> Callable[[pulumi.Config, str], str]:
    def parse(config: pulumi.Config, key: str) -> str:
        return config.get(key) or default

    return parse


# (field, key, parser); parser receives (config, key) and returns value.
ConfigSpec = list[tuple[str, str, Callable[[pulumi.Config, str], Any]]]

_SITE_CONFIG_SPEC: ConfigSpec = [
    ("dir", "dir", _require_str),
    ("index_doc", "index-doc", _require_str),
    ("error_doc", "error-doc", _require_str),
    ("domain", "domain", _get_str),
    ("bucket_path", "bucket-path", _get_str),
    ("cors", "cors", _get_str),
]

_STACK_CONFIG_SPEC: ConfigSpec = [
    ("sites", "sites", _require_names),
    ("logs_bucket", "logs-bucket", _get_str_or(DEFAULT_LOGS_BUCKET)),
    ("validation_timeout", "validation-timeout", _get_str_or(DEFAULT_VALIDATION_TIMEOUT)),
    ("mail_domain", "mail-domain", _get_str),
    ("verify_mail_domain", "verify-mail-domain", _get_bool),
]

# Read only when mail-domain is set.
_MAIL_CONFIG_SPEC: ConfigSpec = [
    ("mail_recipient", "mail-recipient", _require_str),
    ("mail_sender", "mail-sender", _require_str),
    ("mail_origin", "mail-origin", _require_str),
]


def _parse(config: pulumi.Config, spec: ConfigSpec) -> dict[str, Any]:
    return {field: parser(config, key) for field, key, parser in spec}


@dataclass(frozen=True)
class SiteConfig:
    """
    One static site, read from the config namespace named after it.

    Attributes:
        name: Site name (the config namespace); prefixes its resources.
        dir: Local directory uploaded to the content bucket (required).
        index_doc: Index document, e.g. "index.html" (required).
        error_doc: Error document, e.g. "404.html" (required).
        domain: Apex domain; empty serves the site from the bucket only.
        bucket_path: Key prefix for uploaded files.
        cors: Origin allowed to GET bucket objects; empty disables CORS.
    """

    name: str
    dir: str
    index_doc: str
    error_doc: str
    domain: str = ""
    bucket_path: str = ""
    cors: str = ""

    @classmethod
    def from_pulumi_config(cls, config: pulumi.Config, name: str) -> "SiteConfig":
        """Build SiteConfig from the site's own pulumi.Config(name)."""
        return cls(name=name, **_parse(config, _SITE_CONFIG_SPEC))


@dataclass(frozen=True)
class StackConfig:
    """
    Stack-wide settings and the list of deployed sites.

    Attributes:
        sites: Names of the deployed sites (required).
        logs_bucket: Name of the CloudFront access-log bucket.
        validation_timeout: Create timeout of certificate validations ("45m").
        mail_domain: Domain of the contact-form mail relay; empty disables it.
        verify_mail_domain: Publish the SES verification record in Route 53.
        mail_recipient: Address receiving form mails (required with mail_domain).
        mail_sender: From address (required with mail_domain).
        mail_origin: Site origin allowed to post the form (required with
            mail_domain).
    """

    sites: tuple[str, ...]
    logs_bucket: str = DEFAULT_LOGS_BUCKET
    validation_timeout: str = DEFAULT_VALIDATION_TIMEOUT
    mail_domain: str = ""
    verify_mail_domain: bool = False
    mail_recipient: str = ""
    mail_sender: str = ""
    mail_origin: str = ""

    @classmethod
    def from_pulumi_config(cls, config: pulumi.Config) -> "StackConfig":
        """
        Build StackConfig from pulumi.Config(). Mail keys are required only
        when mail-domain is set.
        """
        kwargs = _parse(config, _STACK_CONFIG_SPEC)
        if kwargs["mail_domain"]:
            kwargs.update(_parse(config, _MAIL_CONFIG_SPEC))
        return cls(**kwargs)

    def site_configs(
        self,
        config_factory: Callable[[str], pulumi.Config] = pulumi.Config,
    ) -> list[SiteConfig]:
        """Read every listed site from its own config namespace."""
        return [
            SiteConfig.from_pulumi_config(config_factory(name), name)
            for name in self.sites
        ]
