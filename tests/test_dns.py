"""Tests for hosted zone resolution and alias records"""

from types import SimpleNamespace

import pulumi
import pytest

from staticsites.dns import HostedZoneResolver, create_alias_records, lookup_zone_id
from staticsites.errors import ZoneNotFound


class CountingLookup:
    def __init__(self, zones):
        self.zones = zones
        self.requested = []

    def __call__(self, domain):
        self.requested.append(domain)
        if domain not in self.zones:
            raise Exception(f"no matching Route 53 Hosted Zone found for {domain}")
        return self.zones[domain]


class TestHostedZoneResolver:
    def test_resolves_zone_id(self):
        resolver = HostedZoneResolver(CountingLookup({"example.com": "Z1"}))
        assert resolver.resolve("example.com") == "Z1"

    def test_looks_each_domain_up_once(self):
        lookup = CountingLookup({"example.com": "Z1", "example.org": "Z2"})
        resolver = HostedZoneResolver(lookup)

        first = resolver.resolve("example.com")
        second = resolver.resolve("example.com")
        resolver.resolve("example.org")

        assert first == second == "Z1"
        assert lookup.requested == ["example.com", "example.org"]

    def test_resolve_parent_strips_subdomain(self):
        lookup = CountingLookup({"example.com": "Z1"})
        resolver = HostedZoneResolver(lookup)

        assert resolver.resolve_parent("www.example.com") == "Z1"
        assert resolver.resolve_parent("example.com") == "Z1"
        assert lookup.requested == ["example.com"]

    def test_missing_zone_raises(self):
        resolver = HostedZoneResolver(CountingLookup({}))

        with pytest.raises(ZoneNotFound) as excinfo:
            resolver.resolve("unregistered.dev")
        assert excinfo.value.resource == "unregistered.dev"

    def test_lookup_error_reason_comes_first(self):
        def lookup(domain):
            raise Exception("ThrottlingException: Rate exceeded")

        with pytest.raises(ZoneNotFound) as excinfo:
            HostedZoneResolver(lookup).resolve("example.com")
        assert excinfo.value.message.startswith("ThrottlingException: Rate exceeded")
        assert "example.com" in excinfo.value.message

    def test_empty_zone_id_raises(self):
        resolver = HostedZoneResolver(lambda domain: "")

        with pytest.raises(ZoneNotFound):
            resolver.resolve("example.com")

    def test_failed_lookup_is_not_cached(self):
        lookup = CountingLookup({})
        resolver = HostedZoneResolver(lookup)

        for _ in range(2):
            with pytest.raises(ZoneNotFound):
                resolver.resolve("example.com")
        assert lookup.requested == ["example.com", "example.com"]


class TestLookupZoneId:
    def test_reads_route53(self, mocks):
        zone_ids = []

        @pulumi.runtime.test
        def lookup():
            zone_ids.append(lookup_zone_id("example.com"))

        lookup()

        assert zone_ids == ["Z0EXAMPLE"]
        assert [call.token for call in mocks.calls] == ["aws:route53/getZone:getZone"]
        assert mocks.calls[0].args["name"] == "example.com"


class TestCreateAliasRecords:
    def test_one_alias_per_domain_in_parent_zone(self, mocks):
        lookup = CountingLookup({"example.com": "Z1"})

        @pulumi.runtime.test
        def deploy():
            distribution = SimpleNamespace(
                domain_name=pulumi.Output.from_input("d111111abcdef8.cloudfront.net"),
                hosted_zone_id=pulumi.Output.from_input("Z2FDTNDATAQYW2"),
            )
            create_alias_records(
                HostedZoneResolver(lookup),
                distribution,
                ["example.com", "www.example.com"],
            )

        deploy()

        records = mocks.created("aws:route53/record:Record")
        assert sorted(r.inputs["name"] for r in records) == ["example.com", "www.example.com"]
        for record in records:
            assert record.inputs["type"] == "A"
            assert record.inputs["zoneId"] == "Z1"
            alias = record.inputs["aliases"][0]
            assert alias["name"] == "d111111abcdef8.cloudfront.net"
            assert alias["zoneId"] == "Z2FDTNDATAQYW2"
            assert alias["evaluateTargetHealth"] is True
        assert lookup.requested == ["example.com"]
