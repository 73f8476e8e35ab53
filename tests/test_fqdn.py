"""Tests for fully-qualified domain name resolution."""

import errno
import logging

import pytest

from hostfacts.backends.base import HostEntry
from hostfacts.net.fqdn import resolve_fqdn

from conftest import FakeBackend, FakeInterface, loopback


def entry(name, aliases=(), addresses=()):
    return HostEntry(name, list(aliases), list(addresses))


class TestForwardResolution:
    def test_canonical_name(self, make_context):
        backend = FakeBackend(forward={"host": entry("host.example.com")})
        assert resolve_fqdn(make_context(backend)) == "host.example.com"

    def test_dotted_alias(self, make_context):
        backend = FakeBackend(forward={
            "host": entry("host", aliases=["localhost", "host.example.com"]),
        })
        assert resolve_fqdn(make_context(backend)) == "host.example.com"

    def test_alias_must_extend_canonical_name(self, make_context):
        backend = FakeBackend(
            interfaces={"lo": loopback()},
            forward={"host": entry("host", aliases=["other.example.com"])},
        )
        # Falls through to the hostname since nothing else is configured.
        assert resolve_fqdn(make_context(backend)) == "host"

    def test_alias_prefix_match(self, make_context):
        backend = FakeBackend(forward={
            "host": entry("host", aliases=["hostile.example.com"]),
        })
        assert resolve_fqdn(make_context(backend)) == "hostile.example.com"

    def test_reverse_canonical_name(self, make_context):
        backend = FakeBackend(
            forward={"host": entry("host", addresses=["10.0.0.5"])},
            reverse={"10.0.0.5": entry("host.rev.example")},
        )
        assert resolve_fqdn(make_context(backend)) == "host.rev.example"

    def test_reverse_alias(self, make_context):
        backend = FakeBackend(
            forward={"host": entry("host", addresses=["10.0.0.5"])},
            reverse={"10.0.0.5": entry("h5", aliases=["h5.lab.example"])},
        )
        assert resolve_fqdn(make_context(backend)) == "h5.lab.example"

    def test_failed_reverse_lookup_skipped(self, make_context):
        backend = FakeBackend(
            forward={"host": entry("host", addresses=["10.0.0.9", "10.0.0.5"])},
            reverse={"10.0.0.5": entry("host.example.net")},
        )
        assert resolve_fqdn(make_context(backend)) == "host.example.net"

    def test_forward_result_truncated(self, make_context):
        backend = FakeBackend(forward={"host": entry("host.example.com")})
        assert resolve_fqdn(make_context(backend), 8) == "host.ex"


class TestLocalFallback:
    def test_dotted_hostname_kept_when_forward_fails(self, make_context):
        backend = FakeBackend(hostname="box.example.org")
        assert resolve_fqdn(make_context(backend)) == "box.example.org"
        assert backend.domain_calls == 0

    def test_domain_name_appended(self, make_context):
        backend = FakeBackend(domain="corp.example")
        assert resolve_fqdn(make_context(backend)) == "host.corp.example"

    def test_domain_used_after_unresolved_forward(self, make_context):
        backend = FakeBackend(forward={"host": entry("host")}, domain="corp.example")
        assert resolve_fqdn(make_context(backend)) == "host.corp.example"

    def test_unset_domain_falls_back_to_interface(self, fake_backend, make_context):
        assert resolve_fqdn(make_context(fake_backend)) == "192.168.1.10"

    def test_unsupported_domain_falls_back_to_interface(self, fake_backend, make_context):
        fake_backend.domain = None
        assert resolve_fqdn(make_context(fake_backend)) == "192.168.1.10"

    def test_empty_domain_ignored(self, fake_backend, make_context):
        fake_backend.domain = ""
        assert resolve_fqdn(make_context(fake_backend)) == "192.168.1.10"

    def test_loopback_interfaces_skipped(self, make_context):
        backend = FakeBackend(interfaces={
            "lo": loopback(),
            "eth1": FakeInterface(address="172.16.0.4"),
        })
        assert resolve_fqdn(make_context(backend)) == "172.16.0.4"

    def test_unconfigured_interfaces_skipped(self, make_context):
        backend = FakeBackend(interfaces={
            "eth0": FakeInterface(address="10.1.1.1", flags=None),
            "eth1": FakeInterface(address="10.1.1.2"),
        })
        assert resolve_fqdn(make_context(backend)) == "10.1.1.2"

    def test_hostname_when_nothing_else_works(self, make_context):
        backend = FakeBackend(interfaces={"lo": loopback()})
        assert resolve_fqdn(make_context(backend)) == "host"

    def test_interface_list_failure_keeps_hostname(self, make_context):
        backend = FakeBackend(ifconf_error=OSError(errno.EBADF, "bad socket"))
        assert resolve_fqdn(make_context(backend)) == "host"


class TestErrors:
    def test_gethostname_failure_raises(self, make_context, caplog):
        backend = FakeBackend(hostname=None)
        with caplog.at_level(logging.ERROR, logger="hostfacts.net.fqdn"):
            with pytest.raises(OSError):
                resolve_fqdn(make_context(backend))
        assert "gethostname failed" in caplog.text

    def test_debug_trace(self, make_context, caplog):
        backend = FakeBackend(forward={"host": entry("host.example.com")})
        with caplog.at_level(logging.DEBUG, logger="hostfacts.net.fqdn"):
            resolve_fqdn(make_context(backend))
        assert "[fqdn] gethostname() returned: 'host'" in caplog.text
        assert "[fqdn] resolved using gethostbyname.h_name" in caplog.text

    def test_context_uses_configured_length(self, make_context):
        backend = FakeBackend(forward={"host": entry("host.example.com")})
        context = make_context(backend, fqdn_len=5)
        assert context.fqdn() == "host"
