"""
Tests for the shard URL parser.
"""

import pytest

from core.domain.models import ParsedReference, TopLevelDomain
from core.services.url_parser import (
    is_root_label,
    parse_reference,
    split_authority,
    split_subdomain,
    strip_scheme,
)


class TestParseReference:
    """Accepted shapes."""

    def test_parses_all_fields(self):
        parsed = parse_reference("https://k02.mbdny.org/path/img.jpg")

        assert parsed == ParsedReference(
            prefix="k",
            shard_number=2,
            root_domain="mbdny",
            top_level_domain=TopLevelDomain.ORG,
            path="/path/img.jpg",
        )

    def test_normalizes_case_except_path(self):
        parsed = parse_reference("HTTPS://K02.MbDnY.ORG/Path/IMG.JPG")

        assert parsed.prefix == "k"
        assert parsed.root_domain == "mbdny"
        assert parsed.top_level_domain is TopLevelDomain.ORG
        assert parsed.path == "/Path/IMG.JPG"

    def test_http_scheme_accepted(self):
        assert parse_reference("http://x7.bato.to/a.png").top_level_domain is TopLevelDomain.TO

    def test_path_keeps_query_and_fragment(self):
        parsed = parse_reference("https://n05.mbrtz.net/a.jpg?w=200&h=1#frag")

        assert parsed.path == "/a.jpg?w=200&h=1#frag"

    def test_empty_path(self):
        parsed = parse_reference("https://n05.mbrtz.org")

        assert parsed.path == ""
        assert parsed.to_url() == "https://n05.mbrtz.org"

    def test_multi_letter_prefix_and_three_digit_shard(self):
        parsed = parse_reference("https://img123.cdn-host.net/x")

        assert parsed.prefix == "img"
        assert parsed.shard_number == 123

    def test_leading_zeros_collapse(self):
        assert parse_reference("https://k002.mbdny.org/x").shard_number == 2

    @pytest.mark.parametrize(
        "url",
        [
            "https://k02.mbdny.org/path/img.jpg",
            "http://k2.mbdny.org/a",
            "https://n005.mbrtz.net/a?b=c",
            "https://xy123.a-b-c.to",
            "HTTPS://Q9.ROOT9.ORG/Keep/Case",
        ],
    )
    def test_round_trip(self, url):
        parsed = parse_reference(url)

        assert parse_reference(parsed.to_url()) == parsed

    def test_deterministic(self):
        url = "https://k02.mbdny.org/p.jpg"
        assert parse_reference(url) == parse_reference(url)


class TestRejectedUrls:
    """Anything outside the naming scheme yields None."""

    @pytest.mark.parametrize(
        "url",
        [
            "ftp://k02.mbdny.org/a.jpg",
            "//k02.mbdny.org/a.jpg",
            "k02.mbdny.org/a.jpg",
            " https://k02.mbdny.org/a.jpg",
            "https://kk.mbdny.org/a.jpg",
            "https://02.mbdny.org/a.jpg",
            "https://k0002.mbdny.org/a.jpg",
            "https://k02a.mbdny.org/a.jpg",
            "https://k02.mbdny.com/a.jpg",
            "https://k02.mbdny.org:8443/a.jpg",
            "https://k02.mbdny.co.org/a.jpg",
            "https://mbdny.org/a.jpg",
            "https://k02.mb_dny.org/a.jpg",
            "https://k02..org/a.jpg",
            "https://k02.mbdny.org?x=1",
            "https://user@k02.mbdny.org/a.jpg",
            "https://k02.mbdnü.org/a.jpg",
            "https://k02.mbdny.org/a\nb.jpg",
            "",
        ],
    )
    def test_rejects(self, url):
        assert parse_reference(url) is None

    def test_non_string(self):
        assert parse_reference(None) is None


class TestGrammarPieces:
    """Each grammar rule on its own."""

    def test_strip_scheme(self):
        assert strip_scheme("HtTpS://host/x") == "host/x"
        assert strip_scheme("http://host") == "host"
        assert strip_scheme("mailto:x") is None

    def test_split_authority(self):
        assert split_authority("host/a/b") == ("host", "/a/b")
        assert split_authority("host") == ("host", "")
        assert split_authority("host#x") is None

    @pytest.mark.parametrize(
        "label,expected",
        [
            ("k02", ("k", 2)),
            ("K7", ("k", 7)),
            ("abc999", ("abc", 999)),
            ("k", None),
            ("02", None),
            ("k1000", None),
            ("k0x", None),
        ],
    )
    def test_split_subdomain(self, label, expected):
        assert split_subdomain(label) == expected

    def test_root_label(self):
        assert is_root_label("mb-dny9")
        assert not is_root_label("")
        assert not is_root_label("mb.dny")
        assert not is_root_label("mb dny")
