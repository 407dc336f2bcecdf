"""Tests for domain name normalization and canonical names."""

from __future__ import annotations

import pytest

from zonectl.domain import names
from zonectl.domain.errors import InvalidNameError
from zonectl.domain.names import canonicalize, normalize_label, normalize_name


class TestCanonicalize:
    def test_apex_is_normalized_domain(self) -> None:
        assert canonicalize("Example.com", "") == ("example.com", "", "example.com")

    def test_subdomain_prefixes_domain(self) -> None:
        assert canonicalize("Example.com", "WWW") == ("example.com", "www", "www.example.com")

    def test_multi_label_subdomain(self) -> None:
        _, sub, canonical = canonicalize("example.com", "API.eu")
        assert sub == "api.eu"
        assert canonical == "api.eu.example.com"

    def test_empty_subdomain_skips_conversion(self, monkeypatch: pytest.MonkeyPatch) -> None:
        seen: list[str] = []
        original = names.normalize_name

        def spy(name: str, **kwargs: bool) -> str:
            seen.append(name)
            return original(name, **kwargs)

        monkeypatch.setattr(names, "normalize_name", spy)
        canonicalize("Example.com", "")
        assert seen == ["Example.com"]

    def test_invalid_subdomain_raises(self) -> None:
        with pytest.raises(InvalidNameError):
            canonicalize("example.com", "bad label")

    def test_canonical_name_length_checked(self) -> None:
        domain = ".".join(["d" * 60] * 3)
        subdomain = ".".join(["s" * 60] * 2)
        with pytest.raises(InvalidNameError, match="exceeds"):
            canonicalize(domain, subdomain)

    def test_wildcard_subdomain_leads_canonical_name(self) -> None:
        assert canonicalize("example.com", "*")[2] == "*.example.com"
        assert canonicalize("example.com", "*.eu")[2] == "*.eu.example.com"

    def test_wildcard_apex_domain(self) -> None:
        assert canonicalize("*.example.com")[2] == "*.example.com"

    @pytest.mark.parametrize(
        ("domain", "subdomain"),
        [
            ("*.example.com", "www"),
            ("example.com", "a.*"),
            ("example.com", "www.*.eu"),
        ],
    )
    def test_wildcard_inside_name_rejected(self, domain: str, subdomain: str) -> None:
        with pytest.raises(InvalidNameError):
            canonicalize(domain, subdomain)


class TestNormalizeName:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("example.com", "example.com"),
            ("EXAMPLE.Com", "example.com"),
            ("example.com.", "example.com"),
            ("_dmarc", "_dmarc"),
            ("_acme-challenge.www", "_acme-challenge.www"),
            ("*", "*"),
            ("xn--bcher-kva", "xn--bcher-kva"),
        ],
    )
    def test_ascii_names(self, raw: str, expected: str) -> None:
        assert normalize_name(raw) == expected

    def test_internationalized_name(self) -> None:
        assert normalize_name("Bücher.example") == "xn--bcher-kva.example"

    def test_ideographic_full_stop_separates_labels(self) -> None:
        assert normalize_name("münchen。de") == "xn--mnchen-3ya.de"

    @pytest.mark.parametrize("raw", ["example.com", "www.example.com", "xn--bcher-kva.example"])
    def test_idempotent(self, raw: str) -> None:
        once = normalize_name(raw)
        assert normalize_name(once) == once

    @pytest.mark.parametrize(
        "raw",
        [
            "",
            ".",
            "example..com",
            "a" * 64,
            "-leading.example",
            "trailing-.example",
            "spa ce.example",
            "*wild.example",
            "www.*.example.com",
            "a.*",
            "snow☃man.example",
        ],
    )
    def test_invalid_names(self, raw: str) -> None:
        with pytest.raises(InvalidNameError):
            normalize_name(raw)

    def test_leading_wildcard_can_be_refused(self) -> None:
        with pytest.raises(InvalidNameError):
            normalize_name("*.example.com", wildcard=False)

    def test_max_label_length_accepted(self) -> None:
        label = "a" * 63
        assert normalize_name(label) == label

    def test_name_too_long(self) -> None:
        with pytest.raises(InvalidNameError, match="253"):
            normalize_name(".".join(["a" * 63] * 4))

    def test_error_detail_names_input(self) -> None:
        with pytest.raises(InvalidNameError) as exc_info:
            normalize_name("bad label.example")
        assert exc_info.value.detail["name"] == "bad label.example"
        assert exc_info.value.code == "INVALID_NAME"


class TestNormalizeLabel:
    def test_lowercases(self) -> None:
        assert normalize_label("WWW") == "www"

    def test_empty_label(self) -> None:
        with pytest.raises(InvalidNameError, match="empty"):
            normalize_label("")

    def test_wildcard_is_not_a_label(self) -> None:
        with pytest.raises(InvalidNameError):
            normalize_label("*")
