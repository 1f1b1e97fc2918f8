"""Unit tests for datdns.normalizer."""

from __future__ import annotations

import re

import pytest

from datdns.errors import InvalidNameError
from datdns.normalizer import normalize_name, strip_version
from tests.helpers import BASE32_RECORDS, KEY_A, KEY_BASE32, KEY_MIXED

BASE32_RE = re.compile(BASE32_RECORDS["hash_pattern"], re.IGNORECASE)

# ---------------------------------------------------------------------------
# strip_version
# ---------------------------------------------------------------------------


class TestStripVersion:
    def test_numeric_version(self) -> None:
        assert strip_version("example.com+12") == "example.com"

    def test_named_version(self) -> None:
        assert strip_version("example.com+latest") == "example.com"

    def test_no_version(self) -> None:
        assert strip_version("example.com") == "example.com"

    def test_version_followed_by_path_is_kept(self) -> None:
        assert strip_version("example.com+1/path") == "example.com+1/path"


# ---------------------------------------------------------------------------
# normalize_name: hostnames
# ---------------------------------------------------------------------------


class TestNormalizeHostnames:
    def test_bare_hostname(self) -> None:
        result = normalize_name("example.com")
        assert result.value == "example.com"
        assert result.is_key is False

    def test_url_uses_hostname(self) -> None:
        assert normalize_name("https://example.com/some/path?q=1").value == "example.com"

    def test_dat_url(self) -> None:
        assert normalize_name("dat://example.com/index.html").value == "example.com"

    def test_dat_url_with_version(self) -> None:
        assert normalize_name("dat://example.com+5/index.html").value == "example.com"

    def test_url_with_port(self) -> None:
        assert normalize_name("https://example.com:8080/").value == "example.com"

    def test_hostname_with_version(self) -> None:
        assert normalize_name("example.com+3").value == "example.com"

    def test_hostname_is_lowercased_when_parsed_from_url(self) -> None:
        assert normalize_name("https://Example.COM/").value == "example.com"


# ---------------------------------------------------------------------------
# normalize_name: raw keys
# ---------------------------------------------------------------------------


class TestNormalizeKeys:
    def test_bare_key(self) -> None:
        result = normalize_name(KEY_A)
        assert result.is_key is True
        assert result.value == KEY_A

    def test_uppercase_key_is_lowercased(self) -> None:
        result = normalize_name(KEY_MIXED.upper())
        assert result.is_key is True
        assert result.value == KEY_MIXED

    def test_key_with_version(self) -> None:
        result = normalize_name(f"{KEY_A}+42")
        assert result.is_key is True
        assert result.value == KEY_A

    def test_key_url_with_version_and_path(self) -> None:
        result = normalize_name(f"dat://{KEY_MIXED}+7/some/file.txt")
        assert result.is_key is True
        assert result.value == KEY_MIXED

    def test_63_chars_is_not_a_key(self) -> None:
        assert normalize_name("a" * 63).is_key is False

    def test_65_chars_is_not_a_key(self) -> None:
        assert normalize_name("a" * 65).is_key is False

    def test_non_hex_is_not_a_key(self) -> None:
        assert normalize_name("g" * 64).is_key is False

    def test_custom_key_shape(self) -> None:
        result = normalize_name(f"hyper://{KEY_BASE32.upper()}+3/index.html", BASE32_RE)
        assert result.is_key is True
        assert result.value == KEY_BASE32

    def test_custom_key_shape_rejects_hex(self) -> None:
        assert normalize_name(KEY_A, BASE32_RE).is_key is False


# ---------------------------------------------------------------------------
# normalize_name: invalid input
# ---------------------------------------------------------------------------


class TestNormalizeInvalid:
    def test_integer_rejected(self) -> None:
        with pytest.raises(InvalidNameError):
            normalize_name(1234)

    def test_none_rejected(self) -> None:
        with pytest.raises(InvalidNameError):
            normalize_name(None)

    def test_empty_string_rejected(self) -> None:
        with pytest.raises(InvalidNameError):
            normalize_name("")

    def test_scheme_only_rejected(self) -> None:
        with pytest.raises(InvalidNameError):
            normalize_name("https://")

    def test_unbalanced_ipv6_bracket_rejected(self) -> None:
        with pytest.raises(InvalidNameError):
            normalize_name("http://[::1/")
