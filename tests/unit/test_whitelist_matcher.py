import pytest

from growseed.services.whitelist_matcher import (
    add_entry,
    extract_host,
    is_productive,
    normalize_entry,
    remove_entry,
)


def test_partial_domain_matches_subdomain():
    assert is_productive("https://mail.example.com/inbox", ["example.com"]) is True


def test_entry_containing_host_matches():
    # host "docs" is contained in the longer entry
    assert is_productive("http://docs/", ["docs.python.org"]) is True


def test_no_match_for_unrelated_host():
    assert is_productive("https://news.ycombinator.com", ["github.com", "python.org"]) is False


@pytest.mark.parametrize("identifier", [None, "", "   ", "http://[::1", 42])
def test_missing_or_malformed_identifier_is_not_productive(identifier):
    assert is_productive(identifier, ["example.com"]) is False


def test_empty_whitelist_never_matches():
    assert is_productive("https://example.com", []) is False


def test_empty_entries_are_ignored():
    assert is_productive("https://example.com", ["", "   x"]) is False


def test_match_is_case_sensitive_on_entry():
    assert is_productive("https://example.com", ["Example.com"]) is False


def test_short_entry_over_matches():
    """Single-letter entries match any host containing that letter."""
    assert is_productive("https://twitter.com", ["t"]) is True


def test_bare_host_without_scheme():
    assert extract_host("github.com/user/repo") == "github.com"
    assert is_productive("github.com/user/repo", ["github.com"]) is True


def test_extract_host_drops_port_and_path():
    assert extract_host("http://localhost:8080/path?q=1") == "localhost"


@pytest.mark.parametrize(
    "identifier", ["about:blank", "data:text/html,hi", "mailto:me@github.com", "chrome:newtab"]
)
def test_schemes_without_host_have_no_host(identifier):
    assert extract_host(identifier) is None


def test_schemes_without_host_are_not_productive():
    assert is_productive("about:blank", ["aboutme.dev"]) is False
    assert is_productive("mailto:me@github.com", ["github.com"]) is False
    assert is_productive("data:text/html,hi", ["data"]) is False


def test_bare_host_with_port():
    assert extract_host("localhost:8080/admin") == "localhost"
    assert extract_host("github.com:443") == "github.com"


def test_normalize_entry_strips_scheme_and_trailing_slash():
    assert normalize_entry("  https://docs.python.org/ ") == "docs.python.org"
    assert normalize_entry("http://example.com") == "example.com"


def test_add_entry_rejects_duplicates_silently():
    whitelist, added = add_entry(["github.com"], "https://github.com/")
    assert added is False
    assert whitelist == ["github.com"]


def test_add_entry_preserves_insertion_order():
    whitelist, added = add_entry(["b.com"], "a.com")
    assert added is True
    assert whitelist == ["b.com", "a.com"]


def test_add_entry_rejects_blank():
    whitelist, added = add_entry([], "   ")
    assert added is False
    assert whitelist == []


def test_remove_entry():
    whitelist, removed = remove_entry(["a.com", "b.com"], "a.com")
    assert removed is True
    assert whitelist == ["b.com"]

    whitelist, removed = remove_entry(whitelist, "missing.com")
    assert removed is False
