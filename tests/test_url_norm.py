import pytest

from goto.url_norm import domain_of, normalize_url, root_domain_of


def test_missing_scheme_defaults_to_https():
    assert normalize_url("github.com") == "https://github.com/"
    assert normalize_url("  example.com/docs?a=1 ") == "https://example.com/docs?a=1"


def test_existing_scheme_is_kept_and_host_lowercased():
    assert normalize_url("http://Example.COM/Path") == "http://example.com/Path"
    assert normalize_url("HTTPS://example.com/") == "https://example.com/"


def test_tracking_params_removed_and_fragment_kept():
    got = normalize_url("https://example.com/a?utm_source=x&id=3&fbclid=y#top")
    assert got == "https://example.com/a?id=3#top"


def test_empty_or_hostless_url_rejected():
    with pytest.raises(ValueError):
        normalize_url("   ")
    with pytest.raises(ValueError):
        normalize_url("https:///nohost")


def test_domain_helpers():
    assert domain_of("https://gist.github.com/x") == "gist.github.com"
    assert root_domain_of("https://gist.github.com/x") == "github"
    assert root_domain_of("https://www.bbc.co.uk/news") == "bbc"
    assert root_domain_of("http://127.0.0.1:8000/") == ""
