import pytest

from smartmarks.services.common import normalize_category, normalize_url
from smartmarks.services.presentation import (
    extract_domain,
    favicon_url,
    placeholder_url,
    thumbnail_url,
)


@pytest.mark.parametrize(
    "raw, stored",
    [
        ("example.com", "https://example.com"),
        ("http://example.com", "http://example.com"),
        ("https://example.com", "https://example.com"),
        ("ftp://example.com", "https://ftp://example.com"),
    ],
)
def test_normalize_url_prefixes_https_only_when_missing(raw, stored):
    assert normalize_url(raw) == stored


@pytest.mark.parametrize("raw", [None, "", "   ", "\t\n"])
def test_blank_category_defaults_to_uncategorized(raw):
    assert normalize_category(raw) == "Uncategorized"


def test_category_is_trimmed():
    assert normalize_category("  Reading ") == "Reading"


def test_extract_domain_falls_back_for_unparseable_urls():
    assert extract_domain("https://docs.python.org/3/") == "docs.python.org"
    assert extract_domain("not a url") == "link"
    assert extract_domain("http://[::1") == "link"
    assert extract_domain(None) == "link"


def test_image_urls_use_domain_and_full_link():
    url = "https://docs.python.org/3/"

    assert favicon_url(url) == (
        "https://www.google.com/s2/favicons?domain=docs.python.org&sz=64"
    )
    assert thumbnail_url(url) == (
        "https://image.thum.io/get/width/600/crop/1200/https://docs.python.org/3/"
    )
    assert placeholder_url("bogus") == (
        "https://placehold.co/600x1200/111827/ffffff?text=link"
    )
