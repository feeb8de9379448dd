from __future__ import annotations

from urllib.parse import quote, urlsplit

FALLBACK_DOMAIN = "link"

FAVICON_ENDPOINT = "https://www.google.com/s2/favicons"
THUMBNAIL_ENDPOINT = "https://image.thum.io/get/width/600/crop/1200/"
PLACEHOLDER_ENDPOINT = "https://placehold.co/600x1200/111827/ffffff"


def extract_domain(url: str | None) -> str:
    try:
        hostname = urlsplit(url or "").hostname
    except ValueError:
        return FALLBACK_DOMAIN
    return hostname or FALLBACK_DOMAIN


def favicon_url(url: str | None) -> str:
    return f"{FAVICON_ENDPOINT}?domain={quote(extract_domain(url))}&sz=64"


def thumbnail_url(url: str | None) -> str:
    return f"{THUMBNAIL_ENDPOINT}{url or ''}"


def placeholder_url(url: str | None) -> str:
    return f"{PLACEHOLDER_ENDPOINT}?text={quote(extract_domain(url))}"


def register_template_filters(app) -> None:
    app.add_template_filter(extract_domain, "domain")
    app.add_template_filter(favicon_url, "favicon")
    app.add_template_filter(thumbnail_url, "thumbnail")
    app.add_template_filter(placeholder_url, "placeholder")
