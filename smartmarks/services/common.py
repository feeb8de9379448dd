DEFAULT_CATEGORY = "Uncategorized"


def normalize_url(url: str) -> str:
    if not url:
        return ""
    if url.startswith("http://") or url.startswith("https://"):
        return url
    return f"https://{url}"


def normalize_category(raw: str | None) -> str:
    category = (raw or "").strip()
    return category or DEFAULT_CATEGORY
