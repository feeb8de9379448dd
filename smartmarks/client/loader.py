from __future__ import annotations

from smartmarks.client.api import ApiClient, error_message
from smartmarks.client.errors import AuthenticationRequired, SmartmarksError
from smartmarks.client.reconciler import BookmarkRecord


def load_bookmarks(api: ApiClient, category: str | None = None) -> list[BookmarkRecord]:
    params = {"category": category} if category else None
    response = api.request("GET", "/bookmarks", params=params)
    if response.status_code == 401:
        raise AuthenticationRequired(error_message(response))
    if response.status_code >= 400:
        raise SmartmarksError(error_message(response))
    return [BookmarkRecord.from_row(row) for row in response.json()["items"]]


def load_bookmark(api: ApiClient, bookmark_id: int) -> BookmarkRecord:
    response = api.request("GET", f"/bookmarks/{bookmark_id}")
    if response.status_code == 401:
        raise AuthenticationRequired(error_message(response))
    if response.status_code >= 400:
        raise SmartmarksError(error_message(response))
    return BookmarkRecord.from_row(response.json())
