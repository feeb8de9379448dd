from __future__ import annotations

import logging

from smartmarks.client.api import ApiClient, error_message
from smartmarks.client.errors import (
    MutationError,
    ServiceUnavailable,
    ValidationError,
)
from smartmarks.services.common import normalize_category, normalize_url

logger = logging.getLogger(__name__)


def _bookmark_payload(title: str, url: str, category: str | None) -> dict:
    title = (title or "").strip()
    url = (url or "").strip()
    if not title or not url:
        raise ValidationError("Title and URL are required.")
    return {
        "title": title,
        "url": normalize_url(url),
        "category": normalize_category(category),
    }


class MutationGateway:
    """Issues create/update/delete requests for user actions.

    Nothing here touches local state; the echo of each write arrives through
    the change feed.
    """

    def __init__(self, api: ApiClient):
        self.api = api

    def _send(self, method: str, path: str, **kwargs) -> dict:
        try:
            response = self.api.request(method, path, **kwargs)
        except ServiceUnavailable as exc:
            raise MutationError(str(exc)) from exc
        if response.status_code >= 400:
            message = error_message(response)
            logger.warning("%s %s rejected: %s", method, path, message)
            raise MutationError(message, status_code=response.status_code)
        return response.json()

    def create(self, title: str, url: str, category: str | None = None) -> dict:
        return self._send("POST", "/bookmarks", json=_bookmark_payload(title, url, category))

    def update(
        self, bookmark_id: int, title: str, url: str, category: str | None = None
    ) -> dict:
        return self._send(
            "PATCH",
            f"/bookmarks/{bookmark_id}",
            json=_bookmark_payload(title, url, category),
        )

    def delete(self, bookmark_id: int) -> dict:
        return self._send("DELETE", f"/bookmarks/{bookmark_id}")
