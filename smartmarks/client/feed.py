from __future__ import annotations

import logging
from typing import Callable

from smartmarks.client.api import ApiClient, error_message
from smartmarks.client.errors import FeedError, ServiceUnavailable, SubscriptionClosed
from smartmarks.client.reconciler import ChangeNotification
from smartmarks.client.session import AuthSession

logger = logging.getLogger(__name__)

Handler = Callable[[ChangeNotification], None]


class Subscription:
    """A live handle on the caller's change feed.

    Acquire it with ``ChangeFeed.subscribe`` and release it with ``close`` or
    by leaving the ``with`` block.
    """

    def __init__(self, api: ApiClient, handler: Handler, cursor: int):
        self.api = api
        self.handler = handler
        self.cursor = cursor
        self.closed = False

    def _fetch(self) -> dict:
        try:
            response = self.api.request("GET", "/changes", params={"since": self.cursor})
        except ServiceUnavailable as exc:
            raise FeedError(str(exc)) from exc
        if response.status_code >= 400:
            raise FeedError(error_message(response))
        return response.json()

    def poll(self) -> int:
        """Deliver every pending notification in order; return how many."""
        if self.closed:
            raise SubscriptionClosed("subscription has been released")

        delivered = 0
        while True:
            page = self._fetch()
            for event in page["events"]:
                self.handler(ChangeNotification.from_payload(event))
                self.cursor = event["cursor"]
                delivered += 1
            if not page["has_more"]:
                return delivered

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            logger.debug("Released change feed subscription at cursor %s", self.cursor)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()


class ChangeFeed:
    @staticmethod
    def head(api: ApiClient) -> int:
        try:
            response = api.request("GET", "/changes/head")
        except ServiceUnavailable as exc:
            raise FeedError(str(exc)) from exc
        if response.status_code >= 400:
            raise FeedError(error_message(response))
        return int(response.json()["cursor"])

    @classmethod
    def subscribe(
        cls,
        session: AuthSession,
        handler: Handler,
        since: int | None = None,
    ) -> Subscription | None:
        """Open a subscription, or return None when nobody is signed in."""
        if session.get_user() is None:
            logger.info("No active session; live updates disabled")
            return None
        cursor = cls.head(session.api) if since is None else since
        return Subscription(session.api, handler, cursor)
