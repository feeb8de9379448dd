from __future__ import annotations

from typing import Callable

from smartmarks.client.errors import (
    AuthenticationRequired,
    MutationError,
    ValidationError,
)
from smartmarks.client.feed import ChangeFeed, Subscription
from smartmarks.client.gateway import MutationGateway
from smartmarks.client.loader import load_bookmarks
from smartmarks.client.reconciler import BookmarkRecord, Reconciler
from smartmarks.client.session import AuthSession
from smartmarks.services.presentation import extract_domain

ALL_CATEGORIES = "All"


class BookmarkView:
    """The live bookmark list for one signed-in caller.

    Use it as a context manager: entering loads the list and opens the change
    feed subscription, leaving always releases it.
    """

    def __init__(
        self,
        session: AuthSession,
        notify: Callable[[str], None] = print,
    ):
        self.session = session
        self.gateway = MutationGateway(session.api)
        self.reconciler = Reconciler()
        self.notify = notify
        self.subscription: Subscription | None = None
        self.active_category = ALL_CATEGORIES

    def activate(self) -> "BookmarkView":
        if self.session.get_user() is None:
            raise AuthenticationRequired("sign in to load bookmarks")
        # A write landing between the head read and the load is replayed on top.
        cursor = ChangeFeed.head(self.session.api)
        self.reconciler.reset(load_bookmarks(self.session.api))
        self.subscription = ChangeFeed.subscribe(
            self.session, self.reconciler.apply, since=cursor
        )
        return self

    def refresh(self) -> int:
        if self.subscription is None:
            return 0
        return self.subscription.poll()

    def close(self) -> None:
        if self.subscription is not None:
            self.subscription.close()
            self.subscription = None

    def __enter__(self):
        return self.activate()

    def __exit__(self, *exc_info):
        self.close()

    @property
    def live(self) -> bool:
        return self.subscription is not None

    def categories(self) -> list[str]:
        return sorted({item.category for item in self.reconciler.bookmarks})

    def filter_by(self, category: str | None) -> None:
        self.active_category = category or ALL_CATEGORIES

    def visible(self) -> list[BookmarkRecord]:
        if self.active_category == ALL_CATEGORIES:
            return self.reconciler.snapshot()
        return [
            item
            for item in self.reconciler.bookmarks
            if item.category == self.active_category
        ]

    def rows(self) -> list[tuple[int, str, str, str]]:
        return [
            (item.id, item.title, extract_domain(item.url), item.category)
            for item in self.visible()
        ]

    def _run(self, action: Callable[[], dict]) -> bool:
        try:
            action()
        except (MutationError, ValidationError) as exc:
            self.notify(str(exc))
            return False
        return True

    def add(self, title: str, url: str, category: str | None = None) -> bool:
        return self._run(lambda: self.gateway.create(title, url, category))

    def edit(
        self, bookmark_id: int, title: str, url: str, category: str | None = None
    ) -> bool:
        return self._run(lambda: self.gateway.update(bookmark_id, title, url, category))

    def remove(self, bookmark_id: int) -> bool:
        return self._run(lambda: self.gateway.delete(bookmark_id))
