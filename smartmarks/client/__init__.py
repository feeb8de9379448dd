from smartmarks.client.api import ApiClient
from smartmarks.client.config import ClientConfig
from smartmarks.client.errors import (
    AuthenticationRequired,
    FeedError,
    MutationError,
    ServiceUnavailable,
    SmartmarksError,
    SubscriptionClosed,
    ValidationError,
)
from smartmarks.client.feed import ChangeFeed, Subscription
from smartmarks.client.gateway import MutationGateway
from smartmarks.client.loader import load_bookmark, load_bookmarks
from smartmarks.client.reconciler import (
    BookmarkRecord,
    ChangeKind,
    ChangeNotification,
    Reconciler,
)
from smartmarks.client.session import AuthSession
from smartmarks.client.view import BookmarkView

__all__ = [
    "ApiClient",
    "AuthSession",
    "AuthenticationRequired",
    "BookmarkRecord",
    "BookmarkView",
    "ChangeFeed",
    "ChangeKind",
    "ChangeNotification",
    "ClientConfig",
    "FeedError",
    "MutationError",
    "MutationGateway",
    "Reconciler",
    "ServiceUnavailable",
    "SmartmarksError",
    "Subscription",
    "SubscriptionClosed",
    "ValidationError",
    "load_bookmark",
    "load_bookmarks",
]
