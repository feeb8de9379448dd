from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable

from dateutil import parser as dt_parser


@dataclass
class BookmarkRecord:
    id: int
    title: str
    url: str
    category: str
    created_at: datetime | None = None
    user_id: int | None = None

    @classmethod
    def from_row(cls, row: dict) -> "BookmarkRecord":
        created_at = row.get("created_at")
        return cls(
            id=int(row["id"]),
            title=row.get("title") or "",
            url=row.get("url") or "",
            category=row.get("category") or "",
            created_at=dt_parser.isoparse(created_at) if created_at else None,
            user_id=row.get("user_id"),
        )


class ChangeKind(enum.Enum):
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"


_EVENT_KINDS = {
    "INSERT": ChangeKind.CREATED,
    "UPDATE": ChangeKind.UPDATED,
    "DELETE": ChangeKind.DELETED,
}


@dataclass
class ChangeNotification:
    kind: ChangeKind
    record: BookmarkRecord | None = None
    bookmark_id: int | None = None
    cursor: int | None = field(default=None, compare=False)

    @classmethod
    def created(cls, record: BookmarkRecord) -> "ChangeNotification":
        return cls(ChangeKind.CREATED, record=record, bookmark_id=record.id)

    @classmethod
    def updated(cls, record: BookmarkRecord) -> "ChangeNotification":
        return cls(ChangeKind.UPDATED, record=record, bookmark_id=record.id)

    @classmethod
    def deleted(cls, bookmark_id: int) -> "ChangeNotification":
        return cls(ChangeKind.DELETED, bookmark_id=bookmark_id)

    @classmethod
    def from_payload(cls, payload: dict) -> "ChangeNotification":
        """Build a notification from a change-feed message.

        Messages look like ``{"eventType": "INSERT"|"UPDATE"|"DELETE",
        "new": row, "old": {"id": ...}}``.
        """
        event_type = str(payload.get("eventType") or "").upper()
        kind = _EVENT_KINDS.get(event_type)
        if kind is None:
            raise ValueError(f"unsupported change event type: {event_type!r}")

        cursor = payload.get("cursor")
        if kind is ChangeKind.DELETED:
            old = payload.get("old") or {}
            return cls(kind, bookmark_id=int(old["id"]), cursor=cursor)

        record = BookmarkRecord.from_row(payload.get("new") or {})
        return cls(kind, record=record, bookmark_id=record.id, cursor=cursor)


class Reconciler:
    """Ordered, newest-first mirror of the caller's bookmarks.

    Notifications are applied as delivered. A repeated ``created`` for an id
    already held is not de-duplicated, and ``updated``/``deleted`` for an
    unknown id are dropped.
    """

    def __init__(self, initial: Iterable[BookmarkRecord] = ()):
        self.bookmarks: list[BookmarkRecord] = list(initial)

    def __len__(self) -> int:
        return len(self.bookmarks)

    def apply(self, notification: ChangeNotification) -> None:
        if notification.kind is ChangeKind.CREATED:
            self.bookmarks.insert(0, notification.record)
        elif notification.kind is ChangeKind.UPDATED:
            record = notification.record
            self.bookmarks = [
                record if item.id == record.id else item for item in self.bookmarks
            ]
        elif notification.kind is ChangeKind.DELETED:
            self.bookmarks = [
                item for item in self.bookmarks if item.id != notification.bookmark_id
            ]

    def apply_all(self, notifications: Iterable[ChangeNotification]) -> None:
        for notification in notifications:
            self.apply(notification)

    def reset(self, records: Iterable[BookmarkRecord]) -> None:
        self.bookmarks = list(records)

    def snapshot(self) -> list[BookmarkRecord]:
        return list(self.bookmarks)

    def ids(self) -> list[int]:
        return [item.id for item in self.bookmarks]
