from __future__ import annotations

from datetime import timedelta

from smartmarks.extensions import db
from smartmarks.models import (
    EVENT_DELETE,
    EVENT_INSERT,
    EVENT_UPDATE,
    Bookmark,
    ChangeEvent,
    utcnow,
)

MAX_PAGE_SIZE = 1000


def _log_change(
    bookmark: Bookmark, event_type: str, new_row: dict | None, old_row: dict | None
) -> ChangeEvent:
    event = ChangeEvent(
        user_id=bookmark.user_id,
        event_type=event_type,
        entity_id=bookmark.id,
        new_row=new_row,
        old_row=old_row,
    )
    db.session.add(event)
    return event


def record_insert(bookmark: Bookmark) -> ChangeEvent:
    return _log_change(bookmark, EVENT_INSERT, bookmark.as_dict(), None)


def record_update(bookmark: Bookmark) -> ChangeEvent:
    return _log_change(bookmark, EVENT_UPDATE, bookmark.as_dict(), {"id": bookmark.id})


def record_delete(bookmark: Bookmark) -> ChangeEvent:
    return _log_change(bookmark, EVENT_DELETE, None, {"id": bookmark.id})


def head_cursor(user_id: int) -> int:
    return (
        db.session.query(db.func.max(ChangeEvent.id))
        .filter(ChangeEvent.user_id == user_id)
        .scalar()
        or 0
    )


def pull_changes(user_id: int, since: int, limit: int) -> dict:
    limit = max(1, min(limit, MAX_PAGE_SIZE))
    events = (
        ChangeEvent.query.filter_by(user_id=user_id)
        .filter(ChangeEvent.id > since)
        .order_by(ChangeEvent.id.asc())
        .limit(limit)
        .all()
    )
    latest_cursor = since
    if events:
        latest_cursor = events[-1].id
    return {
        "events": [event.as_dict() for event in events],
        "cursor": latest_cursor,
        "has_more": len(events) == limit,
    }


def prune_changes(retention_days: int) -> int:
    cutoff = utcnow() - timedelta(days=retention_days)
    removed = ChangeEvent.query.filter(ChangeEvent.created_at < cutoff).delete(
        synchronize_session=False
    )
    db.session.commit()
    return removed
