from __future__ import annotations

from smartmarks.extensions import db
from smartmarks.models import Bookmark
from smartmarks.services.changes import (
    record_delete,
    record_insert,
    record_update,
)
from smartmarks.services.common import normalize_category, normalize_url


class BookmarkInputError(ValueError):
    pass


def _require_text(*values) -> None:
    if any(value is not None and not isinstance(value, str) for value in values):
        raise BookmarkInputError("Title, URL and category must be text.")


def _clean_fields(title: str | None, url: str | None) -> tuple[str, str]:
    title = (title or "").strip()
    url = (url or "").strip()
    if not title or not url:
        raise BookmarkInputError("Title and URL are required.")
    return title, normalize_url(url)


def bookmarks_query(user_id: int, category: str | None = None):
    query = Bookmark.query.filter_by(user_id=user_id)
    if category:
        query = query.filter_by(category=category)
    return query


def list_bookmarks(user_id: int, category: str | None = None) -> list[Bookmark]:
    return (
        bookmarks_query(user_id, category=category)
        .order_by(Bookmark.created_at.desc(), Bookmark.id.desc())
        .all()
    )


def list_categories(user_id: int) -> list[str]:
    rows = (
        db.session.query(Bookmark.category)
        .filter(Bookmark.user_id == user_id)
        .distinct()
        .order_by(Bookmark.category.asc())
        .all()
    )
    return [row[0] for row in rows]


def get_bookmark(user_id: int, bookmark_id: int) -> Bookmark | None:
    return Bookmark.query.filter_by(id=bookmark_id, user_id=user_id).first()


def create_bookmark(
    user_id: int, title: str | None, url: str | None, category: str | None = None
) -> Bookmark:
    _require_text(title, url, category)
    title, url = _clean_fields(title, url)
    bookmark = Bookmark(
        user_id=user_id,
        title=title,
        url=url,
        category=normalize_category(category),
    )
    db.session.add(bookmark)
    db.session.flush()
    record_insert(bookmark)
    db.session.commit()
    return bookmark


def update_bookmark(
    bookmark: Bookmark,
    title: str | None,
    url: str | None,
    category: str | None = None,
) -> Bookmark:
    _require_text(title, url, category)
    title, url = _clean_fields(title, url)
    bookmark.title = title
    bookmark.url = url
    bookmark.category = normalize_category(category)
    db.session.flush()
    record_update(bookmark)
    db.session.commit()
    return bookmark


def delete_bookmark(bookmark: Bookmark) -> None:
    record_delete(bookmark)
    db.session.delete(bookmark)
    db.session.commit()
