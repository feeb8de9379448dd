from __future__ import annotations

from flask import abort, flash, redirect, render_template, request, url_for
from flask_login import current_user, login_required

from smartmarks.auth.routes import safe_next_path
from smartmarks.models import User
from smartmarks.services.bookmarks import (
    BookmarkInputError,
    bookmarks_query,
    create_bookmark,
    delete_bookmark,
    get_bookmark,
    list_bookmarks,
    list_categories,
    update_bookmark,
)
from smartmarks.services.changes import head_cursor
from smartmarks.web import web_bp

ALL_CATEGORIES = "All"


@web_bp.before_app_request
def first_run_gate():
    endpoint = request.endpoint or ""
    allowed_prefixes = {"static", "auth.bootstrap_admin", "auth.login"}
    if User.query.count() == 0 and endpoint not in allowed_prefixes:
        return redirect(url_for("auth.bootstrap_admin"))


def _active_category() -> str | None:
    category = (request.args.get("category") or "").strip()
    if not category or category == ALL_CATEGORIES:
        return None
    return category


def _back_to_list():
    return redirect(
        safe_next_path(request.form.get("next"), fallback=url_for("web.index"))
    )


def _owned_bookmark_or_404(bookmark_id: int):
    item = get_bookmark(current_user.id, bookmark_id)
    if not item:
        abort(404)
    return item


@web_bp.route("/")
@login_required
def index():
    category = _active_category()
    editing_id = request.args.get("edit", type=int)
    return render_template(
        "index.html",
        user=current_user,
        items=list_bookmarks(current_user.id, category=category),
        total=bookmarks_query(current_user.id).count(),
        categories=list_categories(current_user.id),
        active_category=category or ALL_CATEGORIES,
        editing_id=editing_id,
        cursor=head_cursor(current_user.id),
    )


@web_bp.route("/bookmarks", methods=["POST"])
@login_required
def bookmarks_create():
    try:
        create_bookmark(
            current_user.id,
            title=request.form.get("title"),
            url=request.form.get("url"),
            category=request.form.get("category"),
        )
    except BookmarkInputError as exc:
        flash(str(exc), "error")
    return _back_to_list()


@web_bp.route("/bookmarks/<int:bookmark_id>/edit", methods=["POST"])
@login_required
def bookmarks_edit(bookmark_id: int):
    item = _owned_bookmark_or_404(bookmark_id)
    try:
        update_bookmark(
            item,
            title=request.form.get("title"),
            url=request.form.get("url"),
            category=request.form.get("category"),
        )
    except BookmarkInputError as exc:
        flash(str(exc), "error")
    return _back_to_list()


@web_bp.route("/bookmarks/<int:bookmark_id>/delete", methods=["POST"])
@login_required
def bookmarks_delete(bookmark_id: int):
    item = _owned_bookmark_or_404(bookmark_id)
    delete_bookmark(item)
    return _back_to_list()
