from __future__ import annotations

from flask import current_app, g, jsonify, request, url_for

from smartmarks.api import api_bp
from smartmarks.extensions import db
from smartmarks.models import ApiToken, User
from smartmarks.services.bookmarks import (
    BookmarkInputError,
    create_bookmark,
    delete_bookmark,
    get_bookmark,
    list_bookmarks,
    list_categories,
    update_bookmark,
)
from smartmarks.services.changes import head_cursor, pull_changes
from smartmarks.services.login_codes import issue_login_code, redeem_login_code
from smartmarks.services.security import api_auth_required, revoke_request_token


def _json_object() -> dict:
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


def _text(payload: dict, key: str) -> str:
    value = payload.get(key)
    return value if isinstance(value, str) else ""


def _authenticate_credentials(payload: dict):
    username = _text(payload, "username").strip()
    password = _text(payload, "password")
    user = User.query.filter_by(username=username).first()
    if not user or not user.is_active or not user.check_password(password):
        return None
    return user


def _issue_api_token(user: User, name: str) -> str:
    raw_token, token_hash = ApiToken.issue_token()
    db.session.add(ApiToken(user_id=user.id, name=name, token_hash=token_hash))
    db.session.commit()
    return raw_token


def _get_user_bookmark_or_404(user_id: int, bookmark_id: int):
    bookmark = get_bookmark(user_id, bookmark_id)
    if not bookmark:
        return None, (jsonify({"error": "bookmark not found"}), 404)
    return bookmark, None


@api_bp.route("/health")
def health():
    return jsonify({"status": "ok"})


@api_bp.route("/auth/token", methods=["POST"])
def create_token_with_credentials():
    payload = _json_object()
    user = _authenticate_credentials(payload)
    if not user:
        return jsonify({"error": "invalid credentials"}), 401
    token_name = _text(payload, "token_name").strip() or "client"
    return jsonify({"token": _issue_api_token(user, token_name), "user": user.as_dict()})


@api_bp.route("/auth/code", methods=["POST"])
def create_login_code():
    payload = _json_object()
    user = _authenticate_credentials(payload)
    if not user:
        return jsonify({"error": "invalid credentials"}), 401
    code = issue_login_code(current_app.config["SECRET_KEY"], user)
    return jsonify(
        {
            "code": code,
            "expires_in": current_app.config["LOGIN_CODE_TTL_SECONDS"],
            "callback_url": url_for("auth.callback", code=code, _external=True),
        }
    )


@api_bp.route("/auth/session", methods=["POST"])
def exchange_code_for_session():
    payload = _json_object()
    user = redeem_login_code(
        current_app.config["SECRET_KEY"],
        _text(payload, "code").strip(),
        max_age=current_app.config["LOGIN_CODE_TTL_SECONDS"],
    )
    if not user:
        return jsonify({"error": "invalid or expired code"}), 400
    token_name = _text(payload, "token_name").strip() or "client"
    return jsonify({"token": _issue_api_token(user, token_name), "user": user.as_dict()})


@api_bp.route("/auth/user", methods=["GET"])
@api_auth_required()
def current_user_api():
    return jsonify({"user": g.api_user.as_dict()})


@api_bp.route("/auth/signout", methods=["POST"])
@api_auth_required(token_only=True)
def signout_api():
    revoke_request_token()
    current_app.logger.info("User %s revoked an API token", g.api_user.id)
    return jsonify({"status": "signed_out"})


@api_bp.route("/bookmarks", methods=["GET"])
@api_auth_required()
def bookmarks_list_api():
    category = (request.args.get("category") or "").strip() or None
    items = list_bookmarks(g.api_user.id, category=category)
    return jsonify({"items": [item.as_dict() for item in items]})


@api_bp.route("/bookmarks", methods=["POST"])
@api_auth_required()
def bookmarks_create_api():
    payload = _json_object()
    try:
        bookmark = create_bookmark(
            g.api_user.id,
            title=payload.get("title"),
            url=payload.get("url"),
            category=payload.get("category"),
        )
    except BookmarkInputError as exc:
        return jsonify({"error": str(exc)}), 400
    return jsonify(bookmark.as_dict()), 201


@api_bp.route("/bookmarks/<int:bookmark_id>", methods=["GET"])
@api_auth_required()
def bookmarks_get_api(bookmark_id: int):
    bookmark, error = _get_user_bookmark_or_404(g.api_user.id, bookmark_id)
    if error:
        return error
    return jsonify(bookmark.as_dict())


@api_bp.route("/bookmarks/<int:bookmark_id>", methods=["PATCH"])
@api_auth_required()
def bookmarks_update_api(bookmark_id: int):
    bookmark, error = _get_user_bookmark_or_404(g.api_user.id, bookmark_id)
    if error:
        return error
    payload = _json_object()
    try:
        update_bookmark(
            bookmark,
            title=payload.get("title"),
            url=payload.get("url"),
            category=payload.get("category"),
        )
    except BookmarkInputError as exc:
        return jsonify({"error": str(exc)}), 400
    return jsonify(bookmark.as_dict())


@api_bp.route("/bookmarks/<int:bookmark_id>", methods=["DELETE"])
@api_auth_required()
def bookmarks_delete_api(bookmark_id: int):
    bookmark, error = _get_user_bookmark_or_404(g.api_user.id, bookmark_id)
    if error:
        return error
    delete_bookmark(bookmark)
    return jsonify({"status": "deleted", "id": bookmark_id})


@api_bp.route("/categories", methods=["GET"])
@api_auth_required()
def categories_list_api():
    return jsonify({"items": list_categories(g.api_user.id)})


@api_bp.route("/changes", methods=["GET"])
@api_auth_required()
def changes_pull_api():
    since = request.args.get("since", default=0, type=int)
    limit = request.args.get(
        "limit", default=current_app.config["CHANGE_FEED_PAGE_SIZE"], type=int
    )
    return jsonify(pull_changes(g.api_user.id, since=since, limit=limit))


@api_bp.route("/changes/head", methods=["GET"])
@api_auth_required()
def changes_head_api():
    return jsonify({"cursor": head_cursor(g.api_user.id)})
