from __future__ import annotations

import secrets

from itsdangerous import BadData, URLSafeTimedSerializer

from smartmarks.extensions import db
from smartmarks.models import LoginCode, User, utcnow


def _serializer(secret_key: str) -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(secret_key=secret_key, salt="one-time-login-code")


def issue_login_code(secret_key: str, user: User) -> str:
    nonce = secrets.token_urlsafe(24)
    db.session.add(LoginCode(user_id=user.id, nonce=nonce))
    db.session.commit()
    return _serializer(secret_key).dumps({"user_id": user.id, "nonce": nonce})


def redeem_login_code(secret_key: str, code: str, max_age: int) -> User | None:
    """Exchange a one-time code for its user, consuming the code.

    Returns None when the code is malformed, expired, already used, or
    belongs to a deactivated account.
    """
    if not code:
        return None
    try:
        payload = _serializer(secret_key).loads(code, max_age=max_age)
    except BadData:
        return None

    row = LoginCode.query.filter_by(nonce=payload.get("nonce")).first()
    if not row or row.used_at is not None or row.user_id != payload.get("user_id"):
        return None

    row.used_at = utcnow()
    db.session.commit()
    user = row.user
    if not user or not user.is_active:
        return None
    return user
