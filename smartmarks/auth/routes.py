from flask import (
    current_app,
    flash,
    redirect,
    render_template,
    request,
    url_for,
)
from flask_login import current_user, login_user, logout_user

from smartmarks.auth import auth_bp
from smartmarks.extensions import db
from smartmarks.models import User
from smartmarks.services.login_codes import redeem_login_code


def safe_next_path(raw_next: str | None, fallback: str = "/") -> str:
    candidate = (raw_next or "").strip()
    if candidate.startswith("/") and candidate[1:2] not in ("/", "\\"):
        return candidate
    return fallback


@auth_bp.route("/bootstrap", methods=["GET", "POST"])
def bootstrap_admin():
    if User.query.count() > 0:
        return redirect(url_for("auth.login"))

    if request.method == "POST":
        username = (request.form.get("username") or "").strip()
        password = request.form.get("password") or ""
        confirm = request.form.get("confirm_password") or ""

        if not username or not password:
            flash("Username and password are required.", "error")
        elif password != confirm:
            flash("Passwords do not match.", "error")
        else:
            admin = User(username=username, is_admin=True, is_active=True)
            admin.set_password(password)
            db.session.add(admin)
            db.session.commit()
            flash("Admin account created. Please sign in.", "success")
            return redirect(url_for("auth.login"))

    return render_template("bootstrap.html")


@auth_bp.route("/login", methods=["GET", "POST"])
def login():
    next_path = safe_next_path(request.values.get("next"))
    if current_user.is_authenticated:
        return redirect(next_path)

    if User.query.count() == 0:
        return redirect(url_for("auth.bootstrap_admin"))

    if request.method == "POST":
        username = (request.form.get("username") or "").strip()
        password = request.form.get("password") or ""

        user = User.query.filter_by(username=username).first()
        if user and user.is_active and user.check_password(password):
            login_user(user)
            current_app.logger.info("User %s signed in", user.id)
            return redirect(next_path)
        flash("Invalid credentials.", "error")

    return render_template("login.html", next_path=next_path)


@auth_bp.route("/auth/callback")
def callback():
    origin = request.host_url.rstrip("/")
    next_path = safe_next_path(request.args.get("next"))
    user = redeem_login_code(
        current_app.config["SECRET_KEY"],
        request.args.get("code") or "",
        max_age=current_app.config["LOGIN_CODE_TTL_SECONDS"],
    )
    if not user:
        return redirect(f"{origin}{url_for('auth.auth_code_error')}")

    login_user(user)
    current_app.logger.info("User %s signed in with a one-time code", user.id)
    forwarded_host = request.headers.get("X-Forwarded-Host")
    if forwarded_host and not current_app.debug:
        return redirect(f"https://{forwarded_host}{next_path}")
    return redirect(f"{origin}{next_path}")


@auth_bp.route("/auth/auth-code-error")
def auth_code_error():
    return render_template("auth_code_error.html"), 400


@auth_bp.route("/auth/signout", methods=["POST"])
def signout():
    if current_user.is_authenticated:
        current_app.logger.info("User %s signed out", current_user.id)
    logout_user()
    return redirect(url_for("auth.login"), code=303)
