import io

import httpx
import pytest

from smartmarks.client.api import ApiClient
from smartmarks.client.cli import build_parser, main, run
from smartmarks.client.config import ClientConfig
from smartmarks.client.errors import (
    AuthenticationRequired,
    MutationError,
    ServiceUnavailable,
    SubscriptionClosed,
    ValidationError,
)
from smartmarks.client.feed import ChangeFeed
from smartmarks.client.gateway import MutationGateway
from smartmarks.client.loader import load_bookmarks
from smartmarks.client.session import AuthSession
from smartmarks.client.view import BookmarkView


def _signed_in(make_api, username: str) -> AuthSession:
    session = AuthSession(make_api())
    session.sign_in(username, "secret")
    return session


def test_session_sign_in_get_user_and_sign_out(make_api, make_user):
    make_user("u1")
    session = AuthSession(make_api())
    assert session.get_user() is None

    user = session.sign_in("u1", "secret")
    assert user["username"] == "u1"
    token = session.token
    assert session.get_user()["username"] == "u1"

    session.sign_out()
    assert session.token is None
    assert session.get_user() is None
    assert AuthSession(make_api(token=token)).get_user() is None


def test_session_rejects_bad_credentials(make_api, make_user):
    make_user("u1")
    session = AuthSession(make_api())

    with pytest.raises(AuthenticationRequired):
        session.sign_in("u1", "wrong")
    assert session.token is None


def test_session_exchanges_one_time_code(make_api, make_user, client):
    make_user("u1")
    code = client.post(
        "/api/v1/auth/code", json={"username": "u1", "password": "secret"}
    ).get_json()["code"]

    session = AuthSession(make_api())
    assert session.exchange_code(code)["username"] == "u1"
    assert session.get_user()["username"] == "u1"

    with pytest.raises(AuthenticationRequired):
        AuthSession(make_api()).exchange_code(code)


def test_gateway_normalizes_before_submitting(make_api, make_user):
    make_user("u1")
    session = _signed_in(make_api, "u1")
    gateway = MutationGateway(session.api)

    row = gateway.create("Example", "example.com", "  ")
    assert row["url"] == "https://example.com"
    assert row["category"] == "Uncategorized"

    row = gateway.update(row["id"], "Example", "http://example.com", "Work")
    assert row["url"] == "http://example.com"
    assert row["category"] == "Work"

    assert [item.id for item in load_bookmarks(session.api)] == [row["id"]]


def test_gateway_requires_title_and_url(make_api, make_user):
    make_user("u1")
    gateway = MutationGateway(_signed_in(make_api, "u1").api)

    with pytest.raises(ValidationError):
        gateway.create("", "example.com")
    with pytest.raises(ValidationError):
        gateway.update(1, "Title", "   ")


def test_gateway_surfaces_store_rejection(make_api, make_user):
    make_user("u1")
    gateway = MutationGateway(_signed_in(make_api, "u1").api)

    with pytest.raises(MutationError) as excinfo:
        gateway.delete(12345)

    assert excinfo.value.status_code == 404
    assert excinfo.value.message == "bookmark not found"


def test_subscribe_without_session_returns_none(make_api, make_user):
    make_user("u1")
    delivered = []

    subscription = ChangeFeed.subscribe(AuthSession(make_api()), delivered.append)

    assert subscription is None
    assert delivered == []


def test_subscription_starts_at_head_and_delivers_in_order(app, make_api, make_user):
    make_user("u1")
    app.config["CHANGE_FEED_PAGE_SIZE"] = 2
    session = _signed_in(make_api, "u1")
    gateway = MutationGateway(session.api)
    gateway.create("Before", "before.example")

    delivered = []
    with ChangeFeed.subscribe(session, delivered.append) as subscription:
        for index in range(5):
            gateway.create(f"T{index}", f"t{index}.example")
        assert subscription.poll() == 5
        assert subscription.poll() == 0

    assert [item.record.title for item in delivered] == [f"T{i}" for i in range(5)]
    assert subscription.closed
    with pytest.raises(SubscriptionClosed):
        subscription.poll()


def test_view_mirrors_changes_from_another_tab(make_api, make_user):
    make_user("u1")
    tab_one = _signed_in(make_api, "u1")
    tab_two = _signed_in(make_api, "u1")
    other_gateway = MutationGateway(tab_two.api)
    first = other_gateway.create("First", "first.example")

    with BookmarkView(tab_one) as view:
        assert view.live
        assert [item.id for item in view.visible()] == [first["id"]]

        second = other_gateway.create("Second", "second.example", "Reading")
        view.refresh()
        assert [item.id for item in view.visible()] == [second["id"], first["id"]]

        other_gateway.update(first["id"], "First (renamed)", "first.example")
        view.refresh()
        assert [item.title for item in view.visible()] == ["Second", "First (renamed)"]

        other_gateway.delete(second["id"])
        view.refresh()
        assert [item.id for item in view.visible()] == [first["id"]]

        subscription = view.subscription

    assert not view.live
    assert subscription.closed


def test_view_applies_echo_of_its_own_writes_and_filters(make_api, make_user):
    make_user("u1")
    with BookmarkView(_signed_in(make_api, "u1")) as view:
        assert view.visible() == []

        assert view.add("Docs", "docs.python.org", "Docs")
        assert view.add("Recipe", "food.example")
        assert view.visible() == []

        view.refresh()
        assert [item.title for item in view.visible()] == ["Recipe", "Docs"]
        assert view.categories() == ["Docs", "Uncategorized"]

        view.filter_by("Docs")
        assert view.rows() == [
            (view.visible()[0].id, "Docs", "docs.python.org", "Docs")
        ]
        view.filter_by(None)
        assert len(view.visible()) == 2


def test_view_reports_failures_without_changing_state(make_api, make_user):
    make_user("u1")
    messages = []
    session = _signed_in(make_api, "u1")
    MutationGateway(session.api).create("Keep", "keep.example")

    with BookmarkView(session, notify=messages.append) as view:
        before = view.reconciler.snapshot()

        assert view.edit(999, "Nope", "nope.example") is False
        assert view.remove(999) is False
        assert view.add("", "") is False
        view.refresh()

        assert messages == [
            "bookmark not found",
            "bookmark not found",
            "Title and URL are required.",
        ]
        assert view.reconciler.snapshot() == before


def test_view_requires_session(make_api, make_user):
    make_user("u1")
    view = BookmarkView(AuthSession(make_api()))

    with pytest.raises(AuthenticationRequired):
        view.activate()
    assert view.subscription is None


def test_cli_add_and_list(app, make_user, make_api):
    make_user("u1")
    token = _signed_in(make_api, "u1").token
    config = ClientConfig(base_url="http://testserver", token=token)
    transport = httpx.WSGITransport(app=app)
    parser = build_parser()

    out = io.StringIO()
    add_args = parser.parse_args(["add", "Flask", "flask.palletsprojects.com"])
    assert run(add_args, config, transport, out) == 0
    assert run(parser.parse_args(["list"]), config, transport, out) == 0

    lines = out.getvalue().splitlines()
    assert lines[0] == "1 links"
    assert "Flask  [flask.palletsprojects.com]  (Uncategorized)" in lines[1]


def test_cli_edit_keeps_category_unless_given(app, make_user, make_api):
    make_user("u1")
    session = _signed_in(make_api, "u1")
    row = MutationGateway(session.api).create("Docs", "docs.example", "Reading")
    config = ClientConfig(base_url="http://testserver", token=session.token)
    transport = httpx.WSGITransport(app=app)
    parser = build_parser()

    args = parser.parse_args(["edit", str(row["id"]), "Docs v2", "docs.example"])
    assert run(args, config, transport, io.StringIO()) == 0
    (record,) = load_bookmarks(session.api)
    assert record.title == "Docs v2"
    assert record.category == "Reading"

    args = parser.parse_args(
        ["edit", str(row["id"]), "Docs v3", "docs.example", "--category", "Work"]
    )
    assert run(args, config, transport, io.StringIO()) == 0
    assert load_bookmarks(session.api)[0].category == "Work"


def test_cli_login_with_code_needs_no_username(app, client, make_user):
    make_user("u1")
    code = client.post(
        "/api/v1/auth/code", json={"username": "u1", "password": "secret"}
    ).get_json()["code"]
    out = io.StringIO()

    args = build_parser().parse_args(["login", "--code", code])
    config = ClientConfig(base_url="http://testserver")
    assert run(args, config, httpx.WSGITransport(app=app), out) == 0
    assert out.getvalue().strip().startswith("sm")


def _refusing_transport():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    return httpx.MockTransport(handler)


def test_unreachable_server_is_reported_per_action():
    messages = []
    api = ApiClient("http://testserver", token="t", transport=_refusing_transport())
    session = AuthSession(api)

    with pytest.raises(ServiceUnavailable):
        session.get_user()

    view = BookmarkView(session, notify=messages.append)
    assert view.add("Title", "example.com") is False
    assert view.remove(1) is False
    assert len(messages) == 2
    assert messages[0].startswith("cannot reach server")
    api.close()


def test_cli_reports_unreachable_server(monkeypatch, capsys):
    monkeypatch.setenv("SMARTMARKS_URL", "http://127.0.0.1:1")
    monkeypatch.setenv("SMARTMARKS_TOKEN", "sm_unused")
    monkeypatch.setenv("SMARTMARKS_TIMEOUT", "2")

    assert main(["list"]) == 1
    assert capsys.readouterr().err.startswith("error: cannot reach server")
