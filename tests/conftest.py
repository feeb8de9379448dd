import httpx
import pytest

from smartmarks import create_app
from smartmarks.client.api import ApiClient
from smartmarks.config import TestConfig
from smartmarks.extensions import db
from smartmarks.models import User


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.drop_all()
        db.create_all()
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    def _make_user(username: str, password: str = "secret", is_admin=False):
        with app.app_context():
            user = User(username=username, is_admin=is_admin, is_active=True)
            user.set_password(password)
            db.session.add(user)
            db.session.commit()
            return user.id

    return _make_user


@pytest.fixture
def make_api(app):
    opened = []

    def _make_api(token=None):
        api = ApiClient(
            "http://testserver",
            token=token,
            transport=httpx.WSGITransport(app=app),
        )
        opened.append(api)
        return api

    yield _make_api
    for api in opened:
        api.close()
