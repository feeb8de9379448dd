from __future__ import annotations

import logging

import httpx

from smartmarks.client.api import ApiClient, error_message
from smartmarks.client.errors import AuthenticationRequired, SmartmarksError

logger = logging.getLogger(__name__)


class AuthSession:
    """Client view of the authentication service.

    The session is the bearer token held by the wrapped ``ApiClient``; it is
    passed explicitly to whatever needs to know whether a caller is signed in.
    """

    def __init__(self, api: ApiClient):
        self.api = api

    @property
    def token(self) -> str | None:
        return self.api.token

    def get_user(self) -> dict | None:
        if not self.api.token:
            return None
        response = self.api.request("GET", "/auth/user")
        if response.status_code == 401:
            return None
        if response.status_code >= 400:
            raise SmartmarksError(error_message(response))
        return response.json()["user"]

    def _adopt_token(self, response: httpx.Response) -> dict:
        if response.status_code >= 400:
            raise AuthenticationRequired(error_message(response))
        payload = response.json()
        self.api.token = payload["token"]
        logger.info("Signed in as %s", payload["user"]["username"])
        return payload["user"]

    def sign_in(self, username: str, password: str, token_name: str = "client") -> dict:
        response = self.api.request(
            "POST",
            "/auth/token",
            json={"username": username, "password": password, "token_name": token_name},
        )
        return self._adopt_token(response)

    def exchange_code(self, code: str, token_name: str = "client") -> dict:
        response = self.api.request(
            "POST", "/auth/session", json={"code": code, "token_name": token_name}
        )
        return self._adopt_token(response)

    def sign_out(self) -> None:
        if not self.api.token:
            return
        try:
            self.api.request("POST", "/auth/signout")
        finally:
            self.api.token = None
